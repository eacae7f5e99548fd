from .routes import marquee_router

__all__ = ["marquee_router"]
