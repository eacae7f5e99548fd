from .routes import analytics_router

__all__ = ["analytics_router"]
