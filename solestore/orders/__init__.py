from .routes import orders_router

__all__ = ["orders_router"]
