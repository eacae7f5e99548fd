from .routes import categories_router, brands_router

__all__ = ["categories_router", "brands_router"]
