from .routes import billboards_router

__all__ = ["billboards_router"]
