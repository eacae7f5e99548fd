from .routes import settings_router

__all__ = ["settings_router"]
