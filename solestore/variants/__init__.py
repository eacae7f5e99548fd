from .routes import variants_router, variant_tools_router

__all__ = ["variants_router", "variant_tools_router"]
