from .routes import get_explorer_service, router

__all__ = ["get_explorer_service", "router"]
