"""FastAPI ASGI application entrypoint for the SignDesk API."""

from .core.app_factory import create_application

app = create_application()

__all__ = ("app",)
