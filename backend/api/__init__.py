# api/__init__.py
from api.server import app, configure_logging

__all__ = [
    "app",
    "configure_logging",
]
