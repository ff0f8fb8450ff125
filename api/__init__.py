"""
HTTP layer.

FastAPI application factory, routes, request/response schemas, body size
limit and the JSON error translation layer.
"""

from .app import create_app
from .errors import install_error_handlers
from .limits import BodySizeLimitMiddleware

__all__ = [
    "create_app",
    "install_error_handlers",
    "BodySizeLimitMiddleware",
]
