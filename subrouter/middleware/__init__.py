"""ASGI and WSGI middleware applying subrouter decisions."""

from .asgi import SubrouterMiddleware
from .wsgi import SubrouterWSGIMiddleware

__all__ = ["SubrouterMiddleware", "SubrouterWSGIMiddleware"]
