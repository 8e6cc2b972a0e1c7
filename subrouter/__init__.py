"""
subrouter - Subdomain and locale request rewriting for ASGI and WSGI apps
"""

__version__ = "0.1.0"

from .config import SubrouterConfig, load_config, validate_config
from .errors import ConfigurationError, SubrouterError
from .factory import create_app, create_router, enable_subdomain_routing
from .i18n import LocaleDetector
from .middleware import SubrouterMiddleware, SubrouterWSGIMiddleware
from .router import (
    BaseDomainPolicy,
    IntlSubrouter,
    PassThrough,
    Redirect,
    RequestMatcher,
    Rewrite,
    Route,
    RouteRequest,
    RouteTable,
    Subrouter,
    build_subdomain_url,
)

__all__ = [
    "BaseDomainPolicy",
    "ConfigurationError",
    "IntlSubrouter",
    "LocaleDetector",
    "PassThrough",
    "Redirect",
    "RequestMatcher",
    "Rewrite",
    "Route",
    "RouteRequest",
    "RouteTable",
    "Subrouter",
    "SubrouterConfig",
    "SubrouterError",
    "SubrouterMiddleware",
    "SubrouterWSGIMiddleware",
    "build_subdomain_url",
    "create_app",
    "create_router",
    "enable_subdomain_routing",
    "load_config",
    "validate_config",
    "__version__",
]
