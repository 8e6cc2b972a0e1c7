"""Routing core: hostname parsing, route table, resolution and the composite router."""

from .cache import HostnameCache
from .core import IntlSubrouter, Subrouter
from .decisions import Decision, PassThrough, Redirect, Rewrite, RouteRequest
from .locale import LocaleMatch, get_locale_from_path
from .matcher import RequestMatcher
from .metrics import Metrics
from .resolver import BaseDomainPolicy, RouteResolution, resolve_route
from .routes import Route, RouteTable
from .utils import ParsedHostname, build_subdomain_url, parse_hostname

__all__ = [
    "BaseDomainPolicy",
    "Decision",
    "HostnameCache",
    "IntlSubrouter",
    "LocaleMatch",
    "Metrics",
    "ParsedHostname",
    "PassThrough",
    "Redirect",
    "RequestMatcher",
    "Rewrite",
    "Route",
    "RouteRequest",
    "RouteResolution",
    "RouteTable",
    "Subrouter",
    "build_subdomain_url",
    "get_locale_from_path",
    "parse_hostname",
    "resolve_route",
]
