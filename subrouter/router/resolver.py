"""
Subdomain to route resolution and the guards applied before a rewrite.
"""

from enum import Enum
from typing import NamedTuple

from subrouter.router.routes import Route, RouteTable
from subrouter.router.utils import is_localhost_or_ip


class BaseDomainPolicy(str, Enum):
    """
    Which subdomains count as "the base domain" and fall back to the default route.

    LOOPBACK: only localhost and numeric addresses.
    UNCONFIGURED: additionally any label that no non-default route claims,
        so app.example.com reaches the default route.
    """

    LOOPBACK = "loopback"
    UNCONFIGURED = "unconfigured"


class RouteResolution(NamedTuple):
    route: Route | None
    is_default: bool


NO_ROUTE = RouteResolution(None, False)


def is_base_domain(subdomain: str, table: RouteTable, policy: BaseDomainPolicy) -> bool:
    if is_localhost_or_ip(subdomain):
        return True
    if policy is BaseDomainPolicy.UNCONFIGURED:
        return subdomain not in table.configured_subdomains
    return False


def resolve_route(
    subdomain: str,
    table: RouteTable,
    policy: BaseDomainPolicy = BaseDomainPolicy.UNCONFIGURED,
) -> RouteResolution:
    """
    Resolve the route for a subdomain.

    Args:
        subdomain: Left-most host label ("" when the Host header was missing)
        table: Route table to resolve against
        policy: Base domain policy deciding when the default route applies

    Returns:
        RouteResolution; ``route`` is None when the request should pass through
    """
    route = table.get(subdomain) if subdomain else None
    if route is not None and not route.is_default:
        return RouteResolution(route, False)

    default_route = table.default_route
    if default_route is not None and is_base_domain(subdomain, table, policy):
        return RouteResolution(default_route, True)

    return NO_ROUTE


def should_block_direct_access(pathname: str, route: Route, is_default: bool) -> bool:
    """
    True when a user addresses the default route's internal prefix directly.

    /blog/post on the base domain must not be served as-is when /blog is
    the default route's target.
    """
    return is_default and pathname.startswith(route.path + "/")


def is_already_rewritten(pathname: str, route: Route) -> bool:
    """True when ``pathname`` already carries the route prefix (rewrite loop guard)."""
    return pathname.startswith(route.path + "/") and pathname != route.path


def rewrite_path(route: Route, pathname: str) -> str:
    return f"{route.path}{pathname}"
