"""
Route definitions and the immutable route table built from them.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from subrouter.errors import ConfigurationError

# RFC 1035 label length
MAX_SUBDOMAIN_LENGTH = 63


@dataclass(frozen=True)
class Route:
    """
    A single routing rule.

    Attributes:
        path: Internal path prefix requests are rewritten under (e.g. "/dashboard")
        subdomain: Subdomain that selects this route; None marks the default route
    """

    path: str
    subdomain: str | None = None

    def __post_init__(self):
        # hostnames are case-insensitive; parsed labels are always lower-case
        if isinstance(self.subdomain, str):
            object.__setattr__(self, "subdomain", self.subdomain.strip().lower())

    @property
    def is_default(self) -> bool:
        return self.subdomain is None

    @classmethod
    def from_dict(cls, data: Mapping) -> "Route":
        """Build a Route from a ``{"path": ..., "subdomain": ...}`` mapping."""
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Route must be a mapping, got {type(data).__name__}", data)
        if "path" not in data:
            raise ConfigurationError("Route is missing 'path'", data)
        return cls(path=data["path"], subdomain=data.get("subdomain"))


def validate_route(route: Route) -> None:
    """
    Check a single route, raising ConfigurationError on the first problem.
    """
    path = route.path
    if not isinstance(path, str) or not path.startswith("/"):
        raise ConfigurationError(f"Route path must start with '/': {path!r}", path)
    if path.endswith("/"):
        raise ConfigurationError(f"Route path must not end with '/': {path!r}", path)

    subdomain = route.subdomain
    if subdomain is None:
        return
    if not isinstance(subdomain, str) or not subdomain:
        raise ConfigurationError(f"Subdomain cannot be empty for route {path}", subdomain)
    if not all(c.isalnum() or c == "-" for c in subdomain):
        raise ConfigurationError(
            f"Subdomain '{subdomain}' must contain only letters, numbers, and hyphens", subdomain
        )
    if len(subdomain) > MAX_SUBDOMAIN_LENGTH:
        raise ConfigurationError(
            f"Subdomain '{subdomain}' too long (max {MAX_SUBDOMAIN_LENGTH} characters)", subdomain
        )


def validate_routes(routes: Iterable[Route]) -> None:
    """
    Validate routes for malformed entries and duplicates.

    Raises:
        ConfigurationError: if two routes share a path or a subdomain
            (at most one default route is allowed)
    """
    seen_paths: set[str] = set()
    seen_subdomains: set[str | None] = set()

    for route in routes:
        validate_route(route)

        if route.path in seen_paths:
            raise ConfigurationError(f"Duplicate path found: {route.path}", route.path)
        seen_paths.add(route.path)

        if route.subdomain in seen_subdomains:
            raise ConfigurationError(
                f"Duplicate subdomain found: {route.subdomain or 'default'}", route.subdomain
            )
        seen_subdomains.add(route.subdomain)


class RouteTable:
    """
    Read-only lookup structure over an ordered list of routes.

    Built once at startup; construction fails on any ambiguity so a router
    never runs with a partially valid table.

    Example:
        table = RouteTable([
            Route("/admin", "admin"),
            Route("/blog"),  # default route
        ])
        table.get("admin")   # Route(path="/admin", subdomain="admin")
        table.default_route  # Route(path="/blog", subdomain=None)
    """

    __slots__ = ("_routes", "_by_subdomain", "_default_route")

    def __init__(self, routes: Iterable[Route | Mapping]):
        normalized = tuple(r if isinstance(r, Route) else Route.from_dict(r) for r in routes)
        validate_routes(normalized)

        self._routes = normalized
        self._by_subdomain = MappingProxyType({r.subdomain: r for r in normalized})
        self._default_route = self._by_subdomain.get(None)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def default_route(self) -> Route | None:
        return self._default_route

    @property
    def configured_subdomains(self) -> frozenset[str]:
        """Subdomains of every non-default route."""
        return frozenset(s for s in self._by_subdomain if s is not None)

    def get(self, subdomain: str | None) -> Route | None:
        """Return the route registered for ``subdomain`` (None for the default)."""
        return self._by_subdomain.get(subdomain)

    def to_list(self) -> list[dict]:
        return [{"path": r.path, "subdomain": r.subdomain} for r in self._routes]

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({list(self._routes)!r})"
