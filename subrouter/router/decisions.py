"""
Request and decision values passed between routing stages.

Stages hand each other these values directly instead of signalling through
response headers. Every decision is immutable and describes the single
outcome for one request.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType({str(k).lower(): v for k, v in (headers or {}).items()})


@dataclass(frozen=True)
class RouteRequest:
    """
    Framework-independent view of an inbound request.

    Attributes:
        path: Decoded URL path (always starts with "/")
        host: Raw Host header value, possibly with a port
        headers: Request headers keyed by lower-cased name
        query_string: Raw query string without the leading "?"
        request_id: Correlation id used in debug logs
    """

    path: str = "/"
    host: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""
    request_id: str = "-"

    def __post_init__(self):
        object.__setattr__(self, "headers", _freeze_headers(self.headers))
        if not self.path.startswith("/"):
            object.__setattr__(self, "path", "/" + self.path)

    def with_path(self, path: str) -> "RouteRequest":
        """Return a copy of this request pointing at ``path``."""
        return RouteRequest(
            path=path,
            host=self.host,
            headers=self.headers,
            query_string=self.query_string,
            request_id=self.request_id,
        )


@dataclass(frozen=True)
class PassThrough:
    """Leave the request untouched. ``locale`` is set when one was recognized."""

    locale: str | None = None
    action = "pass_through"


@dataclass(frozen=True)
class Rewrite:
    """Serve the request from ``path`` internally; the browser URL is unchanged."""

    path: str
    locale: str | None = None
    action = "rewrite"


@dataclass(frozen=True)
class Redirect:
    """Answer with a redirect to ``location``."""

    location: str
    status_code: int = 307
    action = "redirect"


Decision = PassThrough | Rewrite | Redirect
