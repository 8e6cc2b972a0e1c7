"""
WSGI middleware for subrouter path rewriting.

This middleware adds subdomain and locale based rewriting to WSGI
applications like Flask and Django. Rewrites change ``PATH_INFO`` before the
wrapped application sees the request; redirects are answered directly.
"""

import uuid
from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import Any

from subrouter.config import SubrouterConfig, load_config
from subrouter.router.decisions import Redirect, Rewrite, RouteRequest
from subrouter.router.matcher import RequestMatcher

# Headers WSGI servers expose without the HTTP_ prefix
_UNPREFIXED_HEADERS = {"CONTENT_TYPE": "content-type", "CONTENT_LENGTH": "content-length"}


def request_from_environ(environ: dict[str, Any]) -> RouteRequest:
    """Build a RouteRequest from a WSGI environ."""
    headers = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").lower()] = value
        elif key in _UNPREFIXED_HEADERS:
            headers[_UNPREFIXED_HEADERS[key]] = value

    return RouteRequest(
        path=environ.get("PATH_INFO") or "/",
        host=environ.get("HTTP_HOST", ""),
        headers=headers,
        query_string=environ.get("QUERY_STRING", ""),
        request_id=str(uuid.uuid4())[:8],
    )


class SubrouterWSGIMiddleware:
    """
    WSGI middleware for subdomain routing with subrouter.

    Same decisions as the ASGI middleware, applied to ``environ``:

    - ``PATH_INFO`` is replaced on rewrite
    - ``HTTP_X_LOCALE`` carries the resolved locale to the application
    - ``subrouter.subdomain``, ``subrouter.original_path``,
      ``subrouter.decision`` describe what happened

    The router's locale detector must be synchronous.

    Usage:
        from flask import Flask
        from subrouter.middleware.wsgi import SubrouterWSGIMiddleware

        app = Flask(__name__)
        app.wsgi_app = SubrouterWSGIMiddleware(app.wsgi_app)
    """

    def __init__(
        self,
        app: Callable,
        router=None,
        config: SubrouterConfig | None = None,
        matcher: RequestMatcher | None = None,
    ):
        """
        Initialize WSGI middleware.

        Args:
            app: The WSGI application to wrap
            router: Subrouter or IntlSubrouter (built from config when omitted)
            config: Configuration (loaded from subrouter.yml when omitted)
            matcher: Path filter (built from config when omitted)
        """
        self.app = app
        if router is None or matcher is None:
            config = config or load_config()
        self.router = router if router is not None else config.build_router()
        self.matcher = matcher if matcher is not None else config.build_matcher()

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        """
        WSGI application callable.

        Args:
            environ: WSGI environment dict
            start_response: WSGI start_response callable

        Returns:
            Response iterable
        """
        if not self.matcher.matches(environ.get("PATH_INFO") or "/"):
            return self.app(environ, start_response)

        request = request_from_environ(environ)
        decision = self.router.handle_sync(request)
        locale = getattr(decision, "locale", None)

        environ["subrouter.subdomain"] = self.router.subdomain_for(request)
        environ["subrouter.original_path"] = request.path
        environ["subrouter.decision"] = decision

        if isinstance(decision, Redirect):
            return self._redirect(decision, request, start_response)

        if isinstance(decision, Rewrite):
            environ["PATH_INFO"] = decision.path

        if locale:
            environ["HTTP_X_LOCALE"] = locale
            start_response = self._start_response_with_locale(start_response, locale)

        return self.app(environ, start_response)

    @staticmethod
    def _redirect(decision: Redirect, request: RouteRequest, start_response: Callable) -> Iterable[bytes]:
        location = decision.location
        if request.query_string and "?" not in location:
            location = f"{location}?{request.query_string}"

        try:
            reason = HTTPStatus(decision.status_code).phrase
        except ValueError:
            reason = "Redirect"
        start_response(
            f"{decision.status_code} {reason}",
            [("Location", location), ("Content-Type", "text/plain; charset=utf-8"), ("Content-Length", "0")],
        )
        return [b""]

    @staticmethod
    def _start_response_with_locale(start_response: Callable, locale: str) -> Callable:
        def wrapped(status, headers, exc_info=None):
            if not any(name.lower() == "x-locale" for name, _ in headers):
                headers = list(headers) + [("X-Locale", locale)]
            return start_response(status, headers, exc_info)

        return wrapped
