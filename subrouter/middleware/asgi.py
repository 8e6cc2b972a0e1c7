"""
ASGI middleware applying subrouter decisions in FastAPI, Starlette, etc.
"""

import uuid
from urllib.parse import quote

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from subrouter.config import SubrouterConfig, load_config
from subrouter.router.decisions import Redirect, Rewrite, RouteRequest
from subrouter.router.matcher import RequestMatcher

LOCALE_HEADER = "x-locale"


def request_from_scope(scope: Scope) -> RouteRequest:
    """Build a RouteRequest from an HTTP scope."""
    headers = Headers(scope=scope)
    return RouteRequest(
        path=scope.get("path") or "/",
        host=headers.get("host", ""),
        headers=dict(headers.items()),
        query_string=scope.get("query_string", b"").decode("latin-1"),
        request_id=str(uuid.uuid4())[:8],
    )


class SubrouterMiddleware:
    """
    ASGI middleware for subdomain and locale based path rewriting.

    Rewrites are internal: the app sees the rewritten ``scope["path"]`` and
    an ``x-locale`` request header, the client keeps its URL. Redirect
    decisions are answered directly. Routing details are stored in
    ``scope["subrouter"]``.

    Example:
        from fastapi import FastAPI
        from subrouter import SubrouterMiddleware, Subrouter, Route

        app = FastAPI()
        app.add_middleware(
            SubrouterMiddleware,
            router=Subrouter([Route("/admin", "admin"), Route("/site")]),
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        router=None,
        config: SubrouterConfig | None = None,
        matcher: RequestMatcher | None = None,
    ):
        """
        Initialize the middleware.

        Args:
            app: ASGI application callable
            router: Subrouter or IntlSubrouter (built from config when omitted)
            config: Configuration (loaded from subrouter.yml when omitted)
            matcher: Path filter (built from config when omitted)
        """
        self.app = app
        if router is None or matcher is None:
            config = config or load_config()
        self.router = router if router is not None else config.build_router()
        self.matcher = matcher if matcher is not None else config.build_matcher()

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http" or not self.matcher.matches(scope.get("path") or "/"):
            await self.app(scope, receive, send)
            return

        request = request_from_scope(scope)
        decision = await self.router.handle(request)
        locale = getattr(decision, "locale", None)

        scope["subrouter"] = {
            "subdomain": self.router.subdomain_for(request),
            "original_path": request.path,
            "decision": decision,
            "locale": locale,
        }

        if isinstance(decision, Redirect):
            location = decision.location
            if request.query_string and "?" not in location:
                location = f"{location}?{request.query_string}"
            response = RedirectResponse(location, status_code=decision.status_code)
            await response(scope, receive, send)
            return

        if isinstance(decision, Rewrite):
            scope["path"] = decision.path
            scope["raw_path"] = quote(decision.path, safe="/:@!$&'()*+,;=~").encode("ascii")

        if locale:
            scope["headers"] = [
                (name, value) for name, value in scope.get("headers", []) if name.lower() != LOCALE_HEADER.encode()
            ] + [(LOCALE_HEADER.encode(), locale.encode("latin-1"))]
            send = self._send_with_locale(send, locale)

        await self.app(scope, receive, send)

    @staticmethod
    def _send_with_locale(send: Send, locale: str) -> Send:
        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.setdefault("X-Locale", locale)
            await send(message)

        return send_wrapper
