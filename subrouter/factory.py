"""
Factory functions for easy subrouter integration.
"""

import logging
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from subrouter import __version__
from subrouter.config import SubrouterConfig, load_config
from subrouter.middleware import SubrouterMiddleware
from subrouter.router.core import IntlSubrouter, Subrouter
from subrouter.router.matcher import RequestMatcher

logger = logging.getLogger("subrouter.factory")

# Prefix of the demo app's own endpoints; never routed
INTERNAL_PREFIX = "_subrouter"


def create_router(config: SubrouterConfig | None = None) -> Subrouter | IntlSubrouter:
    """
    Build the router described by a configuration.

    Args:
        config: Configuration (loaded from subrouter.yml when omitted)

    Returns:
        IntlSubrouter when locales are configured, otherwise Subrouter
    """
    return (config or load_config()).build_router()


def enable_subdomain_routing(
    app: FastAPI | Callable,
    config: SubrouterConfig | None = None,
    router: Subrouter | IntlSubrouter | None = None,
    matcher: RequestMatcher | None = None,
) -> FastAPI | Callable:
    """
    Enable subdomain routing for an existing ASGI application.

    Adds the subrouter middleware to your application. Routing details are
    available in request.scope["subrouter"].

    Args:
        app: ASGI application (FastAPI, Starlette, etc.)
        config: Optional configuration (loaded from subrouter.yml when omitted)
        router: Optional prebuilt router
        matcher: Optional path filter

    Returns:
        The same application with middleware added, or the wrapped ASGI callable

    Example:
        from fastapi import FastAPI, Request
        from subrouter import enable_subdomain_routing

        app = FastAPI()
        enable_subdomain_routing(app)

        @app.get("/blog/{slug}")
        def read_post(slug: str, request: Request):
            return {"subdomain": request.scope["subrouter"]["subdomain"]}
    """
    if router is None or matcher is None:
        config = config or load_config()
        router = router if router is not None else config.build_router()
        matcher = matcher if matcher is not None else config.build_matcher()

    if hasattr(app, "add_middleware"):
        # FastAPI/Starlette
        app.add_middleware(SubrouterMiddleware, router=router, matcher=matcher)
        return app
    # Generic ASGI app - wrap it
    return SubrouterMiddleware(app, router=router, matcher=matcher)


def create_app(config: SubrouterConfig | None = None) -> FastAPI:
    """
    Create a FastAPI application for trying a routing table locally.

    Every request that is not under /_subrouter is echoed back as JSON
    showing how it was routed.

    Endpoints:
        /_subrouter/health   liveness and route count
        /_subrouter/routes   the route table
        /_subrouter/metrics  routing decision counters

    Example:
        import uvicorn
        from subrouter import create_app

        uvicorn.run(create_app(), host="127.0.0.1", port=8000)
    """
    config = config or load_config()
    router = config.build_router()
    matcher = RequestMatcher([*config.exclude, INTERNAL_PREFIX], exclude_files=config.exclude_files)

    app = FastAPI(title="subrouter", version=__version__)
    enable_subdomain_routing(app, router=router, matcher=matcher)
    app.state.router = router
    app.state.config = config

    @app.get(f"/{INTERNAL_PREFIX}/health")
    async def health():
        """Lightweight health endpoint for liveness checks."""
        return JSONResponse(
            {
                "status": "ok",
                "version": __version__,
                "routes_count": len(router.table),
                "locales": list(config.locales),
                "uptime_seconds": router.metrics.snapshot()["uptime_seconds"],
            }
        )

    @app.get(f"/{INTERNAL_PREFIX}/routes")
    async def routes_endpoint():
        """Return the configured route table."""
        return JSONResponse(
            {
                "routes": router.table.to_list(),
                "base_domain_policy": router.base_domain_policy.value,
                "source": str(config.source) if config.source else None,
            }
        )

    @app.get(f"/{INTERNAL_PREFIX}/metrics")
    async def metrics_endpoint():
        """Routing decision counters with hostname cache stats."""
        data = router.metrics.snapshot()
        data["hostname_cache"] = router.hostname_cache.get_metrics()
        return JSONResponse(data)

    @app.api_route("/{full_path:path}", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"])
    async def echo(full_path: str, request: Request):
        """Show how the request was routed."""
        info = request.scope.get("subrouter", {})
        return JSONResponse(
            {
                "path": request.scope["path"],
                "original_path": info.get("original_path", request.scope["path"]),
                "subdomain": info.get("subdomain"),
                "locale": request.headers.get("x-locale"),
                "query": request.url.query,
            }
        )

    logger.info("Demo app ready with %d route(s)", len(router.table))
    return app
