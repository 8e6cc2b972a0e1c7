"""
Routing core: the subdomain router and its locale-aware composite.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import replace

from subrouter.errors import ConfigurationError
from subrouter.router.cache import HostnameCache
from subrouter.router.decisions import Decision, PassThrough, Redirect, Rewrite, RouteRequest
from subrouter.router.locale import LocaleMatch, get_locale_from_path, prefix_locale
from subrouter.router.metrics import Metrics
from subrouter.router.resolver import (
    BaseDomainPolicy,
    is_already_rewritten,
    resolve_route,
    rewrite_path,
    should_block_direct_access,
)
from subrouter.router.routes import Route, RouteTable
from subrouter.structured_logging import RequestLogger

logger = logging.getLogger("subrouter.router")

LocaleDetector = Callable[[RouteRequest], Decision | Awaitable[Decision]]


class Subrouter:
    """
    Rewrites requests to a path prefix chosen by the request's subdomain.

    Example:
        router = Subrouter([
            Route("/admin", "admin"),
            Route("/blog"),  # default route
        ])
        await router.handle(RouteRequest("/users", host="admin.example.com"))
        # Rewrite(path="/admin/users")
    """

    def __init__(
        self,
        routes: RouteTable | Iterable[Route | Mapping],
        *,
        debug: bool = False,
        base_domain_policy: BaseDomainPolicy | str = BaseDomainPolicy.UNCONFIGURED,
        hostname_cache: HostnameCache | None = None,
        metrics: Metrics | None = None,
    ):
        """
        Initialize the router.

        Args:
            routes: Route table, or routes to build one from
            debug: Log every decision point
            base_domain_policy: When unknown subdomains fall back to the default route
            hostname_cache: Shared Host header cache (a new one by default)
            metrics: Shared metrics collector (a new one by default)

        Raises:
            ConfigurationError: if the routes are ambiguous or malformed
        """
        self.table = routes if isinstance(routes, RouteTable) else RouteTable(routes)
        self.debug = debug
        try:
            self.base_domain_policy = BaseDomainPolicy(base_domain_policy)
        except ValueError:
            raise ConfigurationError(
                f"Unknown base domain policy: {base_domain_policy}", base_domain_policy
            ) from None
        self.hostname_cache = hostname_cache if hostname_cache is not None else HostnameCache()
        self.metrics = metrics if metrics is not None else Metrics()

    def subdomain_for(self, request: RouteRequest) -> str:
        return self.hostname_cache.parse(request.host).subdomain

    def route(self, request: RouteRequest) -> PassThrough | Rewrite:
        """
        Decide how to serve ``request.path`` for the request's host.

        Does not record metrics for the request as a whole; ``handle`` does.
        """
        log = RequestLogger(logger, request.request_id, enabled=self.debug)
        pathname = request.path
        subdomain = self.subdomain_for(request)
        route, is_default = resolve_route(subdomain, self.table, self.base_domain_policy)

        log.info(
            "Resolved subdomain %r",
            subdomain,
            extra={
                "subdomain": subdomain,
                "request_path": pathname,
                "route_path": route.path if route else None,
                "route_subdomain": route.subdomain if route else None,
                "is_default_route": is_default,
            },
        )

        if route is None:
            log.info("No route found - passing through")
            return PassThrough()

        if should_block_direct_access(pathname, route, is_default):
            self.metrics.record_guard("direct_access")
            log.info("Direct access to %s blocked", route.path, extra={"guard": "direct_access"})
            return PassThrough()

        if is_already_rewritten(pathname, route):
            self.metrics.record_guard("already_rewritten")
            log.info("Already rewritten - passing through", extra={"guard": "already_rewritten"})
            return PassThrough()

        target = rewrite_path(route, pathname)
        log.info("Rewriting %s -> %s", pathname, target, extra={"rewrite_to": target})
        return Rewrite(target)

    def handle_sync(self, request: RouteRequest) -> Decision:
        decision = self.route(request)
        self.metrics.record(self.subdomain_for(request), decision)
        return decision

    async def handle(self, request: RouteRequest) -> Decision:
        return self.handle_sync(request)


class IntlSubrouter:
    """
    Combines locale prefixes with subdomain routing.

    The locale always stays the outermost path segment: with locale "ja"
    and route ("/piyo", "piyo"), a request for piyo.example.com/ is
    rewritten to /ja/piyo/.

    Paths without a locale are first handed to ``locale_detector``. Its
    redirects are returned untouched; when it rewrites to a localized path,
    the locale it chose is carried into the subdomain rewrite.

    Example:
        router = IntlSubrouter(
            [Route("/piyo", "piyo"), Route("/hoge")],
            LocaleDetector(["en", "ja"], "en"),
            locales=["en", "ja"],
            default_locale="en",
        )
    """

    def __init__(
        self,
        routes: RouteTable | Iterable[Route | Mapping],
        locale_detector: LocaleDetector | None = None,
        *,
        locales: Iterable[str],
        default_locale: str | None = None,
        debug: bool = False,
        base_domain_policy: BaseDomainPolicy | str = BaseDomainPolicy.UNCONFIGURED,
        hostname_cache: HostnameCache | None = None,
        metrics: Metrics | None = None,
    ):
        self.locales = tuple(locales)
        if not self.locales:
            raise ConfigurationError("At least one locale must be configured")
        if default_locale is not None and default_locale not in self.locales:
            raise ConfigurationError(
                f"Default locale '{default_locale}' is not one of {list(self.locales)}", default_locale
            )
        self.default_locale = default_locale or self.locales[0]
        self.locale_detector = locale_detector
        self._locale_set = frozenset(self.locales)

        self.subrouter = Subrouter(
            routes,
            debug=debug,
            base_domain_policy=base_domain_policy,
            hostname_cache=hostname_cache,
            metrics=metrics,
        )

    @property
    def table(self) -> RouteTable:
        return self.subrouter.table

    @property
    def debug(self) -> bool:
        return self.subrouter.debug

    @property
    def base_domain_policy(self) -> BaseDomainPolicy:
        return self.subrouter.base_domain_policy

    @property
    def hostname_cache(self) -> HostnameCache:
        return self.subrouter.hostname_cache

    @property
    def metrics(self) -> Metrics:
        return self.subrouter.metrics

    def subdomain_for(self, request: RouteRequest) -> str:
        return self.subrouter.subdomain_for(request)

    def split_locale(self, pathname: str) -> LocaleMatch:
        return get_locale_from_path(pathname, self._locale_set)

    def _route_localized(
        self, request: RouteRequest, locale: str, clean_path: str, log: RequestLogger
    ) -> Rewrite | None:
        """Route ``clean_path`` and put ``locale`` back in front of any rewrite."""
        decision = self.subrouter.route(request.with_path(clean_path))
        if not isinstance(decision, Rewrite):
            return None

        target = prefix_locale(locale, decision.path)
        log.info("Final rewrite with locale: %s", target, extra={"rewrite_to": target, "locale": locale})
        return Rewrite(target, locale=locale)

    def _route_path_locale(self, request: RouteRequest, log: RequestLogger) -> Decision | None:
        match = self.split_locale(request.path)
        if not match.is_valid:
            return None

        log.info(
            "Path has valid locale %s",
            match.locale,
            extra={"locale": match.locale, "path_without_locale": match.path_without_locale},
        )
        rewritten = self._route_localized(request, match.locale, match.path_without_locale, log)
        return rewritten or PassThrough(locale=match.locale)

    def _route_detected(self, request: RouteRequest, detected: Decision, log: RequestLogger) -> Decision:
        if isinstance(detected, Redirect):
            log.info("Locale detection redirected to %s", detected.location, extra={"redirect_to": detected.location})
            return detected

        if isinstance(detected, Rewrite):
            match = self.split_locale(detected.path)
            if match.is_valid:
                log.info(
                    "Locale detection chose %s",
                    match.locale,
                    extra={"locale": match.locale, "path_without_locale": match.path_without_locale},
                )
                rewritten = self._route_localized(request, match.locale, match.path_without_locale, log)
                return rewritten or replace(detected, locale=match.locale)

        log.info("No locale rewrite, continuing with subdomain routing")
        return self.subrouter.route(request)

    def _detect(self, request: RouteRequest) -> Decision | Awaitable[Decision]:
        if self.locale_detector is None:
            return PassThrough()
        return self.locale_detector(request)

    def _finish(self, request: RouteRequest, decision: Decision) -> Decision:
        self.metrics.record(self.subdomain_for(request), decision)
        return decision

    async def handle(self, request: RouteRequest) -> Decision:
        """
        Decide how to serve one request.

        Returns:
            PassThrough, Rewrite or Redirect
        """
        log = RequestLogger(logger, request.request_id, enabled=self.debug)
        log.info("Processing %s", request.path, extra={"request_path": request.path})

        decision = self._route_path_locale(request, log)
        if decision is None:
            log.info("No valid locale, delegating to locale detection")
            detected = self._detect(request)
            if inspect.isawaitable(detected):
                detected = await detected
            decision = self._route_detected(request, detected, log)
        return self._finish(request, decision)

    def handle_sync(self, request: RouteRequest) -> Decision:
        """
        Synchronous ``handle`` for WSGI stacks.

        Raises:
            TypeError: if the locale detector is asynchronous
        """
        log = RequestLogger(logger, request.request_id, enabled=self.debug)
        log.info("Processing %s", request.path, extra={"request_path": request.path})

        decision = self._route_path_locale(request, log)
        if decision is None:
            detected = self._detect(request)
            if inspect.isawaitable(detected):
                if inspect.iscoroutine(detected):
                    detected.close()
                raise TypeError("handle_sync() needs a synchronous locale detector; await handle() instead")
            decision = self._route_detected(request, detected, log)
        return self._finish(request, decision)
