"""
Default locale detection for requests whose path carries no locale.

The detector picks a locale from a cookie, then from Accept-Language, then
falls back to the default locale, and answers with a decision:

- ``always``: every unprefixed path redirects to its localized form
- ``as-needed``: the default locale is served from an internal rewrite,
  other locales redirect
- ``never``: always rewrite internally, URLs never show the locale
"""

import logging
from collections.abc import Iterable

from starlette.requests import cookie_parser

from subrouter.errors import ConfigurationError
from subrouter.router.decisions import Decision, PassThrough, Redirect, Rewrite, RouteRequest
from subrouter.router.locale import get_locale_from_path, prefix_locale

logger = logging.getLogger("subrouter.i18n")

LOCALE_PREFIX_MODES = ("always", "as-needed", "never")
DEFAULT_LOCALE_COOKIE = "SUBROUTER_LOCALE"


def parse_accept_language(header: str) -> list[str]:
    """
    Return the language tags of an Accept-Language header, best first.

    Tags with q=0, malformed weights and the "*" wildcard are dropped. Tags
    with equal weight keep their header order.

    Example:
        >>> parse_accept_language("ja;q=0.8, en-US, fr;q=0.9")
        ['en-US', 'fr', 'ja']
    """
    weighted: list[tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        tag, _, params = part.strip().partition(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue

        quality = 1.0
        params = params.strip()
        if params[:2].lower() == "q=":
            try:
                quality = float(params[2:])
            except ValueError:
                continue
        if quality <= 0:
            continue
        weighted.append((-quality, index, tag))

    return [tag for _, _, tag in sorted(weighted)]


class LocaleDetector:
    """
    Locale detection collaborator for ``IntlSubrouter``.

    Example:
        detector = LocaleDetector(["en", "ja"], "en", locale_prefix="as-needed")
        detector(RouteRequest("/about", headers={"accept-language": "ja"}))
        # Redirect(location="/ja/about", status_code=307)
    """

    def __init__(
        self,
        locales: Iterable[str],
        default_locale: str | None = None,
        *,
        cookie_name: str | None = DEFAULT_LOCALE_COOKIE,
        locale_prefix: str = "as-needed",
        redirect_status: int = 307,
    ):
        self.locales = tuple(locales)
        if not self.locales:
            raise ConfigurationError("At least one locale must be configured")
        self.default_locale = default_locale or self.locales[0]
        if self.default_locale not in self.locales:
            raise ConfigurationError(
                f"Default locale '{self.default_locale}' is not one of {list(self.locales)}", self.default_locale
            )
        if locale_prefix not in LOCALE_PREFIX_MODES:
            raise ConfigurationError(
                f"locale_prefix must be one of {', '.join(LOCALE_PREFIX_MODES)}", locale_prefix
            )
        self.cookie_name = cookie_name
        self.locale_prefix = locale_prefix
        self.redirect_status = redirect_status
        self._by_lower = {locale.lower(): locale for locale in self.locales}

    def _lookup(self, tag: str) -> str | None:
        tag = tag.strip().lower()
        if tag in self._by_lower:
            return self._by_lower[tag]
        primary = tag.split("-")[0]
        return self._by_lower.get(primary)

    def negotiate(self, request: RouteRequest) -> str:
        """Pick the locale for a request: cookie, then Accept-Language, then default."""
        if self.cookie_name:
            cookies = cookie_parser(request.headers.get("cookie", ""))
            preferred = cookies.get(self.cookie_name)
            if preferred and preferred in self.locales:
                return preferred

        for tag in parse_accept_language(request.headers.get("accept-language", "")):
            locale = self._lookup(tag)
            if locale:
                return locale

        return self.default_locale

    def __call__(self, request: RouteRequest) -> Decision:
        if get_locale_from_path(request.path, self.locales).is_valid:
            return PassThrough()

        locale = self.negotiate(request)
        if self.locale_prefix == "never" or (
            self.locale_prefix == "as-needed" and locale == self.default_locale
        ):
            return Rewrite(prefix_locale(locale, request.path), locale=locale)

        location = f"/{locale}" if request.path == "/" else prefix_locale(locale, request.path)
        if request.query_string:
            location = f"{location}?{request.query_string}"
        logger.debug("Redirecting %s to %s", request.path, location)
        return Redirect(location, self.redirect_status)
