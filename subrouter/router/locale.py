"""
Locale prefix detection on URL paths.
"""

from collections.abc import Collection
from typing import NamedTuple


class LocaleMatch(NamedTuple):
    """
    Result of splitting a path on its first segment.

    Attributes:
        locale: First path segment if it is a configured locale, else None
        path_without_locale: Path with the locale segment removed
            (the original path when no locale was recognized)
    """

    locale: str | None
    path_without_locale: str

    @property
    def is_valid(self) -> bool:
        return self.locale is not None


def get_locale_from_path(pathname: str, locales: Collection[str]) -> LocaleMatch:
    """
    Split a leading locale segment off ``pathname``.

    Empty segments are ignored, so "//ja" still carries the "ja" locale. A
    trailing slash after the remainder is kept ("/ja/docs/" -> "/docs/"),
    while a bare locale becomes the root ("/ja" and "/ja/" -> "/").

    Examples:
        >>> get_locale_from_path("/ja/about", {"en", "ja"})
        LocaleMatch(locale='ja', path_without_locale='/about')
        >>> get_locale_from_path("/about", {"en", "ja"})
        LocaleMatch(locale=None, path_without_locale='/about')
    """
    segments = [segment for segment in pathname.split("/") if segment]
    if not segments or segments[0] not in locales:
        return LocaleMatch(None, pathname)

    remainder = segments[1:]
    if not remainder:
        return LocaleMatch(segments[0], "/")

    path_without_locale = "/" + "/".join(remainder)
    if pathname.endswith("/"):
        path_without_locale += "/"
    return LocaleMatch(segments[0], path_without_locale)


def prefix_locale(locale: str, path: str) -> str:
    """Put ``locale`` back in front of ``path`` as its outermost segment."""
    return f"/{locale}{path}"
