"""
Decides which request paths the subdomain router looks at at all.
"""

from collections.abc import Iterable

DEFAULT_EXCLUDE = ("api", "trpc", "_next", "_vercel", "static")


class RequestMatcher:
    """
    Path filter applied before routing.

    A path is skipped when, after its leading "/", it starts with one of the
    excluded prefixes ("/api/users", "/static/app.css", but also "/apiary"),
    or when it contains a dot anywhere (file requests such as /favicon.ico).

    Example:
        matcher = RequestMatcher(exclude=["api", "assets"])
        matcher.matches("/dashboard")    # True
        matcher.matches("/api/v1/users") # False
        matcher.matches("/robots.txt")   # False
    """

    def __init__(self, exclude: Iterable[str] | None = None, exclude_files: bool = True):
        prefixes = DEFAULT_EXCLUDE if exclude is None else exclude
        self.exclude = tuple(p.strip("/") for p in prefixes if p.strip("/"))
        self.exclude_files = exclude_files

    def matches(self, path: str) -> bool:
        """Return True if ``path`` should be routed."""
        if self.exclude_files and "." in path:
            return False
        rest = path[1:] if path.startswith("/") else path
        return not (self.exclude and rest.startswith(self.exclude))

    __call__ = matches
