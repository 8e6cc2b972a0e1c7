"""
Routing metrics collector.

Provides:
- Decision counts by action (pass_through, rewrite, redirect)
- Guard hit counts (direct_access, already_rewritten)
- Per-subdomain and per-locale statistics
"""

import time

from subrouter.router.decisions import Decision


class Metrics:
    """In-process counters for routing decisions. Never consulted when routing."""

    def __init__(self) -> None:
        self.start_time = time.time()
        self.requests_total = 0
        self.decisions: dict[str, int] = {"pass_through": 0, "rewrite": 0, "redirect": 0}
        self.guards: dict[str, int] = {"direct_access": 0, "already_rewritten": 0}
        self.requests_by_subdomain: dict[str, dict[str, int]] = {}
        self.requests_by_locale: dict[str, int] = {}

    def record(self, subdomain: str | None, decision: Decision) -> None:
        """
        Record the decision made for one request.

        Args:
            subdomain: Subdomain the request arrived on
            decision: Decision returned by the router
        """
        self.requests_total += 1
        self.decisions[decision.action] = self.decisions.get(decision.action, 0) + 1

        locale = getattr(decision, "locale", None)
        if locale:
            self.requests_by_locale[locale] = self.requests_by_locale.get(locale, 0) + 1

        if not subdomain:
            return
        bucket = self.requests_by_subdomain.setdefault(subdomain, {"count": 0, "rewrites": 0})
        bucket["count"] += 1
        if decision.action == "rewrite":
            bucket["rewrites"] += 1

    def record_guard(self, guard: str) -> None:
        """
        Record a guard that stopped a rewrite.

        Args:
            guard: "direct_access" or "already_rewritten"
        """
        self.guards[guard] = self.guards.get(guard, 0) + 1

    def get_rewrite_rate(self) -> float:
        """
        Share of requests that were rewritten.

        Returns:
            Rewrite rate as a percentage (0-100)
        """
        if self.requests_total == 0:
            return 0.0
        return round((self.decisions.get("rewrite", 0) / self.requests_total) * 100, 2)

    def snapshot(self) -> dict[str, object]:
        return {
            "uptime_seconds": int(time.time() - self.start_time),
            "requests_total": self.requests_total,
            "decisions": dict(self.decisions),
            "guards": dict(self.guards),
            "rewrite_rate": self.get_rewrite_rate(),
            "requests_by_subdomain": {k: dict(v) for k, v in self.requests_by_subdomain.items()},
            "requests_by_locale": dict(self.requests_by_locale),
        }
