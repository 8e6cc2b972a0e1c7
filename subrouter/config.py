"""Configuration loading for subrouter.yml / subrouter.json and environment overrides"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .i18n import LocaleDetector
from .router.core import IntlSubrouter, Subrouter
from .router.matcher import DEFAULT_EXCLUDE, RequestMatcher
from .router.resolver import BaseDomainPolicy
from .router.routes import Route, RouteTable, validate_routes

CONFIG_FILENAMES = ("subrouter.yml", "subrouter.yaml", "subrouter.json")
TRUTHY = {"1", "true", "yes", "on"}

# Search up to this many parent directories for a config file
MAX_SEARCH_DEPTH = 10


@dataclass
class SubrouterConfig:
    """
    Router configuration.

    Schema (subrouter.yml):
        routes:                      # ordered; at most one entry without subdomain
          - path: /hoge              # default route
          - path: /fuga
            subdomain: fuga
        locales: [en, ja]            # optional; enables locale-aware routing
        default_locale: en           # default: first locale
        locale_prefix: as-needed     # always | as-needed | never
        locale_cookie: SUBROUTER_LOCALE
        redirect_status: 307
        base_domain_policy: unconfigured   # unconfigured | loopback
        exclude: [api, trpc, _next, _vercel, static]
        exclude_files: true
        debug: false
    """

    routes: list[Route] = field(default_factory=list)
    locales: list[str] = field(default_factory=list)
    default_locale: str | None = None
    locale_prefix: str = "as-needed"
    locale_cookie: str | None = "SUBROUTER_LOCALE"
    redirect_status: int = 307
    base_domain_policy: str = BaseDomainPolicy.UNCONFIGURED.value
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    exclude_files: bool = True
    debug: bool = False
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> "SubrouterConfig":
        """
        Build a config from parsed file contents.

        Raises:
            ConfigurationError: listing every problem found
        """
        is_valid, errors = validate_config(data)
        if not is_valid:
            raise ConfigurationError("Invalid configuration:\n  - " + "\n  - ".join(errors), data)

        defaults = cls()
        return cls(
            routes=[Route.from_dict(r) for r in data.get("routes") or []],
            locales=list(data.get("locales") or []),
            default_locale=data.get("default_locale"),
            locale_prefix=data.get("locale_prefix", defaults.locale_prefix),
            locale_cookie=data.get("locale_cookie", defaults.locale_cookie),
            redirect_status=int(data.get("redirect_status", defaults.redirect_status)),
            base_domain_policy=data.get("base_domain_policy", defaults.base_domain_policy),
            exclude=list(data.get("exclude", defaults.exclude)),
            exclude_files=bool(data.get("exclude_files", defaults.exclude_files)),
            debug=bool(data.get("debug", defaults.debug)),
            source=source,
        )

    def build_route_table(self) -> RouteTable:
        return RouteTable(self.routes)

    def build_matcher(self) -> RequestMatcher:
        return RequestMatcher(self.exclude, exclude_files=self.exclude_files)

    def build_router(self) -> Subrouter | IntlSubrouter:
        """
        Build the router described by this config.

        Returns:
            IntlSubrouter when locales are configured, otherwise Subrouter
        """
        table = self.build_route_table()
        if not self.locales:
            return Subrouter(table, debug=self.debug, base_domain_policy=self.base_domain_policy)

        detector = LocaleDetector(
            self.locales,
            self.default_locale,
            cookie_name=self.locale_cookie,
            locale_prefix=self.locale_prefix,
            redirect_status=self.redirect_status,
        )
        return IntlSubrouter(
            table,
            detector,
            locales=self.locales,
            default_locale=self.default_locale,
            debug=self.debug,
            base_domain_policy=self.base_domain_policy,
        )


def validate_config(data: Any) -> tuple[bool, list[str]]:
    """
    Validate raw configuration data without raising.

    Args:
        data: Parsed YAML/JSON document

    Returns:
        (is_valid, errors) tuple
    """
    if not isinstance(data, dict):
        return False, [f"Configuration must be a mapping, got {type(data).__name__}"]

    errors: list[str] = []

    routes = data.get("routes") or []
    if not isinstance(routes, list):
        errors.append("'routes' must be a list")
    else:
        try:
            validate_routes([Route.from_dict(r) for r in routes])
        except ConfigurationError as e:
            errors.append(str(e))

    locales = data.get("locales") or []
    if not isinstance(locales, list) or not all(isinstance(locale, str) and locale for locale in locales):
        errors.append("'locales' must be a list of locale codes")
        locales = []
    elif len(set(locales)) != len(locales):
        errors.append("'locales' contains duplicates")

    default_locale = data.get("default_locale")
    if default_locale is not None:
        if not locales:
            errors.append("'default_locale' requires 'locales'")
        elif default_locale not in locales:
            errors.append(f"Default locale '{default_locale}' is not one of {locales}")

    locale_prefix = data.get("locale_prefix", "as-needed")
    if locale_prefix not in ("always", "as-needed", "never"):
        errors.append(f"Unknown locale_prefix: {locale_prefix} (expected always, as-needed or never)")

    policy = data.get("base_domain_policy", BaseDomainPolicy.UNCONFIGURED.value)
    if policy not in {p.value for p in BaseDomainPolicy}:
        errors.append(f"Unknown base_domain_policy: {policy} (expected unconfigured or loopback)")

    redirect_status = data.get("redirect_status", 307)
    if not isinstance(redirect_status, int) or isinstance(redirect_status, bool) or not 300 <= redirect_status <= 399:
        errors.append(f"redirect_status must be a 3xx status code, got {redirect_status!r}")

    exclude = data.get("exclude", [])
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        errors.append("'exclude' must be a list of path prefixes")

    return len(errors) == 0, errors


def find_config_file(start_path: Path | None = None) -> Path | None:
    """
    Locate the config file.

    SUBROUTER_CONFIG wins; otherwise search the start directory and its
    parents for subrouter.yml, subrouter.yaml or subrouter.json.
    """
    env_path = os.getenv("SUBROUTER_CONFIG")
    if env_path:
        return Path(env_path)

    current = Path(start_path or os.getcwd()).resolve()
    for _ in range(MAX_SEARCH_DEPTH):
        for filename in CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON config file; an empty file reads as {}."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read {path}: {e}", str(path)) from e

    if not content.strip():
        return {}
    try:
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}", str(path)) from e
    return data if data is not None else {}


def load_config(path: str | Path | None = None) -> SubrouterConfig:
    """
    Load configuration from file, applying environment overrides.

    Environment variables:
    - SUBROUTER_CONFIG: Config file path
    - SUBROUTER_DEBUG: Enable decision logging (1/true/yes/on)

    Returns:
        SubrouterConfig (defaults when no config file exists)

    Raises:
        ConfigurationError: if the file is unreadable or invalid
    """
    config_path = Path(path) if path else find_config_file()
    if config_path is None:
        config = SubrouterConfig()
    else:
        config = SubrouterConfig.from_dict(read_config_file(config_path), source=config_path)

    env_debug = os.getenv("SUBROUTER_DEBUG")
    if env_debug is not None:
        config.debug = env_debug.strip().lower() in TRUTHY
    return config
