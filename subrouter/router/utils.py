"""
Utility functions for hostname parsing and cross-subdomain URLs.
"""

import os
import re
from typing import NamedTuple

_NUMERIC_HOST = re.compile(r"[0-9.]+")


class ParsedHostname(NamedTuple):
    """Host header split into its hostname and left-most label."""

    clean_hostname: str
    subdomain: str


def parse_hostname(host_header: str | None) -> ParsedHostname:
    """
    Parse a Host header into hostname and subdomain.

    Args:
        host_header: HTTP Host header value (may include port)

    Returns:
        ParsedHostname; both fields are "" for a missing or empty header
    """
    if not host_header:
        return ParsedHostname("", "")
    # strip port if present
    clean_hostname = host_header.strip().lower().split(":")[0]
    subdomain = clean_hostname.split(".")[0]
    return ParsedHostname(clean_hostname, subdomain)


def is_localhost_or_ip(label: str) -> bool:
    """Return True for "localhost" or a dotted-numeric label such as "127"."""
    return label == "localhost" or bool(_NUMERIC_HOST.fullmatch(label))


def load_base_domain() -> str | None:
    """Load the public base domain from SUBROUTER_BASE_DOMAIN, if set."""
    env_domain = os.getenv("SUBROUTER_BASE_DOMAIN", "").strip().lower()
    return env_domain or None


def derive_base_domain(current_host: str) -> str:
    """
    Derive the base domain (with port) from the host currently being served.

    - localhost and IP addresses are kept as they are
    - hosts with more than two labels keep their last two labels
      (app.example.com -> example.com)
    - anything else is already a base domain
    """
    hostname, _, port = current_host.strip().lower().partition(":")
    labels = hostname.split(".")

    if is_localhost_or_ip(hostname):
        base = hostname
    elif len(labels) > 2:
        base = ".".join(labels[-2:])
    else:
        base = hostname
    return f"{base}:{port}" if port else base


def build_subdomain_url(
    href: str = "/",
    subdomain: str | None = None,
    current_host: str = "",
    scheme: str = "http",
    base_domain: str | None = None,
) -> str:
    """
    Build an absolute URL pointing at ``href`` on another subdomain.

    Args:
        href: Path on the target host
        subdomain: Target subdomain; None links to the base domain itself
        current_host: Host header of the current request (used to derive the base domain)
        scheme: URL scheme
        base_domain: Explicit base domain (defaults to SUBROUTER_BASE_DOMAIN, then derived)

    Returns:
        Absolute URL string

    Example:
        >>> build_subdomain_url("/about", "fuga", "piyo.example.com:3000")
        'http://fuga.example.com:3000/about'
    """
    base = base_domain or load_base_domain() or derive_base_domain(current_host)
    host = f"{subdomain}.{base}" if subdomain else base
    if not href.startswith("/"):
        href = "/" + href
    return f"{scheme}://{host}{href}"
