"""
Rich-powered console output for the subrouter CLI.

Provides status messages and the route / decision tables.
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from subrouter.router.decisions import Decision, Redirect, Rewrite
from subrouter.router.routes import RouteTable

# force_terminal=None keeps rich's own TTY detection
console = Console(force_terminal=None, legacy_windows=True)
error_console = Console(stderr=True, force_terminal=None, legacy_windows=True)

# ASCII icons when output is piped
_USE_ASCII = not sys.stdout.isatty()

ICON_SUCCESS = "+" if _USE_ASCII else "✓"
ICON_ERROR = "x" if _USE_ASCII else "✗"
ICON_WARN = "!"
ICON_INFO = ">" if _USE_ASCII else "ℹ"

ACTION_STYLES = {
    "pass_through": "dim",
    "rewrite": "green",
    "redirect": "yellow",
}


def msg_success(text: str):
    """Print success message"""
    console.print(f"[green]{ICON_SUCCESS}[/green] {escape(text)}", highlight=False, soft_wrap=True)


def msg_error(text: str):
    """Print error message"""
    error_console.print(f"[red]{ICON_ERROR}[/red] {escape(text)}", style="red", highlight=False, soft_wrap=True)


def msg_warning(text: str):
    """Print warning message"""
    console.print(f"[yellow]{ICON_WARN}[/yellow] {escape(text)}", highlight=False, soft_wrap=True)


def msg_info(text: str):
    """Print info message"""
    console.print(f"[blue]{ICON_INFO}[/blue] {escape(text)}", highlight=False, soft_wrap=True)


def routes_table(table: RouteTable, base_domain: str = "localhost") -> Table:
    """
    Create a Rich table showing the configured routes.

    Args:
        table: Route table to display
        base_domain: Domain used to show example hosts
    """
    output = Table(title="Routes", show_header=True, header_style="bold cyan")

    output.add_column("Subdomain", style="bold")
    output.add_column("Host", style="cyan")
    output.add_column("Rewrites to", style="dim")

    for route in table:
        if route.is_default:
            output.add_row(Text("(default)", style="italic"), base_domain, f"{route.path}/...")
        else:
            output.add_row(route.subdomain, f"{route.subdomain}.{base_domain}", f"{route.path}/...")

    return output


def decision_table(decision: Decision, host: str, path: str, subdomain: str) -> Table:
    """Create a two-column table describing one routing decision."""
    output = Table(show_header=False, box=None)
    output.add_column("Field", style="bold")
    output.add_column("Value")

    output.add_row("Host", host or "-")
    output.add_row("Subdomain", subdomain or "-")
    output.add_row("Path", path)
    output.add_row("Decision", Text(decision.action, style=ACTION_STYLES.get(decision.action, "")))

    if isinstance(decision, Rewrite):
        output.add_row("Rewrite to", decision.path)
    elif isinstance(decision, Redirect):
        output.add_row("Location", decision.location)
        output.add_row("Status", str(decision.status_code))

    locale = getattr(decision, "locale", None)
    if locale:
        output.add_row("Locale", locale)
    return output


def print_routes(table: RouteTable, base_domain: str = "localhost"):
    """Print the routes table"""
    console.print(routes_table(table, base_domain))


def print_decision(decision: Decision, host: str, path: str, subdomain: str):
    """Print one routing decision"""
    console.print(decision_table(decision, host, path, subdomain))
