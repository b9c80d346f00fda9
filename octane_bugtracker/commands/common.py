"""Helpers shared by the CLI commands."""

from typing import Tuple

import click
from rich.console import Console
from rich.panel import Panel

from ..config.connection import Credentials
from ..config.settings import get_settings
from ..exceptions import ErrorKind, OctaneError, describe_error
from ..services.bugtracker import OctaneBugTracker

console = Console()

ERROR_TITLES = {
    ErrorKind.CONFIGURATION: "Configuration Error",
    ErrorKind.AUTHENTICATION: "Authentication Error (401)",
    ErrorKind.PROXY_AUTHENTICATION: "Proxy Authentication Error (407)",
    ErrorKind.REQUEST: "Octane Request Error",
    ErrorKind.RESPONSE: "Octane Response Error",
    ErrorKind.TRANSPORT: "Connection Error",
    ErrorKind.PRECONDITION: "Invalid Input",
}

ERROR_HINTS = {
    ErrorKind.CONFIGURATION: [
        "OCTANE_URL is an absolute http(s) URL",
        "OCTANE_SHARED_SPACE_ID and OCTANE_WORKSPACE_ID are set",
    ],
    ErrorKind.AUTHENTICATION: [
        "OCTANE_USERNAME and OCTANE_PASSWORD are correct",
        "Basic Authentication is enabled on the Octane server",
    ],
    ErrorKind.PROXY_AUTHENTICATION: [
        "OCTANE_HTTP(S)_PROXY_USERNAME and OCTANE_HTTP(S)_PROXY_PASSWORD are correct",
    ],
    ErrorKind.TRANSPORT: [
        "OCTANE_URL is reachable from this machine",
        "Proxy settings, if any, are correct",
    ],
}


def get_bug_tracker() -> Tuple[OctaneBugTracker, Credentials]:
    """Create the bug tracker and credentials from the OCTANE_* settings."""
    settings = get_settings()
    return OctaneBugTracker(settings.to_config_map()), settings.credentials()


def print_error(error: OctaneError) -> None:
    """Render an Octane error as a panel, with hints where available."""
    content = [f"[red]✗[/red] {describe_error(error)}"]
    hints = ERROR_HINTS.get(error.kind)
    if hints:
        content.append("\n[yellow]Please check:[/yellow]")
        content.extend(f"• {hint}" for hint in hints)
    console.print(Panel(
        "\n".join(content),
        title=ERROR_TITLES.get(error.kind, "Error"),
        border_style="red"
    ))


def abort_on_error(error: OctaneError) -> None:
    print_error(error)
    raise click.Abort()
