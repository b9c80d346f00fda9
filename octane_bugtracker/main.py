"""Main CLI entry point for the Octane bug tracker."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .commands.bug import comment, file_bug, reopen, status
from .commands.common import abort_on_error, get_bug_tracker
from .commands.params import params
from .config.connection import CONFIG_FIELDS
from .exceptions import OctaneError

console = Console()


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(invoke_without_command=True)
@click.option('--verbose', is_flag=True, help='Log Octane requests and queries')
@click.pass_context
@click.version_option(version=__version__, prog_name="octane-bugtracker")
def cli(ctx: click.Context, verbose: bool):
    """Octane Bug Tracker - File and manage ALM Octane defects.

    Connection settings are read from OCTANE_* environment variables or a
    .env file: OCTANE_URL, OCTANE_SHARED_SPACE_ID, OCTANE_WORKSPACE_ID,
    OCTANE_USERNAME, OCTANE_PASSWORD and optional proxy settings.

    Examples:

    \b
    Test connection:
    $ octane-bugtracker test

    \b
    File a defect:
    $ octane-bugtracker file-bug --root Backlog --epic Billing --feature Invoices
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        console.print(Panel(
            "[bold cyan]Octane Bug Tracker[/bold cyan]\n\n"
            "File and manage ALM Octane defects.\n\n"
            "[yellow]Available Commands:[/yellow]\n"
            "  test           - Test connection to Octane\n"
            "  config-fields  - List the configuration fields\n"
            "  params         - Show bug parameters and choice lists\n"
            "  file-bug       - File a defect\n"
            "  status         - Show defect phase and state\n"
            "  reopen         - Reopen a fixed defect\n"
            "  comment        - Add a comment to a defect\n"
            "  link           - Print the Octane link for a defect\n\n"
            "[dim]Use --help with any command for detailed help.[/dim]",
            title="Welcome",
            border_style="cyan"
        ))
        console.print(ctx.get_help())


@cli.command()
def test():
    """Test connection to Octane with current credentials.

    Examples:

    \b
    Test connection:
    $ octane-bugtracker test
    """
    try:
        bug_tracker, credentials = get_bug_tracker()
        bug_tracker.validate_connection(credentials)
        config = bug_tracker.connection_config
        console.print(Panel(
            f"[green]✓[/green] Connected to Octane successfully!\n\n"
            f"Server: {config.base_url}\n"
            f"Shared Space: {config.shared_space_id}\n"
            f"Workspace: {config.workspace_id}\n"
            f"User: {credentials.username}\n"
            f"Proxy: {bug_tracker.proxy_config.host if bug_tracker.proxy_config else 'none'}",
            title="Connection Test",
            border_style="green"
        ))
    except OctaneError as e:
        abort_on_error(e)


@cli.command(name='config-fields')
def config_fields():
    """List the configuration fields a bug tracker host must provide."""
    table = Table(title="Octane Configuration Fields", show_header=True, header_style="bold cyan")
    table.add_column("Identifier", style="cyan")
    table.add_column("Label")
    table.add_column("Required")
    table.add_column("Description")
    for field in CONFIG_FIELDS:
        table.add_row(field.identifier, field.display_label, "yes" if field.required else "no", field.description)
    console.print(table)


@cli.command()
@click.argument('defect_id')
def link(defect_id: str):
    """Print the Octane UI link for a defect."""
    try:
        bug_tracker, _ = get_bug_tracker()
        click.echo(bug_tracker.deep_link(defect_id))
    except OctaneError as e:
        abort_on_error(e)


# Register commands
cli.add_command(params)
cli.add_command(file_bug)
cli.add_command(status)
cli.add_command(reopen)
cli.add_command(comment)


if __name__ == '__main__':
    cli()
