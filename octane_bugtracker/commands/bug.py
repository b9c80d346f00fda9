"""Defect commands for the Octane bug tracker CLI."""

import json
from typing import Optional

import click
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..exceptions import OctaneError
from ..services.bug_param_service import BugParamId
from .common import abort_on_error, console, get_bug_tracker


@click.command(name='file-bug')
@click.option('--root', type=str, required=True, help='Work item root name')
@click.option('--epic', type=str, help='Epic name')
@click.option('--feature', type=str, help='Feature name')
@click.option('--name', type=str, required=True, help='Defect name')
@click.option('--description', type=str, default='', help='Defect description')
@click.option('--dry-run', is_flag=True, help='Show the defect contents, do not submit')
def file_bug(root: str, epic: Optional[str], feature: Optional[str], name: str, description: str, dry_run: bool):
    """File a defect under a root, epic or feature.

    Examples:

    \b
    File a defect under a feature:
    $ octane-bugtracker file-bug --root Backlog --epic Billing --feature Invoices --name "Fix XSS"
    """
    values = {
        BugParamId.ROOT.value: root,
        BugParamId.EPIC.value: epic,
        BugParamId.FEATURE.value: feature,
        BugParamId.NAME.value: name,
        BugParamId.DESCRIPTION.value: description,
    }
    try:
        bug_tracker, credentials = get_bug_tracker()
        if dry_run:
            contents = bug_tracker.build_submission(credentials, values)
            console.print("[bold yellow]Defect contents (dry run):[/bold yellow]")
            console.print(Syntax(json.dumps(contents, indent=2), "json", theme="monokai", line_numbers=False))
            return

        bug = bug_tracker.submit_bug(credentials, values)
        console.print(Panel(
            f"[green]✓[/green] Defect filed successfully!\n\n"
            f"Defect ID: {bug.bug_id}\n"
            f"Phase: {bug.bug_status}\n"
            f"Link: {bug_tracker.deep_link(bug.bug_id)}",
            title="File Bug",
            border_style="green"
        ))
    except OctaneError as e:
        abort_on_error(e)


@click.command()
@click.argument('defect_id')
def status(defect_id: str):
    """Show the phase of a defect and whether it is open, closed or reopenable."""
    try:
        bug_tracker, credentials = get_bug_tracker()
        bug = bug_tracker.fetch_bug(credentials, defect_id)
        classification = bug_tracker.classify(bug.bug_status)
        phase_name = bug_tracker.fetch_phase_name(credentials, defect_id)

        table = Table(title=f"Defect {defect_id}", show_header=True, header_style="bold cyan")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="yellow")
        table.add_row("Phase", bug.bug_status or "")
        table.add_row("Phase Name", phase_name)
        table.add_row("Status", classification.status.value)
        table.add_row("Can Reopen", "yes" if classification.can_reopen else "no")
        if classification.reopen_target:
            table.add_row("Reopen Phase", classification.reopen_target)
        table.add_row("Link", bug_tracker.deep_link(defect_id))
        console.print(table)
    except OctaneError as e:
        abort_on_error(e)


@click.command()
@click.argument('defect_id')
@click.option('--comment', type=str, required=True, help='Comment explaining why the defect is reopened')
def reopen(defect_id: str, comment: str):
    """Reopen a fixed defect and add a comment."""
    try:
        bug_tracker, credentials = get_bug_tracker()
        bug_tracker.reopen(credentials, defect_id, comment)
        console.print(f"[green]✓[/green] Defect {defect_id} reopened")
    except OctaneError as e:
        abort_on_error(e)


@click.command()
@click.argument('defect_id')
@click.option('--text', type=str, required=True, help='Comment text')
def comment(defect_id: str, text: str):
    """Add a comment to a defect."""
    try:
        bug_tracker, credentials = get_bug_tracker()
        bug_tracker.add_comment(credentials, defect_id, text)
        console.print(f"[green]✓[/green] Comment added to defect {defect_id}")
    except OctaneError as e:
        abort_on_error(e)
