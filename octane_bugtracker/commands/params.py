"""Bug parameter command for the Octane bug tracker CLI."""

from typing import Optional

import click
from rich.table import Table

from ..exceptions import OctaneError
from ..models.bug_param import BugParamChoice, BugParams
from ..services.bug_param_service import BugParamId
from .common import abort_on_error, console, get_bug_tracker


def show_bug_params(bug_params: BugParams) -> None:
    table = Table(title="Octane Bug Parameters", show_header=True, header_style="bold cyan")
    table.add_column("Identifier", style="cyan")
    table.add_column("Label")
    table.add_column("Required")
    table.add_column("Value", style="yellow")
    table.add_column("Choices")

    for param in bug_params:
        choices = ", ".join(param.choice_list) if isinstance(param, BugParamChoice) else ""
        table.add_row(
            param.identifier,
            param.display_label,
            "yes" if param.required else "no",
            param.value or "",
            choices,
        )
    console.print(table)


@click.command()
@click.option('--root', type=str, help='Select this work item root and refresh the epics')
@click.option('--epic', type=str, help='Select this epic and refresh the features')
def params(root: Optional[str], epic: Optional[str]):
    """Show the bug parameters with their current choice lists.

    Selecting a root or epic refreshes the dependent choice lists the same
    way a bug tracker host does when the user changes a value.

    Examples:

    \b
    Show parameters:
    $ octane-bugtracker params

    \b
    Show epics and features for a root and epic:
    $ octane-bugtracker params --root Backlog --epic Billing
    """
    try:
        bug_tracker, credentials = get_bug_tracker()
        bug_params = bug_tracker.get_parameters(credentials)
        if root:
            bug_params.get(BugParamId.ROOT.value).value = root
            bug_tracker.on_parameter_change(credentials, BugParamId.ROOT.value, bug_params)
        if epic:
            bug_params.get(BugParamId.EPIC.value).value = epic
            bug_tracker.on_parameter_change(credentials, BugParamId.EPIC.value, bug_params)
        show_bug_params(bug_params)
    except OctaneError as e:
        abort_on_error(e)
