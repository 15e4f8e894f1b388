"""asc nominations: App Store featuring nominations."""

from typing import Optional

import typer

from ..exceptions import AppStoreConnectError, UsageError
from ..output import normalize_format
from ..utils import NOMINATION_STATES, NOMINATION_TYPES, require_value, validate_choices
from .common import (
    DeleteResult,
    ListRequest,
    build_client,
    command_errors,
    echo_result,
    limit_option,
    next_option,
    output_option,
    paginate_option,
    pretty_option,
    require_confirm,
)

nominations_app = typer.Typer(
    help="Manage featuring nominations.", no_args_is_help=True
)


@nominations_app.command("list")
def list_nominations(
    status: Optional[str] = typer.Option(
        None,
        "--status",
        help="Nomination state(s): DRAFT, SUBMITTED, ARCHIVED (comma-separated)",
    ),
    nomination_type: Optional[str] = typer.Option(
        None,
        "--type",
        help="Nomination type(s): APP_LAUNCH, APP_ENHANCEMENTS, NEW_CONTENT",
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List nominations."""
    with command_errors("nominations list"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        states = validate_choices(status, NOMINATION_STATES, "--status")
        types = validate_choices(nomination_type, NOMINATION_TYPES, "--type")
        # the state filter lives in the --next URL when one is given
        if not states and not request.next_url:
            raise UsageError("--status is required")

        document = request.execute(
            lambda api, page_limit: api.list_nominations(states, types, page_limit)
        )
        request.echo(document)


@nominations_app.command("get")
def get_nomination(
    nomination_id: Optional[str] = typer.Option(None, "--id", help="Nomination ID"),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get a nomination by ID."""
    with command_errors("nominations get"):
        normalize_format(output, pretty)
        nomination_id = require_value(nomination_id, "--id")
        echo_result(build_client().get_nomination(nomination_id), output, pretty)


@nominations_app.command("delete")
def delete_nomination(
    nomination_id: Optional[str] = typer.Option(None, "--id", help="Nomination ID"),
    confirm: bool = typer.Option(False, "--confirm", help="Confirm deletion"),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Delete a nomination."""
    with command_errors("nominations delete"):
        normalize_format(output, pretty)
        nomination_id = require_value(nomination_id, "--id")
        require_confirm(confirm, "delete a nomination")
        if not build_client().delete_nomination(nomination_id):
            raise AppStoreConnectError(
                f"nomination {nomination_id} was not deleted (unexpected response)"
            )
        echo_result(DeleteResult(nomination_id, "deleted"), output, pretty)
