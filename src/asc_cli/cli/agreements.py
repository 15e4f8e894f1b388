"""asc agreements: end user license agreements."""

from typing import Optional

import typer

from ..exceptions import UsageError
from ..output import normalize_format
from ..utils import require_value
from .common import (
    ListRequest,
    build_client,
    command_errors,
    echo_result,
    limit_option,
    next_option,
    output_option,
    paginate_option,
    pretty_option,
)

TERRITORIES_PATH = "/v1/endUserLicenseAgreements/{id}/territories"

agreements_app = typer.Typer(
    help="Manage end user license agreements.", no_args_is_help=True
)
territories_app = typer.Typer(
    help="Territories an agreement applies to.", no_args_is_help=True
)
agreements_app.add_typer(territories_app, name="territories")


@agreements_app.command("get")
def get_agreement(
    agreement_id: Optional[str] = typer.Option(
        None, "--id", help="End user license agreement ID"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get an end user license agreement by ID."""
    with command_errors("agreements get"):
        normalize_format(output, pretty)
        agreement_id = require_value(agreement_id, "--id")
        document = build_client().get_end_user_license_agreement(agreement_id)
        echo_result(document, output, pretty)


@territories_app.command("list")
def list_territories(
    agreement_id: Optional[str] = typer.Option(
        None, "--id", help="End user license agreement ID"
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List the territories of an end user license agreement."""
    with command_errors("agreements territories list"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        next_id = request.path_id(TERRITORIES_PATH)
        agreement_id = (agreement_id or "").strip() or next_id
        if not agreement_id:
            raise UsageError("--id is required")

        document = request.execute(
            lambda api, page_limit: api.list_agreement_territories(
                agreement_id, page_limit
            )
        )
        request.echo(document)
