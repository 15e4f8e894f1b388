"""asc encryption: export compliance (encryption) declarations."""

from typing import Optional

import typer

from ..config import load_config, resolve_app_id
from ..exceptions import UsageError
from ..output import normalize_format
from ..utils import PLATFORMS, require_value, split_csv, validate_choices
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

encryption_app = typer.Typer(
    help="Manage export compliance declarations.", no_args_is_help=True
)
declarations_app = typer.Typer(
    help="App encryption declarations.", no_args_is_help=True
)
encryption_app.add_typer(declarations_app, name="declarations")


@declarations_app.command("list")
def list_declarations(
    app_id: Optional[str] = typer.Option(
        None, "--app", help="App Store Connect app ID (or ASC_APP_ID)"
    ),
    platform: Optional[str] = typer.Option(
        None, "--platform", help="Filter by platform(s), comma-separated"
    ),
    build: Optional[str] = typer.Option(
        None, "--build", help="Filter by build ID(s), comma-separated"
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List encryption declarations for an app."""
    with command_errors("encryption declarations list"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        platforms = validate_choices(platform, PLATFORMS, "--platform")
        build_ids = split_csv(build)

        config = load_config()
        app_id = resolve_app_id(app_id, config)
        if not app_id and not request.next_url:
            raise UsageError("--app is required (or set ASC_APP_ID)")

        document = request.execute(
            lambda api, page_limit: api.list_app_encryption_declarations(
                app_id, platforms, build_ids, page_limit
            ),
            config,
        )
        request.echo(document)


@declarations_app.command("get")
def get_declaration(
    declaration_id: Optional[str] = typer.Option(
        None, "--id", help="Encryption declaration ID"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get an encryption declaration by ID."""
    with command_errors("encryption declarations get"):
        normalize_format(output, pretty)
        declaration_id = require_value(declaration_id, "--id")
        document = build_client().get_app_encryption_declaration(declaration_id)
        echo_result(document, output, pretty)
