"""asc accessibility: accessibility declarations."""

from typing import Optional

import typer

from ..config import load_config, resolve_app_id
from ..exceptions import UsageError
from ..output import normalize_format
from ..utils import (
    ACCESSIBILITY_STATES,
    DEVICE_FAMILIES,
    require_value,
    validate_choices,
)
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

DECLARATIONS_PATH = "/v1/apps/{id}/accessibilityDeclarations"

accessibility_app = typer.Typer(
    help="Manage accessibility declarations.", no_args_is_help=True
)


@accessibility_app.command("list")
def list_declarations(
    app_id: Optional[str] = typer.Option(
        None, "--app", help="App Store Connect app ID (or ASC_APP_ID)"
    ),
    device_family: Optional[str] = typer.Option(
        None, "--device-family", help="Filter by device family, comma-separated"
    ),
    state: Optional[str] = typer.Option(
        None, "--state", help="Filter by state: DRAFT, PUBLISHED, REPLACED"
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List accessibility declarations for an app."""
    with command_errors("accessibility list"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        families = validate_choices(device_family, DEVICE_FAMILIES, "--device-family")
        states = validate_choices(state, ACCESSIBILITY_STATES, "--state")
        next_id = request.path_id(DECLARATIONS_PATH)

        config = load_config()
        app_id = resolve_app_id(app_id, config) or next_id
        if not app_id:
            raise UsageError("--app is required (or set ASC_APP_ID)")

        document = request.execute(
            lambda api, page_limit: api.list_accessibility_declarations(
                app_id, families, states, page_limit
            ),
            config,
        )
        request.echo(document)


@accessibility_app.command("get")
def get_declaration(
    declaration_id: Optional[str] = typer.Option(
        None, "--id", help="Accessibility declaration ID"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get an accessibility declaration by ID."""
    with command_errors("accessibility get"):
        normalize_format(output, pretty)
        declaration_id = require_value(declaration_id, "--id")
        document = build_client().get_accessibility_declaration(declaration_id)
        echo_result(document, output, pretty)
