"""asc categories: App Store categories and subcategories."""

from typing import Optional

import typer

from ..exceptions import UsageError
from ..output import normalize_format
from ..utils import PLATFORMS, require_value, validate_choices
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

SUBCATEGORIES_PATH = "/v1/appCategories/{id}/subcategories"

categories_app = typer.Typer(help="Browse App Store categories.", no_args_is_help=True)


@categories_app.command("list")
def list_categories(
    platform: Optional[str] = typer.Option(
        None,
        "--platform",
        help="Filter by platform(s): IOS, MAC_OS, TV_OS, VISION_OS",
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List App Store categories."""
    with command_errors("categories list"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        platforms = validate_choices(platform, PLATFORMS, "--platform")
        document = request.execute(
            lambda api, page_limit: api.list_app_categories(platforms, page_limit)
        )
        request.echo(document)


@categories_app.command("get")
def get_category(
    category_id: Optional[str] = typer.Option(
        None, "--id", help="Category ID, e.g. GAMES"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get a category by ID."""
    with command_errors("categories get"):
        normalize_format(output, pretty)
        category_id = require_value(category_id, "--id")
        echo_result(build_client().get_app_category(category_id), output, pretty)


@categories_app.command("parent")
def get_parent_category(
    category_id: Optional[str] = typer.Option(None, "--id", help="Subcategory ID"),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get the parent category of a subcategory."""
    with command_errors("categories parent"):
        normalize_format(output, pretty)
        category_id = require_value(category_id, "--id")
        document = build_client().get_app_category_parent(category_id)
        echo_result(document, output, pretty)


@categories_app.command("subcategories")
def list_subcategories(
    category_id: Optional[str] = typer.Option(
        None, "--category-id", help="Parent category ID, e.g. GAMES"
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List the subcategories of a category."""
    with command_errors("categories subcategories"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        next_id = request.path_id(SUBCATEGORIES_PATH)
        category_id = (category_id or "").strip() or next_id
        if not category_id:
            raise UsageError("--category-id is required")

        document = request.execute(
            lambda api, page_limit: api.list_app_subcategories(category_id, page_limit)
        )
        request.echo(document)
