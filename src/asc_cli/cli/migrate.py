"""asc migrate: move version metadata between App Store Connect and fastlane."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config, resolve_app_id
from ..exceptions import UsageError
from ..fastlane import FastlaneMigrator
from ..output import normalize_format
from ..utils import require_value
from .common import build_client, command_errors, echo_result, output_option, pretty_option

migrate_app = typer.Typer(
    help="Migrate metadata from/to fastlane format.",
    no_args_is_help=True,
)


def _require_app(app_id: Optional[str], config) -> str:
    resolved = resolve_app_id(app_id, config)
    if not resolved:
        raise UsageError("--app is required (or set ASC_APP_ID)")
    return resolved


@migrate_app.command("import")
def import_metadata(
    app_id: Optional[str] = typer.Option(
        None, "--app", help="App Store Connect app ID (or ASC_APP_ID)"
    ),
    version_id: Optional[str] = typer.Option(
        None, "--version-id", help="App Store version ID (required)"
    ),
    fastlane_dir: Optional[Path] = typer.Option(
        None, "--fastlane-dir", help="Path to fastlane directory (required)"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Preview changes without uploading"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """
    Import metadata from fastlane directory structure.

    Reads App Store version localization fields from
    metadata/<locale>/{description,keywords,release_notes,promotional_text,
    support_url,marketing_url}.txt. name.txt, subtitle.txt and privacy_url.txt
    are app info fields and are not imported.
    """
    with command_errors("migrate import"):
        normalize_format(output, pretty)
        version_id = require_value(version_id, "--version-id")
        fastlane_dir = Path(require_value(str(fastlane_dir or ""), "--fastlane-dir"))
        config = load_config()
        _require_app(app_id, config)

        migrator = FastlaneMigrator()
        if dry_run:
            result = migrator.import_metadata(version_id, fastlane_dir, dry_run=True)
        else:
            # files are read before credentials are loaded
            localizations = migrator.load(fastlane_dir)
            migrator.api = build_client(config)
            result = migrator.upload(version_id, localizations)

        echo_result(result, output, pretty)


@migrate_app.command("export")
def export_metadata(
    app_id: Optional[str] = typer.Option(
        None, "--app", help="App Store Connect app ID (or ASC_APP_ID)"
    ),
    version_id: Optional[str] = typer.Option(
        None, "--version-id", help="App Store version ID (required)"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Output directory for fastlane structure (required)"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Export current App Store metadata to fastlane directory structure."""
    with command_errors("migrate export"):
        normalize_format(output, pretty)
        version_id = require_value(version_id, "--version-id")
        output_dir = Path(require_value(str(output_dir or ""), "--output-dir"))
        config = load_config()
        _require_app(app_id, config)

        migrator = FastlaneMigrator(build_client(config))
        result = migrator.export_metadata(version_id, output_dir)
        echo_result(result, output, pretty)
