"""
Root of the asc command tree.

Only wiring lives here: global flags, logging setup and the sub-command
groups. Each group is defined in its own module.
"""

import logging
import sys
from typing import Optional

import typer
from dotenv import load_dotenv

from .. import __version__
from .accessibility import accessibility_app
from .agreements import agreements_app
from .categories import categories_app
from .certificates import certificates_app
from .encryption import encryption_app
from .migrate import migrate_app
from .nominations import nominations_app

app = typer.Typer(
    name="asc",
    help="A command-line client for the App Store Connect API.",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=False,
)

app.add_typer(certificates_app, name="certificates")
app.add_typer(nominations_app, name="nominations")
app.add_typer(agreements_app, name="agreements")
app.add_typer(categories_app, name="categories")
app.add_typer(encryption_app, name="encryption")
app.add_typer(accessibility_app, name="accessibility")
app.add_typer(migrate_app, name="migrate")


def configure_logging(verbosity: int) -> None:
    """Send log records to stderr: WARNING by default, INFO with -v, DEBUG with -vv."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("asc_cli").setLevel(level)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"asc {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase log output (-v, -vv)"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    """A command-line client for the App Store Connect API."""
    # exported variables win over .env
    load_dotenv(override=False)
    configure_logging(verbose)


def main() -> None:
    app()
