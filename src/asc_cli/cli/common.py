"""
Shared pieces of the asc command tree: common flags, error reporting and
the request flow every list command follows.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

import pandas as pd
import typer

from ..client import AppStoreConnectAPI
from ..config import Config, load_config
from ..exceptions import AppStoreConnectError, UsageError
from ..output import normalize_format, render
from ..pagination import MAX_LIMIT, extract_path_id, validate_limit, validate_next_url

logger = logging.getLogger(__name__)


def output_option():
    return typer.Option(
        "json", "--output", help="Output format: json (default), table, markdown"
    )


def pretty_option():
    return typer.Option(False, "--pretty", help="Pretty-print JSON output")


def limit_option():
    return typer.Option(
        None, "--limit", help=f"Maximum results per page (1-{MAX_LIMIT})"
    )


def next_option():
    return typer.Option(
        None, "--next", help="Fetch the page at this links.next URL"
    )


def paginate_option():
    return typer.Option(
        False, "--paginate", help="Automatically fetch all pages (aggregate results)"
    )


@contextmanager
def command_errors(command: str) -> Iterator[None]:
    """
    Report asc errors for one command and exit with the matching code.

    Usage errors exit with 2, every other App Store Connect error with 1.
    """
    try:
        yield
    except UsageError as e:
        typer.echo(f"Error: {command}: {e}", err=True)
        raise typer.Exit(code=2)
    except AppStoreConnectError as e:
        logger.debug(f"{command} failed", exc_info=True)
        typer.echo(f"Error: {command}: {e}", err=True)
        raise typer.Exit(code=1)


def build_client(config: Optional[Config] = None) -> AppStoreConnectAPI:
    """Create an API client from the resolved configuration."""
    return AppStoreConnectAPI.from_config(config or load_config())


def echo_result(data: Any, output: str, pretty: bool) -> None:
    typer.echo(render(data, output, pretty))


def require_confirm(confirm: bool, action: str) -> None:
    if not confirm:
        raise UsageError(f"--confirm is required to {action}")


@dataclass
class ListRequest:
    """
    Validated paging flags of a list command.

    Flags are checked before any credentials are loaded, so a bad --next URL
    or --limit never reaches the network.
    """

    output: str
    pretty: bool
    limit: Optional[int]
    next_url: str
    paginate: bool

    @classmethod
    def from_flags(
        cls,
        output: str,
        pretty: bool,
        limit: Optional[int],
        next_url: Optional[str],
        paginate: bool,
    ) -> "ListRequest":
        normalize_format(output, pretty)
        validate_limit(limit)
        return cls(
            output=output,
            pretty=pretty,
            limit=limit,
            next_url=validate_next_url(next_url),
            paginate=paginate,
        )

    def path_id(self, template: str) -> str:
        """Return the resource ID embedded in the --next URL, if one was given."""
        if not self.next_url:
            return ""
        return extract_path_id(self.next_url, template)

    def page_limit(self) -> Optional[int]:
        if self.limit:
            return self.limit
        if self.paginate:
            return MAX_LIMIT
        return None

    def execute(
        self,
        fetch_first: Callable[[AppStoreConnectAPI, Optional[int]], Dict[str, Any]],
        config: Optional[Config] = None,
    ) -> Dict[str, Any]:
        """
        Fetch the first page (or the --next page) and, with --paginate,
        every page after it.
        """
        api = build_client(config)
        if self.next_url:
            page = api.get_page(self.next_url)
        else:
            page = fetch_first(api, self.page_limit())
        if self.paginate:
            page = api.get_all_pages(page, start_url=self.next_url or None)
        return page

    def echo(self, document: Dict[str, Any]) -> None:
        echo_result(document, self.output, self.pretty)


@dataclass
class DeleteResult:
    """Result of a revoke or delete command."""

    id: str
    action: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, self.action: True}

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [[self.id, "Yes"]], columns=["ID", self.action.capitalize()]
        )
