"""
Pagination helpers for asc-cli.

App Store Connect collections are cursor paginated: every page carries an
absolute ``links.next`` URL until the collection is exhausted. The helpers
here validate user-supplied ``--next`` URLs, recover resource IDs embedded in
their paths and merge the pages of a ``--paginate`` run into one document.
"""

import copy
import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional
from urllib.parse import unquote, urlsplit

from .exceptions import AppStoreConnectError, UsageError, ValidationError

logger = logging.getLogger(__name__)

API_HOST = "api.appstoreconnect.apple.com"
MAX_LIMIT = 200

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})(.{0,2})", re.DOTALL)
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def validate_limit(limit: Optional[int]) -> Optional[int]:
    """
    Validate a --limit value.

    Raises:
        UsageError: If the limit is outside 1..200
    """
    if limit is None:
        return None
    if limit < 1 or limit > MAX_LIMIT:
        raise UsageError(f"--limit must be between 1 and {MAX_LIMIT}")
    return limit


def validate_next_url(next_url: Optional[str], flag: str = "--next") -> str:
    """
    Validate a pagination URL supplied by the user.

    Args:
        next_url: The raw flag value
        flag: Flag name used in error messages

    Returns:
        The trimmed URL, or an empty string when no URL was given

    Raises:
        ValidationError: If the URL is malformed or does not point at the
            App Store Connect API host over https
    """
    next_url = (next_url or "").strip()
    if not next_url:
        return ""

    match = _BAD_ESCAPE.search(next_url)
    if match:
        raise ValidationError(
            f'{flag} must be a valid URL: invalid URL escape "%{match.group(1)}"'
        )
    if _CONTROL_CHARS.search(next_url):
        raise ValidationError(
            f"{flag} must be a valid URL: invalid control character in URL"
        )

    try:
        parts = urlsplit(next_url)
        port = parts.port
    except ValueError as e:
        raise ValidationError(f"{flag} must be a valid URL: {e}")

    if (
        parts.scheme != "https"
        or parts.netloc != API_HOST
        or port is not None
    ):
        raise ValidationError(f"{flag} must be an App Store Connect URL")

    return next_url


def extract_path_id(next_url: str, template: str) -> str:
    """
    Extract the resource ID embedded in a pagination URL path.

    Args:
        next_url: A URL that already passed validate_next_url
        template: Path template with one ``{id}`` placeholder, for example
            ``/v1/endUserLicenseAgreements/{id}/territories``

    Returns:
        The decoded ID

    Raises:
        ValidationError: If the path does not match the template or the ID
            segment is empty
    """
    expected = template.strip("/").split("/")
    actual = urlsplit(next_url).path.strip("/").split("/")

    if len(actual) != len(expected):
        raise ValidationError("invalid --next URL")

    resource_id = ""
    for want, got in zip(expected, actual):
        if want == "{id}":
            resource_id = unquote(got).strip()
        elif want != got:
            raise ValidationError("invalid --next URL")

    if not resource_id or "/" in resource_id:
        raise ValidationError("invalid --next URL")
    return resource_id


def next_link(page: Dict[str, Any]) -> str:
    """Return the page's links.next URL, or an empty string."""
    links = page.get("links") or {}
    if not isinstance(links, dict):
        return ""
    return (links.get("next") or "").strip()


def iter_pages(
    fetch_page: Callable[[str], Dict[str, Any]],
    first_page: Dict[str, Any],
    max_pages: int,
    start_url: Optional[str] = None,
) -> Iterator[Dict[str, Any]]:
    """
    Yield first_page and every page reachable through its next links.

    Stops when a page has no next link or after max_pages pages.
    start_url is the URL first_page was fetched from, when known.

    Raises:
        ValidationError: If a next link leaves the App Store Connect host
        AppStoreConnectError: If a next link repeats (pagination loop)
    """
    seen = {start_url} if start_url else set()
    page = first_page
    count = 1
    yield page

    while True:
        url = next_link(page)
        if not url:
            return
        if count >= max_pages:
            logger.warning(
                f"iter_pages: stopping after {count} pages (page cap reached)"
            )
            return
        if url in seen:
            raise AppStoreConnectError(f"pagination loop detected at {url}")
        seen.add(url)

        validate_next_url(url, flag="next link")
        logger.info(f"iter_pages: fetching page {count + 1}")
        page = fetch_page(url)
        count += 1
        yield page


def merge_pages(pages: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge paginated documents into one.

    The first page provides every top-level member; ``data`` lists are
    concatenated, ``included`` resources are de-duplicated by type and ID,
    and the next link is dropped.
    """
    if not pages:
        return {"data": []}

    merged = copy.deepcopy(pages[0])
    if not isinstance(merged.get("data"), list):
        return merged

    data: List[Any] = []
    included: List[Any] = []
    included_keys = set()
    has_included = False

    for page in pages:
        data.extend(page.get("data") or [])
        if "included" in page:
            has_included = True
        for resource in page.get("included") or []:
            key = (resource.get("type"), resource.get("id"))
            if key in included_keys:
                continue
            included_keys.add(key)
            included.append(resource)

    merged["data"] = data
    if has_included:
        merged["included"] = included

    links = merged.get("links")
    if isinstance(links, dict):
        links.pop("next", None)

    meta = merged.get("meta")
    if isinstance(meta, dict) and isinstance(meta.get("paging"), dict):
        meta["paging"].pop("nextCursor", None)

    return merged


def paginate_all(
    fetch_page: Callable[[str], Dict[str, Any]],
    first_page: Dict[str, Any],
    max_pages: int,
    start_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Follow next links from first_page and return the merged document."""
    pages = list(iter_pages(fetch_page, first_page, max_pages, start_url))
    logger.info(f"paginate_all: merged {len(pages)} pages")
    return merge_pages(pages)
