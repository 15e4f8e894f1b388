"""
Output rendering for asc-cli.

Command results are rendered as compact JSON (the default), pretty JSON,
a plain-text table or a markdown table. Tables go through pandas
DataFrames and tabulate.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from .exceptions import UsageError
from .utils import format_cell

FORMAT_ALIASES = {
    "json": "json",
    "table": "table",
    "markdown": "markdown",
    "md": "markdown",
}

TABLE_STYLES = {"table": "simple", "markdown": "github"}

# JSON:API resource type -> (header, attribute) columns
RESOURCE_COLUMNS: Dict[str, List[Tuple[str, str]]] = {
    "certificates": [
        ("Name", "name"),
        ("Type", "certificateType"),
        ("Platform", "platform"),
        ("Serial", "serialNumber"),
        ("Expires", "expirationDate"),
    ],
    "nominations": [
        ("Name", "name"),
        ("Type", "type"),
        ("State", "state"),
        ("Publish Start", "publishStartDate"),
        ("Last Modified", "lastModifiedDate"),
    ],
    "territories": [
        ("Currency", "currency"),
    ],
    "endUserLicenseAgreements": [
        ("Agreement", "agreementText"),
    ],
    "appCategories": [
        ("Platforms", "platforms"),
    ],
    "appEncryptionDeclarations": [
        ("State", "appEncryptionDeclarationState"),
        ("Exempt", "exempt"),
        ("Proprietary Crypto", "containsProprietaryCryptography"),
        ("Third-Party Crypto", "containsThirdPartyCryptography"),
        ("Available On French Store", "availableOnFrenchStore"),
        ("Created", "createdDate"),
    ],
    "accessibilityDeclarations": [
        ("Device Family", "deviceFamily"),
        ("State", "state"),
        ("Audio Descriptions", "supportsAudioDescriptions"),
        ("Captions", "supportsCaptions"),
        ("Voice Control", "supportsVoiceControl"),
        ("VoiceOver", "supportsVoiceover"),
    ],
    "appStoreVersionLocalizations": [
        ("Locale", "locale"),
        ("Description", "description"),
        ("Keywords", "keywords"),
        ("What's New", "whatsNew"),
        ("Promotional Text", "promotionalText"),
        ("Support URL", "supportUrl"),
        ("Marketing URL", "marketingUrl"),
    ],
}


def normalize_format(output: Optional[str], pretty: bool = False) -> str:
    """
    Validate an --output value against --pretty.

    Returns:
        One of "json", "table" or "markdown"

    Raises:
        UsageError: For unknown formats, or --pretty with a table format
    """
    fmt = FORMAT_ALIASES.get((output or "json").strip().lower())
    if fmt is None:
        raise UsageError(f"unsupported format: {output}")
    if pretty and fmt != "json":
        raise UsageError("--pretty is only valid with JSON output")
    return fmt


def to_json(data: Any, pretty: bool = False) -> str:
    """Serialize data as compact or indented JSON."""
    if hasattr(data, "to_dict"):
        data = data.to_dict()
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def resources_to_frame(document: Dict[str, Any]) -> pd.DataFrame:
    """
    Build a DataFrame from a JSON:API document.

    Works for both single-resource and collection documents. Column choice
    follows the type of the first resource; unknown types show every scalar
    attribute.
    """
    data = document.get("data")
    if data is None:
        resources: List[Dict[str, Any]] = []
    elif isinstance(data, list):
        resources = data
    else:
        resources = [data]

    resource_type = resources[0].get("type", "") if resources else ""
    columns = RESOURCE_COLUMNS.get(resource_type)
    if columns is None:
        columns = _scalar_columns(resources)

    headers = ["ID"] + [header for header, _ in columns]
    if resource_type not in RESOURCE_COLUMNS:
        headers.insert(1, "Type")

    rows = []
    for resource in resources:
        attributes = resource.get("attributes") or {}
        row = [format_cell(resource.get("id"))]
        if resource_type not in RESOURCE_COLUMNS:
            row.append(format_cell(resource.get("type")))
        row.extend(format_cell(attributes.get(attr)) for _, attr in columns)
        rows.append(row)

    return pd.DataFrame(rows, columns=headers)


def _scalar_columns(resources: List[Dict[str, Any]]) -> List[Tuple[str, str]]:
    names: List[str] = []
    for resource in resources:
        for name, value in (resource.get("attributes") or {}).items():
            if isinstance(value, dict) or name in names:
                continue
            names.append(name)
    return [(name, name) for name in names]


def frame_to_table(df: pd.DataFrame, fmt: str) -> str:
    """Render a DataFrame with the tabulate style for fmt."""
    if fmt == "markdown" and not df.empty:
        df = df.apply(lambda column: column.map(_escape_markdown))
    return df.to_markdown(
        index=False, tablefmt=TABLE_STYLES[fmt], disable_numparse=True
    )


def _escape_markdown(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.replace("|", "\\|").replace("\n", " ")


def render(data: Any, output: str = "json", pretty: bool = False) -> str:
    """
    Render a command result.

    Args:
        data: A JSON:API document, or a result object with to_dict/to_frame
        output: Output format flag value
        pretty: Indent JSON output

    Returns:
        The rendered text without a trailing newline
    """
    fmt = normalize_format(output, pretty)
    if fmt == "json":
        return to_json(data, pretty)

    to_frame: Optional[Callable[[], pd.DataFrame]] = getattr(data, "to_frame", None)
    if to_frame is not None:
        df = to_frame()
    elif isinstance(data, dict):
        df = resources_to_frame(data)
    else:
        raise UsageError(f"unsupported format: {output}")

    return frame_to_table(df, fmt)
