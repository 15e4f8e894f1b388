"""
Fastlane metadata migration for asc-cli.

This module moves App Store version localizations between App Store Connect
and fastlane's ``deliver`` directory layout::

    <fastlane-dir>/metadata/<locale>/description.txt
                                     keywords.txt
                                     release_notes.txt
                                     promotional_text.txt
                                     support_url.txt
                                     marketing_url.txt

``name.txt``, ``subtitle.txt`` and ``privacy_url.txt`` hold app info fields,
which are not version specific, and are not migrated here.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .client import AppStoreConnectAPI
from .exceptions import AppStoreConnectError, ValidationError
from .utils import is_locale, validate_locale

logger = logging.getLogger(__name__)

# fastlane file name -> appStoreVersionLocalizations attribute
FIELD_FILES = {
    "description.txt": "description",
    "keywords.txt": "keywords",
    "release_notes.txt": "whatsNew",
    "promotional_text.txt": "promotionalText",
    "support_url.txt": "supportUrl",
    "marketing_url.txt": "marketingUrl",
}

APP_INFO_FILES = ("name.txt", "subtitle.txt", "privacy_url.txt")

SKIPPED_DIRECTORIES = ("review_information", "default")

FIELD_LIMITS = {
    "description": 4000,
    "keywords": 100,
    "whatsNew": 4000,
    "promotionalText": 170,
}


@dataclass
class FastlaneLocalization:
    """Version localization fields read from one fastlane locale directory."""

    locale: str
    description: str = ""
    keywords: str = ""
    whatsNew: str = ""
    promotionalText: str = ""
    supportUrl: str = ""
    marketingUrl: str = ""

    def attributes(self) -> Dict[str, str]:
        """Return the non-empty fields keyed by API attribute name."""
        return {
            name: getattr(self, name)
            for name in FIELD_FILES.values()
            if getattr(self, name)
        }

    def non_empty_field_count(self) -> int:
        return len(self.attributes())

    def to_dict(self) -> Dict[str, str]:
        data = {"locale": self.locale}
        data.update(self.attributes())
        return data

    def validate(self) -> None:
        """
        Check field lengths against App Store limits.

        Raises:
            ValidationError: If a field is too long
        """
        for name, limit in FIELD_LIMITS.items():
            value = getattr(self, name)
            if len(value) > limit:
                raise ValidationError(
                    f"{self.locale} {name} too long ({len(value)} chars). "
                    f"Maximum is {limit} characters."
                )


@dataclass
class LocalizationUploadItem:
    locale: str
    fields: int

    def to_dict(self) -> Dict[str, Any]:
        return {"locale": self.locale, "fields": self.fields}


@dataclass
class MigrateImportResult:
    """Outcome of reading (and optionally uploading) a fastlane tree."""

    dry_run: bool
    version_id: str
    localizations: List[FastlaneLocalization]
    uploaded: List[LocalizationUploadItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "dryRun": self.dry_run,
            "versionId": self.version_id,
            "localizations": [loc.to_dict() for loc in self.localizations],
        }
        if self.uploaded:
            data["uploaded"] = [item.to_dict() for item in self.uploaded]
        return data

    def to_frame(self) -> pd.DataFrame:
        status = "would upload" if self.dry_run else "uploaded"
        rows = []
        for loc in self.localizations:
            rows.append([loc.locale, loc.non_empty_field_count(), status])
        return pd.DataFrame(rows, columns=["Locale", "Fields", "Status"])


@dataclass
class MigrateExportResult:
    """Outcome of writing version localizations to a fastlane tree."""

    version_id: str
    output_dir: str
    locales: List[str]
    total_files: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "versionId": self.version_id,
            "outputDir": self.output_dir,
            "locales": self.locales,
            "totalFiles": self.total_files,
        }

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                [
                    self.version_id,
                    self.output_dir,
                    ", ".join(self.locales),
                    str(self.total_files),
                ]
            ],
            columns=["Version ID", "Output Dir", "Locales", "Total Files"],
        )


def read_text_if_exists(path: Path) -> str:
    """Return the trimmed file contents, or an empty string if it is missing."""
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(f"failed to read {path}: {e}")


def read_fastlane_metadata(metadata_dir: Union[str, Path]) -> List[FastlaneLocalization]:
    """
    Read version localizations from a fastlane metadata directory.

    Args:
        metadata_dir: The ``metadata`` directory of a fastlane tree

    Returns:
        One entry per locale directory, ordered by locale
    """
    metadata_dir = Path(metadata_dir)
    try:
        entries = sorted(metadata_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ValidationError(f"failed to read metadata directory: {e}")

    localizations = []
    for entry in entries:
        if not entry.is_dir() or entry.name in SKIPPED_DIRECTORIES:
            continue
        if not is_locale(entry.name):
            logger.warning(
                f"read_fastlane_metadata: skipping {entry.name}, not a locale"
            )
            continue

        loc = FastlaneLocalization(locale=entry.name)
        for file_name, attribute in FIELD_FILES.items():
            setattr(loc, attribute, read_text_if_exists(entry / file_name))

        for file_name in APP_INFO_FILES:
            if (entry / file_name).exists():
                logger.info(
                    f"read_fastlane_metadata: {entry.name}/{file_name} is an "
                    "app info field and is not imported"
                )

        localizations.append(loc)

    return localizations


def write_localization(locale_dir: Path, attributes: Dict[str, Any]) -> int:
    """
    Write one localization's non-empty fields into locale_dir.

    Returns:
        Number of files written

    Raises:
        ValidationError: If the directory or a file cannot be written
    """
    try:
        locale_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ValidationError(f"failed to create locale directory: {e}")

    written = 0
    for file_name, attribute in FIELD_FILES.items():
        content = attributes.get(attribute) or ""
        if not content:
            continue
        path = locale_dir / file_name
        try:
            path.write_text(content + "\n", encoding="utf-8")
        except OSError as e:
            raise ValidationError(f"failed to write {path}: {e}")
        written += 1
    return written


class FastlaneMigrator:
    """
    Import and export App Store version metadata in fastlane layout.

    Args:
        api: API client, only needed for uploads and exports
    """

    def __init__(self, api: Optional[AppStoreConnectAPI] = None):
        self.api = api

    def load(self, fastlane_dir: Union[str, Path]) -> List[FastlaneLocalization]:
        """
        Read and validate the localizations under fastlane_dir/metadata.

        Raises:
            ValidationError: If the metadata directory is missing or a field
                exceeds its length limit
        """
        metadata_dir = Path(fastlane_dir) / "metadata"
        if not metadata_dir.is_dir():
            raise ValidationError(f"metadata directory not found: {metadata_dir}")

        localizations = read_fastlane_metadata(metadata_dir)
        for loc in localizations:
            loc.validate()
        return localizations

    def import_metadata(
        self, version_id: str, fastlane_dir: Union[str, Path], dry_run: bool = False
    ) -> MigrateImportResult:
        """
        Upload fastlane metadata to an App Store version.

        Existing localizations are updated in place; missing ones are created.

        Args:
            version_id: App Store version ID
            fastlane_dir: Root of the fastlane tree
            dry_run: If True, only read and validate the files

        Returns:
            MigrateImportResult describing what was (or would be) uploaded
        """
        localizations = self.load(fastlane_dir)

        if dry_run:
            return MigrateImportResult(
                dry_run=True, version_id=version_id, localizations=localizations
            )
        return self.upload(version_id, localizations)

    def upload(
        self, version_id: str, localizations: List[FastlaneLocalization]
    ) -> MigrateImportResult:
        """Update or create each localization on the App Store version."""
        existing = self.api.get_app_store_version_localizations(version_id)
        locale_to_id = {
            loc["attributes"]["locale"]: loc["id"]
            for loc in existing.get("data") or []
            if (loc.get("attributes") or {}).get("locale")
        }

        uploaded = []
        for loc in localizations:
            attributes = loc.attributes()
            existing_id = locale_to_id.get(loc.locale)
            try:
                if existing_id:
                    logger.info(f"import_metadata: updating {loc.locale}")
                    self.api.update_app_store_version_localization(
                        existing_id, attributes
                    )
                else:
                    logger.info(f"import_metadata: creating {loc.locale}")
                    attributes["locale"] = loc.locale
                    self.api.create_app_store_version_localization(
                        version_id, attributes
                    )
            except AppStoreConnectError as e:
                action = "update" if existing_id else "create"
                raise type(e)(f"failed to {action} {loc.locale}: {e}") from e

            uploaded.append(
                LocalizationUploadItem(
                    locale=loc.locale, fields=loc.non_empty_field_count()
                )
            )

        return MigrateImportResult(
            dry_run=False,
            version_id=version_id,
            localizations=localizations,
            uploaded=uploaded,
        )

    def export_metadata(
        self, version_id: str, output_dir: Union[str, Path]
    ) -> MigrateExportResult:
        """
        Write every localization of an App Store version to a fastlane tree.

        Args:
            version_id: App Store version ID
            output_dir: Root of the fastlane tree to create or update

        Returns:
            MigrateExportResult listing exported locales and files written
        """
        response = self.api.get_app_store_version_localizations(version_id)

        metadata_dir = Path(output_dir) / "metadata"
        try:
            metadata_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValidationError(f"failed to create directory: {e}")

        exported = []
        total_files = 0
        for loc in response.get("data") or []:
            attributes = loc.get("attributes") or {}
            locale = validate_locale(attributes.get("locale") or "")
            total_files += write_localization(metadata_dir / locale, attributes)
            exported.append(locale)

        logger.info(
            f"export_metadata: wrote {total_files} files for {len(exported)} locales"
        )
        return MigrateExportResult(
            version_id=version_id,
            output_dir=str(output_dir),
            locales=exported,
            total_files=total_files,
        )
