"""
Tests for fastlane metadata import and export.
"""

from unittest.mock import Mock

import pytest

from asc_cli.exceptions import AppStoreConnectError, NotFoundError, ValidationError
from asc_cli.fastlane import (
    FastlaneLocalization,
    FastlaneMigrator,
    read_fastlane_metadata,
    write_localization,
)


@pytest.fixture
def fastlane_dir(tmp_path):
    """A fastlane tree with two locales and the directories deliver ignores."""
    root = tmp_path / "fastlane"
    en = root / "metadata" / "en-US"
    en.mkdir(parents=True)
    (en / "description.txt").write_text("An app.\n")
    (en / "keywords.txt").write_text("one,two\n")
    (en / "release_notes.txt").write_text("Bug fixes\n")
    (en / "name.txt").write_text("Example\n")

    de = root / "metadata" / "de-DE"
    de.mkdir()
    (de / "description.txt").write_text("Eine App.")

    (root / "metadata" / "review_information").mkdir()
    (root / "metadata" / "review_information" / "notes.txt").write_text("hi")
    (root / "metadata" / "screenshots").mkdir()
    (root / "metadata" / "copyright.txt").write_text("2026 Example")
    return root


@pytest.fixture
def mock_api():
    api = Mock()
    api.get_app_store_version_localizations.return_value = {
        "data": [
            {
                "type": "appStoreVersionLocalizations",
                "id": "loc-en",
                "attributes": {"locale": "en-US"},
            }
        ]
    }
    return api


class TestReadMetadata:
    """Test reading fastlane metadata directories."""

    def test_reads_locales_in_order(self, fastlane_dir):
        localizations = read_fastlane_metadata(fastlane_dir / "metadata")

        assert [loc.locale for loc in localizations] == ["de-DE", "en-US"]
        en = localizations[1]
        assert en.description == "An app."
        assert en.keywords == "one,two"
        assert en.whatsNew == "Bug fixes"
        assert en.promotionalText == ""
        assert en.non_empty_field_count() == 3

    def test_skips_non_locale_directories(self, fastlane_dir, caplog):
        localizations = read_fastlane_metadata(fastlane_dir / "metadata")

        assert "review_information" not in [loc.locale for loc in localizations]
        assert "skipping screenshots" in caplog.text

    def test_undecodable_file(self, fastlane_dir):
        (fastlane_dir / "metadata" / "en-US" / "description.txt").write_bytes(
            b"\xff\xfe bad"
        )

        with pytest.raises(ValidationError, match="failed to read .*description.txt"):
            read_fastlane_metadata(fastlane_dir / "metadata")

    def test_attributes_omit_empty_fields(self):
        loc = FastlaneLocalization(locale="en-US", keywords="a,b")
        assert loc.attributes() == {"keywords": "a,b"}
        assert loc.to_dict() == {"locale": "en-US", "keywords": "a,b"}

    def test_validate_field_length(self):
        loc = FastlaneLocalization(locale="en-US", keywords="k" * 101)

        with pytest.raises(ValidationError) as exc_info:
            loc.validate()
        assert str(exc_info.value) == (
            "en-US keywords too long (101 chars). Maximum is 100 characters."
        )


class TestImport:
    """Test importing fastlane metadata."""

    def test_missing_metadata_directory(self, tmp_path):
        with pytest.raises(ValidationError, match="metadata directory not found"):
            FastlaneMigrator().import_metadata("ver-1", tmp_path, dry_run=True)

    def test_dry_run_needs_no_client(self, fastlane_dir):
        result = FastlaneMigrator().import_metadata(
            "ver-1", fastlane_dir, dry_run=True
        )

        data = result.to_dict()
        assert data["dryRun"] is True
        assert data["versionId"] == "ver-1"
        assert [loc["locale"] for loc in data["localizations"]] == ["de-DE", "en-US"]
        assert "uploaded" not in data
        assert list(result.to_frame()["Status"]) == ["would upload", "would upload"]

    def test_dry_run_rejects_long_fields(self, fastlane_dir):
        long_text = "p" * 171
        (fastlane_dir / "metadata" / "de-DE" / "promotional_text.txt").write_text(
            long_text
        )

        with pytest.raises(ValidationError, match="promotionalText too long"):
            FastlaneMigrator().import_metadata("ver-1", fastlane_dir, dry_run=True)

    def test_updates_existing_and_creates_new(self, fastlane_dir, mock_api):
        result = FastlaneMigrator(mock_api).import_metadata("ver-1", fastlane_dir)

        mock_api.update_app_store_version_localization.assert_called_once_with(
            "loc-en",
            {"description": "An app.", "keywords": "one,two", "whatsNew": "Bug fixes"},
        )
        mock_api.create_app_store_version_localization.assert_called_once_with(
            "ver-1", {"description": "Eine App.", "locale": "de-DE"}
        )
        data = result.to_dict()
        assert data["dryRun"] is False
        assert data["uploaded"] == [
            {"locale": "de-DE", "fields": 1},
            {"locale": "en-US", "fields": 3},
        ]

    def test_upload_failure_names_locale(self, fastlane_dir, mock_api):
        mock_api.update_app_store_version_localization.side_effect = NotFoundError(
            "Requested resource not found"
        )

        with pytest.raises(NotFoundError, match="failed to update en-US"):
            FastlaneMigrator(mock_api).import_metadata("ver-1", fastlane_dir)


class TestExport:
    """Test exporting metadata to fastlane layout."""

    def test_export_writes_files(self, tmp_path, mock_api):
        mock_api.get_app_store_version_localizations.return_value = {
            "data": [
                {
                    "id": "loc-en",
                    "attributes": {
                        "locale": "en-US",
                        "description": "An app.",
                        "keywords": "one,two",
                        "whatsNew": None,
                        "supportUrl": "https://example.com/support",
                    },
                },
                {"id": "loc-ja", "attributes": {"locale": "ja", "description": "アプリ"}},
            ]
        }
        output_dir = tmp_path / "out"

        result = FastlaneMigrator(mock_api).export_metadata("ver-1", output_dir)

        en = output_dir / "metadata" / "en-US"
        assert (en / "description.txt").read_text(encoding="utf-8") == "An app.\n"
        assert (en / "support_url.txt").read_text(encoding="utf-8") == (
            "https://example.com/support\n"
        )
        assert not (en / "release_notes.txt").exists()
        assert (output_dir / "metadata" / "ja" / "description.txt").read_text(
            encoding="utf-8"
        ) == "アプリ\n"
        assert result.to_dict() == {
            "versionId": "ver-1",
            "outputDir": str(output_dir),
            "locales": ["en-US", "ja"],
            "totalFiles": 4,
        }

    def test_export_rejects_unsafe_locale(self, tmp_path, mock_api):
        mock_api.get_app_store_version_localizations.return_value = {
            "data": [{"id": "x", "attributes": {"locale": "../../etc"}}]
        }

        with pytest.raises(ValidationError):
            FastlaneMigrator(mock_api).export_metadata("ver-1", tmp_path)

    def test_export_propagates_api_errors(self, tmp_path, mock_api):
        mock_api.get_app_store_version_localizations.side_effect = (
            AppStoreConnectError("Request failed: boom")
        )

        with pytest.raises(AppStoreConnectError, match="boom"):
            FastlaneMigrator(mock_api).export_metadata("ver-1", tmp_path)
        assert not (tmp_path / "metadata").exists()

    def test_export_into_file_path(self, tmp_path, mock_api):
        output_file = tmp_path / "not-a-dir"
        output_file.write_text("x")

        with pytest.raises(ValidationError, match="failed to create directory"):
            FastlaneMigrator(mock_api).export_metadata("ver-1", output_file)

    def test_write_localization_over_file(self, tmp_path):
        (tmp_path / "fr-FR").write_text("x")

        with pytest.raises(ValidationError, match="failed to create locale directory"):
            write_localization(tmp_path / "fr-FR", {"description": "Une app."})

    def test_write_localization_skips_empty(self, tmp_path):
        written = write_localization(
            tmp_path / "fr-FR", {"description": "Une app.", "keywords": ""}
        )

        assert written == 1
        assert sorted(p.name for p in (tmp_path / "fr-FR").iterdir()) == [
            "description.txt"
        ]
