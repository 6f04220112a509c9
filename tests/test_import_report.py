"""Tests for munch results and the import report."""

import pytest

from ddb_importer.base import (
    ImportedDocument,
    ImportReport,
    ImportWarning,
    MunchResult,
    NotImported,
    _generate_suggestions,
    _parse_warning,
    _summarize_document,
)


# ============================================================================
# Fixtures
# ============================================================================

def make_document(name: str, doc_type: str, activity_types: list[str] = ()) -> dict:
    return {
        "_id": f"ddb{name}",
        "name": name,
        "type": doc_type,
        "system": {
            "activities": {f"act{i}": {"type": t} for i, t in enumerate(activity_types)},
        },
    }


@pytest.fixture
def munch_result_success():
    """A clean munch with spells and features."""
    return MunchResult(
        character_name="Thalion Nightbreeze",
        source_id=12345678,
        documents=[
            make_document("Fire Bolt", "spell", ["attack"]),
            make_document("Shield", "spell", ["utility"]),
            make_document("Second Wind", "feat", ["heal"]),
            make_document("Darkvision", "feat"),
        ],
    )


@pytest.fixture
def munch_result_with_warnings():
    """A munch where one spell failed."""
    return MunchResult(
        character_name="Thalion Nightbreeze",
        documents=[make_document("Second Wind", "feat", ["heal"])],
        skipped={"Unknown Spell": "'str' object has no attribute 'get'"},
        warnings=["Failed to parse spell Unknown Spell: 'str' object has no attribute 'get'"],
    )


# ============================================================================
# ImportReport structure tests
# ============================================================================


class TestImportReportStructure:
    """Test ImportReport model and its sub-models."""

    def test_imported_document_default_summary(self):
        """ImportedDocument defaults to empty summary."""
        doc = ImportedDocument(name="Shield", type="spell")
        assert doc.summary == ""

    def test_import_warning_no_suggestion(self):
        """ImportWarning defaults to empty suggestion."""
        warning = ImportWarning(field="general", message="Something happened")
        assert warning.suggestion == ""

    def test_import_report_status_values(self):
        """ImportReport accepts all valid status values."""
        for status in ["success", "success_with_warnings", "failed"]:
            report = ImportReport(status=status, character_name="Test")
            assert report.status == status


# ============================================================================
# MunchResult tests
# ============================================================================


class TestMunchResult:
    """Test MunchResult views and report building."""

    def test_spells_and_features(self, munch_result_success):
        assert [d["name"] for d in munch_result_success.spells] == ["Fire Bolt", "Shield"]
        assert [d["name"] for d in munch_result_success.features] == ["Second Wind", "Darkvision"]

    def test_status_success(self, munch_result_success):
        assert munch_result_success.build_report().status == "success"

    def test_status_with_warnings(self, munch_result_with_warnings):
        report = munch_result_with_warnings.build_report()
        assert report.status == "success_with_warnings"
        assert report.not_imported == [
            NotImported(name="Unknown Spell", reason="'str' object has no attribute 'get'"),
        ]

    def test_status_failed(self):
        result = MunchResult(character_name="Nobody", skipped={"Fireball": "bad data"})
        assert result.build_report().status == "failed"

    def test_imported_summaries(self, munch_result_success):
        report = munch_result_success.build_report()
        summaries = {d.name: d.summary for d in report.imported}
        assert summaries["Fire Bolt"] == "Fire Bolt [attack]"
        assert summaries["Darkvision"] == "Darkvision"


# ============================================================================
# ImportReport formatting tests
# ============================================================================


class TestImportReportFormatting:
    """Test ImportReport.format() output."""

    def test_format_header(self):
        """Format includes character name and status in header."""
        output = ImportReport(status="success", character_name="Thalion Nightbreeze").format()
        assert "D&D Beyond Import Report - Thalion Nightbreeze" in output
        assert "Status: SUCCESS" in output

    def test_format_status_with_warnings(self):
        """Format displays 'SUCCESS WITH WARNINGS' for that status."""
        output = ImportReport(status="success_with_warnings", character_name="Test").format()
        assert "Status: SUCCESS WITH WARNINGS" in output

    def test_format_groups_by_type(self, munch_result_success):
        output = munch_result_success.build_report().format()
        assert "Imported (4 documents):" in output
        assert "  Spells: Fire Bolt [attack], Shield [utility]" in output
        assert "  Features: Second Wind [heal], Darkvision" in output

    def test_format_warnings_and_not_imported(self, munch_result_with_warnings):
        output = munch_result_with_warnings.build_report().format()
        assert "Warnings (1):" in output
        assert "Check the spell on D&D Beyond" in output
        assert "Not Imported (1):" in output
        assert "  - Unknown Spell: " in output

    def test_format_no_trailing_whitespace(self, munch_result_success):
        output = munch_result_success.build_report().format()
        assert output == output.rstrip()


# ============================================================================
# Helper tests
# ============================================================================


class TestHelpers:
    """Test warning parsing and suggestion generation."""

    def test_summarize_document_multiple_activities(self):
        doc = make_document("Maneuver: Tactical Assessment", "feat", ["utility", "check"])
        assert _summarize_document(doc) == "Maneuver: Tactical Assessment [check/utility]"

    @pytest.mark.parametrize("text,field", [
        ("Failed to parse spell Fireball: bad", "spells"),
        ("Failed to parse feature Rage: bad", "features"),
        ("Unknown reset type 9 for uses", "uses"),
        ("Homebrew content detected", "homebrew"),
        ("Something else", "general"),
    ])
    def test_parse_warning_fields(self, text, field):
        warning = _parse_warning(text)
        assert warning.field == field
        assert warning.message == text

    def test_suggestions_for_skipped(self, munch_result_with_warnings):
        suggestions = _generate_suggestions(munch_result_with_warnings)
        assert any("DDB_CUSTOM_OVERRIDES_FILE" in s for s in suggestions)
        assert any("No spells were found" in s for s in suggestions)

    def test_no_suggestions_for_clean_result(self, munch_result_success):
        assert _generate_suggestions(munch_result_success) == []

    def test_description_only_suggestion(self):
        result = MunchResult(documents=[make_document("Darkvision", "feat")])
        suggestions = _generate_suggestions(result)
        assert any("No activities were generated" in s for s in suggestions)
