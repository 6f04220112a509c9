"""
Base models and exceptions for the D&D Beyond import system.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DDBImportError(Exception):
    """Raised when fetching or reading D&D Beyond data fails.

    Provides a user-facing message explaining what went wrong
    and, where possible, how to fix it.
    """


class ImportedDocument(BaseModel):
    """A document that was successfully built."""

    name: str = Field(description="Document name")
    type: str = Field(description='Foundry item type, e.g. "spell" or "feat"')
    summary: str = Field(default="", description="Brief summary of the generated document")


class ImportWarning(BaseModel):
    """A warning generated during import."""

    field: str = Field(description="Area that triggered the warning")
    message: str = Field(description="Human-readable warning message")
    suggestion: str = Field(default="", description="Actionable suggestion to resolve the warning")


class NotImported(BaseModel):
    """An entry that could not be imported."""

    name: str = Field(description="Entry name that was not imported")
    reason: str = Field(description="Reason why the entry was not imported")


class ImportReport(BaseModel):
    """Structured import report with status, documents, warnings, and suggestions."""

    status: str = Field(description='Import status: "success", "success_with_warnings", or "failed"')
    character_name: str = Field(description="Name of the munched character")
    imported: list[ImportedDocument] = Field(default_factory=list)
    warnings: list[ImportWarning] = Field(default_factory=list)
    not_imported: list[NotImported] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    def format(self) -> str:
        """Format the report as a readable text block.

        Returns:
            Multi-line formatted string suitable for an MCP tool response.
        """
        lines: list[str] = []

        lines.append(f"D&D Beyond Import Report - {self.character_name}")
        status_display = self.status.upper().replace("_", " ")
        lines.append(f"Status: {status_display}")
        lines.append("")

        if self.imported:
            lines.append(f"Imported ({len(self.imported)} documents):")
            by_type: dict[str, list[ImportedDocument]] = {}
            for doc in self.imported:
                by_type.setdefault(doc.type, []).append(doc)
            for doc_type, docs in by_type.items():
                summaries = [d.summary if d.summary else d.name for d in docs]
                lines.append(f"  {_TYPE_LABELS.get(doc_type, doc_type)}: {', '.join(summaries)}")
            lines.append("")

        if self.warnings:
            lines.append(f"Warnings ({len(self.warnings)}):")
            for w in self.warnings:
                line = f"  - {w.message}"
                if w.suggestion:
                    line += f" ({w.suggestion})"
                lines.append(line)
            lines.append("")

        if self.not_imported:
            lines.append(f"Not Imported ({len(self.not_imported)}):")
            for ni in self.not_imported:
                lines.append(f"  - {ni.name}: {ni.reason}")
            lines.append("")

        if self.suggestions:
            lines.append("Suggestions:")
            for s in self.suggestions:
                lines.append(f"  - {s}")
            lines.append("")

        return "\n".join(lines).rstrip()


_TYPE_LABELS = {
    "spell": "Spells",
    "feat": "Features",
}


class MunchResult(BaseModel):
    """Result of munching a character's spells and features."""

    character_name: str = Field(default="Unknown Character")
    source_id: int | None = Field(default=None, description="DDB character id")
    documents: list[dict[str, Any]] = Field(default_factory=list)
    skipped: dict[str, str] = Field(
        default_factory=dict,
        description="Entry name → reason it was not imported",
    )
    warnings: list[str] = Field(default_factory=list)

    @property
    def spells(self) -> list[dict[str, Any]]:
        return [d for d in self.documents if d.get("type") == "spell"]

    @property
    def features(self) -> list[dict[str, Any]]:
        return [d for d in self.documents if d.get("type") == "feat"]

    def build_report(self) -> ImportReport:
        """Build a structured ImportReport from this result."""
        imported = [
            ImportedDocument(
                name=doc.get("name", ""),
                type=doc.get("type", ""),
                summary=_summarize_document(doc),
            )
            for doc in self.documents
        ]
        warnings = [_parse_warning(w) for w in self.warnings]
        not_imported = [NotImported(name=name, reason=reason) for name, reason in self.skipped.items()]

        if self.skipped and not self.documents:
            status = "failed"
        elif self.warnings or self.skipped:
            status = "success_with_warnings"
        else:
            status = "success"

        return ImportReport(
            status=status,
            character_name=self.character_name,
            imported=imported,
            warnings=warnings,
            not_imported=not_imported,
            suggestions=_generate_suggestions(self),
        )


def _summarize_document(doc: dict[str, Any]) -> str:
    name = doc.get("name", "")
    activities = (doc.get("system") or {}).get("activities") or {}
    kinds = sorted({a.get("type", "") for a in activities.values()})
    if kinds:
        return f"{name} [{'/'.join(kinds)}]"
    return name


def _parse_warning(warning_text: str) -> ImportWarning:
    """Parse a raw warning string into a structured ImportWarning."""
    field = "general"
    suggestion = ""

    lower = warning_text.lower()

    if "spell" in lower:
        field = "spells"
        suggestion = "Check the spell on D&D Beyond or add a custom override"
    elif "feature" in lower or "trait" in lower:
        field = "features"
        suggestion = "Add a custom override for this feature if it matters"
    elif "reset" in lower or "uses" in lower:
        field = "uses"
        suggestion = "Set limited uses manually after import"
    elif "homebrew" in lower:
        field = "homebrew"
        suggestion = "Homebrew content imported as custom; verify manually"

    return ImportWarning(field=field, message=warning_text, suggestion=suggestion)


def _generate_suggestions(result: MunchResult) -> list[str]:
    suggestions: list[str] = []

    if result.skipped:
        suggestions.append(
            "Some entries could not be parsed. Add them to a custom overrides file "
            "(DDB_CUSTOM_OVERRIDES_FILE) or create them manually"
        )

    if not result.spells:
        suggestions.append("No spells were found. Casters should check the character is public on D&D Beyond")

    without_activity = [
        doc.get("name", "") for doc in result.documents
        if not (doc.get("system") or {}).get("activities")
    ]
    if without_activity and len(without_activity) == len(result.documents):
        suggestions.append("No activities were generated; every document is description only")

    return suggestions
