"""
User-supplied override tables loaded from YAML.

The file uses the same sections as the built-in enricher tables, keyed by
exact document name::

    activity_hints:
      "Second Wind":
        type: heal
        target_type: self
    document_overrides:
      "Action Surge":
        remove_damage: true
    effect_hints:
      "Shield":
        transfer: false
        changes:
          - key: system.attributes.ac.bonus
            value: "+5"
            mode: 2
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..base import DDBImportError
from ..models import ActivityHint, AdditionalActivity, DocumentOverride, EffectHint

logger = logging.getLogger("ddb-importer.enrichers")


class CustomOverrides(BaseModel):
    """Override tables layered over the built-in ones."""

    name_hints: dict[str, str] = Field(default_factory=dict)
    activity_hints: dict[str, ActivityHint] = Field(default_factory=dict)
    additional_activities: dict[str, list[AdditionalActivity]] = Field(default_factory=dict)
    document_overrides: dict[str, DocumentOverride] = Field(default_factory=dict)
    effect_hints: dict[str, EffectHint] = Field(default_factory=dict)

    def entry_count(self) -> int:
        return (
            len(self.name_hints)
            + len(self.activity_hints)
            + len(self.additional_activities)
            + len(self.document_overrides)
            + len(self.effect_hints)
        )


def load_custom_overrides(path: str | Path) -> CustomOverrides:
    """Load and validate a YAML overrides file.

    Args:
        path: Path to the YAML file.

    Returns:
        CustomOverrides with every section present in the file.

    Raises:
        DDBImportError: If the file is missing, is not valid YAML, or an
            entry does not match the override record shapes.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise DDBImportError(f"Overrides file not found: {path}") from None
    except yaml.YAMLError as e:
        raise DDBImportError(f"Invalid YAML in overrides file {path}: {e}") from None

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DDBImportError(
            f"Invalid overrides file format: expected a mapping, got {type(data).__name__}"
        )

    try:
        overrides = CustomOverrides.model_validate(data)
    except ValidationError as e:
        raise DDBImportError(f"Invalid entry in overrides file {path}: {e}") from None

    logger.info(f"Loaded {overrides.entry_count()} custom overrides from {path}")
    return overrides
