"""
Data models for the D&D Beyond importer.

Input records (SpellDescriptor) are frozen; derived records (TargetSpec,
RangeSpec) are rebuilt on every parse call.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Spell input
# ---------------------------------------------------------------------------

class SpellDescriptor(BaseModel):
    """The parts of a DDB spell definition the heuristics read."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str = ""
    level: int = 0
    school: str = ""
    range_origin: str | None = Field(
        default=None,
        description="Touch, Self, None, Ranged, Feet, Miles, Sight, Special, Any, or absent",
    )
    range_value: int | None = None
    aoe_type: str | None = None
    aoe_value: int | None = None
    description: str = ""
    modifiers: list[dict[str, Any]] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    requires_attack_roll: bool = False
    requires_saving_throw: bool = False

    @classmethod
    def from_ddb(cls, definition: dict) -> SpellDescriptor:
        """Build a descriptor from a raw DDB spell definition.

        Missing or null keys fall back to the model defaults.
        """
        spell_range = definition.get("range") or {}
        return cls(
            id=definition.get("id"),
            name=definition.get("name") or "",
            level=definition.get("level") or 0,
            school=definition.get("school") or "",
            range_origin=spell_range.get("origin"),
            range_value=_as_int(spell_range.get("rangeValue")),
            aoe_type=spell_range.get("aoeType") or None,
            aoe_value=_as_int(spell_range.get("aoeValue")),
            description=definition.get("description") or "",
            modifiers=list(definition.get("modifiers") or []),
            tags=list(definition.get("tags") or []),
            requires_attack_roll=bool(definition.get("requiresAttackRoll")),
            requires_saving_throw=bool(definition.get("requiresSavingThrow")),
        )

    def has_damage_modifier(self) -> bool:
        return any(mod.get("type") == "damage" for mod in self.modifiers)


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Derived target / range
# ---------------------------------------------------------------------------

class TargetAffects(BaseModel):
    """Creature-based targeting."""
    count: int | str | None = ""
    type: str = ""
    choice: bool = False
    special: str = ""


class TargetTemplate(BaseModel):
    """Area-based targeting (measured template)."""
    count: int | str = ""
    contiguous: bool = False
    type: str = ""
    size: int | str = ""
    width: int | str = ""
    height: int | str = ""
    units: str = "ft"


class TargetSpec(BaseModel):
    """Target block of a Foundry spell or activity."""
    prompt: bool = True
    affects: TargetAffects = Field(default_factory=TargetAffects)
    template: TargetTemplate = Field(default_factory=TargetTemplate)


class RangeSpec(BaseModel):
    """Range block of a Foundry spell or activity."""
    value: int | None = None
    units: str | None = "ft"


# ---------------------------------------------------------------------------
# Activities and effects
# ---------------------------------------------------------------------------

class ActivityType(str, Enum):
    """Foundry dnd5e activity types the importer can generate."""
    SAVE = "save"
    ATTACK = "attack"
    DAMAGE = "damage"
    HEAL = "heal"
    UTILITY = "utility"
    ENCHANT = "enchant"
    SUMMON = "summon"
    CHECK = "check"
    NONE = "none"


class EffectMode(IntEnum):
    """Foundry active effect change modes."""
    CUSTOM = 0
    MULTIPLY = 1
    ADD = 2
    DOWNGRADE = 3
    UPGRADE = 4
    OVERRIDE = 5


class EffectChange(BaseModel):
    """One change applied by an active effect."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str
    mode: EffectMode = EffectMode.ADD
    priority: int = 20


class EffectHint(BaseModel):
    """Active effect to attach to a named document."""

    model_config = ConfigDict(frozen=True)

    type: Literal["feat", "spell", "enchant"] = "feat"
    name: str | None = Field(default=None, description="Effect label, defaults to the document name")
    transfer: bool = True
    changes: list[EffectChange] = Field(default_factory=list)
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Dotted-path values set on the effect document, e.g. duration.rounds",
    )


class ActivityHint(BaseModel):
    """Forced activity type and construction options for a named document."""

    model_config = ConfigDict(frozen=True)

    type: ActivityType
    name: str | None = None
    activation_type: str | None = None
    target_type: str | None = None
    add_item_consume: bool = False
    roll: dict[str, Any] | None = None
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Merged into the built activity, dotted keys expanded",
    )


class AdditionalActivity(BaseModel):
    """An extra activity generated next to the primary one."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ActivityType
    build: dict[str, Any] = Field(default_factory=dict)


class DocumentOverride(BaseModel):
    """Field replacements applied after the document is built."""

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)
    remove_damage: bool = False


# ---------------------------------------------------------------------------
# Encounters
# ---------------------------------------------------------------------------

class DifficultyLevel(BaseModel):
    """DDB encounter difficulty rating."""
    id: int | None = None
    name: str
    color: str


class EncounterMonster(BaseModel):
    """A monster referenced by an encounter."""
    ddb_id: int
    quantity: int = 1
    name: str | None = None
    id: str | None = Field(default=None, description="Compendium document id, when found")


class EncounterCharacter(BaseModel):
    """A player character referenced by an encounter."""
    ddb_id: int
    name: str
    id: str | None = Field(default=None, description="World actor id, when found")


class EncounterSummary(BaseModel):
    """An encounter resolved against the available monsters and actors."""
    id: str
    name: str
    difficulty: DifficultyLevel
    description: str = ""
    rewards: str = ""
    summary: str = ""
    campaign: dict[str, Any] | None = None
    good_monsters: list[EncounterMonster] = Field(default_factory=list)
    missing_monster_list: list[EncounterMonster] = Field(default_factory=list)
    good_characters: list[EncounterCharacter] = Field(default_factory=list)
    missing_character_list: list[EncounterCharacter] = Field(default_factory=list)

    @property
    def missing_monsters(self) -> bool:
        return len(self.missing_monster_list) != 0

    @property
    def missing_characters(self) -> bool:
        return len(self.missing_character_list) != 0

    def format(self) -> str:
        """Format the encounter as a readable text block."""
        lines: list[str] = [f"Encounter: {self.name}"]
        if self.summary and self.summary.strip():
            lines.append(f"Summary: {self.summary}")

        if self.good_characters or self.missing_character_list:
            line = "Characters: " + ", ".join(c.name for c in self.good_characters)
            if self.missing_characters:
                names = ", ".join(c.name for c in self.missing_character_list)
                line += f" (Missing {len(self.missing_character_list)}: {names})"
            lines.append(line)

        if self.good_monsters or self.missing_monster_list:
            line = "Monsters: " + ", ".join(m.name or str(m.ddb_id) for m in self.good_monsters)
            if self.missing_monsters:
                ids = ", ".join(str(m.ddb_id) for m in self.missing_monster_list)
                line += f" (Missing {len(self.missing_monster_list)}: {ids})"
            lines.append(line)

        lines.append(f"Difficulty: {self.difficulty.name}")
        if self.rewards and self.rewards.strip():
            lines.append(f"Rewards: {self.rewards}")
        return "\n".join(lines)
