"""
Encounter munching: list DDB encounters and resolve one against the
monsters and characters already imported.

The host owns the monster compendium and the world actors, so both are
passed in as plain lists of document dicts.
"""

from __future__ import annotations

import logging
from typing import Any

from .base import DDBImportError
from .config import ImporterSettings
from .fetcher import fetch_campaigns, fetch_encounters
from .models import DifficultyLevel, EncounterCharacter, EncounterMonster, EncounterSummary
from .utils import get_property

logger = logging.getLogger("ddb-importer.encounters")

DIFFICULTY_LEVELS: list[DifficultyLevel] = [
    DifficultyLevel(id=None, name="No challenge", color="grey"),
    DifficultyLevel(id=1, name="Easy", color="green"),
    DifficultyLevel(id=2, name="Medium", color="brown"),
    DifficultyLevel(id=3, name="Hard", color="orange"),
    DifficultyLevel(id=4, name="Deadly", color="red"),
]


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_difficulty(difficulty_id: Any) -> DifficultyLevel:
    """Difficulty for a DDB difficulty id; unknown ids read as no challenge."""
    wanted = _as_int(difficulty_id)
    for level in DIFFICULTY_LEVELS:
        if level.id == wanted:
            return level
    return DIFFICULTY_LEVELS[0]


def filter_encounters(
    encounters: list[dict],
    campaign_id: str | int | None,
    campaign_ids: list[int],
) -> list[dict]:
    """Encounters of one campaign.

    An empty campaign id, or one the user is not part of, returns every
    encounter.
    """
    wanted = _as_int(campaign_id)
    if wanted is None or wanted not in campaign_ids:
        return encounters
    filtered = [e for e in encounters if _as_int(get_property(e, "campaign.id")) == wanted]
    logger.debug(f"{len(filtered)} encounters in campaign {wanted}")
    return filtered


def summarize_encounter(
    encounter: dict,
    monster_index: list[dict] | None = None,
    actors: list[dict] | None = None,
) -> EncounterSummary:
    """Resolve an encounter's monsters and characters.

    Args:
        encounter: Raw DDB encounter.
        monster_index: Compendium index entries (``name``, ``_id`` and
            ``flags.ddbimporter.id``).
        actors: World actor documents (``flags.ddbimporter.dndbeyond.characterId``).

    Returns:
        EncounterSummary listing found and missing monsters and characters.
    """
    monsters_by_ddb_id: dict[int, dict] = {}
    for entry in monster_index or []:
        ddb_id = _as_int(get_property(entry, "flags.ddbimporter.id"))
        if ddb_id is not None:
            monsters_by_ddb_id.setdefault(ddb_id, entry)

    actors_by_character_id: dict[int, dict] = {}
    for actor in actors or []:
        character_id = _as_int(get_property(actor, "flags.ddbimporter.dndbeyond.characterId"))
        if character_id is not None:
            actors_by_character_id.setdefault(character_id, actor)

    good_monsters: list[EncounterMonster] = []
    missing_monsters: list[EncounterMonster] = []
    for monster in encounter.get("monsters") or []:
        ddb_id = _as_int(monster.get("id"))
        if ddb_id is None:
            continue
        quantity = monster.get("quantity") or 1
        found = monsters_by_ddb_id.get(ddb_id)
        if found:
            good_monsters.append(EncounterMonster(
                ddb_id=ddb_id,
                quantity=quantity,
                name=found.get("name"),
                id=found.get("_id") or found.get("id"),
            ))
        else:
            missing_monsters.append(EncounterMonster(ddb_id=ddb_id, quantity=quantity))

    good_characters: list[EncounterCharacter] = []
    missing_characters: list[EncounterCharacter] = []
    for player in encounter.get("players") or []:
        if player.get("hidden"):
            continue
        ddb_id = _as_int(player.get("id"))
        if ddb_id is None:
            continue
        found = actors_by_character_id.get(ddb_id)
        if found:
            good_characters.append(EncounterCharacter(
                ddb_id=ddb_id,
                name=found.get("name") or player.get("name", ""),
                id=found.get("_id") or found.get("id"),
            ))
        else:
            missing_characters.append(EncounterCharacter(ddb_id=ddb_id, name=player.get("name", "")))

    return EncounterSummary(
        id=str(encounter.get("id", "")),
        name=encounter.get("name") or "",
        difficulty=get_difficulty(encounter.get("difficulty")),
        description=encounter.get("description") or "",
        rewards=encounter.get("rewards") or "",
        summary=encounter.get("flavorText") or "",
        campaign=encounter.get("campaign"),
        good_monsters=good_monsters,
        missing_monster_list=missing_monsters,
        good_characters=good_characters,
        missing_character_list=missing_characters,
    )


class EncounterMuncher:
    """Fetches encounters once and resolves them on demand.

    The fetched list is kept on the instance; call ``load(refresh=True)``
    to fetch again.
    """

    def __init__(self, settings: ImporterSettings):
        self.settings = settings
        self.encounters: list[dict] | None = None
        self.campaign_ids: list[int] | None = None

    async def load(self, refresh: bool = False) -> list[dict]:
        """Fetch (or reuse) the user's encounters."""
        if self.encounters is None or refresh:
            self.encounters = await fetch_encounters(self.settings)
        return self.encounters

    async def load_campaign_ids(self) -> list[int]:
        if self.campaign_ids is None:
            campaigns = await fetch_campaigns(self.settings)
            self.campaign_ids = [cid for cid in (_as_int(c.get("id")) for c in campaigns) if cid is not None]
        return self.campaign_ids

    async def filter(self, campaign_id: str | int | None = None) -> list[dict]:
        """Encounters of a campaign, or all of them."""
        encounters = await self.load()
        if campaign_id in (None, ""):
            return encounters
        campaign_ids = await self.load_campaign_ids()
        return filter_encounters(encounters, campaign_id, campaign_ids)

    def find(self, encounter_id: str | int) -> dict:
        """Look up a loaded encounter by id.

        Raises:
            DDBImportError: If encounters are not loaded or the id is unknown.
        """
        if self.encounters is None:
            raise DDBImportError("Encounters are not loaded yet")
        wanted = str(encounter_id).strip()
        for encounter in self.encounters:
            if str(encounter.get("id")) == wanted:
                return encounter
        raise DDBImportError(f"Encounter not found: {wanted}")

    async def parse(
        self,
        encounter_id: str | int,
        monster_index: list[dict] | None = None,
        actors: list[dict] | None = None,
    ) -> EncounterSummary:
        """Resolve one encounter against the given monsters and actors."""
        await self.load()
        encounter = self.find(encounter_id)
        logger.debug(f"Parsing encounter {encounter.get('name')} ({encounter_id})")
        return summarize_encounter(encounter, monster_index, actors)
