"""Tests for encounter munching."""

import pytest
from unittest.mock import AsyncMock, patch

from ddb_importer.base import DDBImportError
from ddb_importer.config import ImporterSettings
from ddb_importer.encounters import (
    DIFFICULTY_LEVELS,
    EncounterMuncher,
    filter_encounters,
    get_difficulty,
    summarize_encounter,
)


@pytest.fixture
def encounters() -> list[dict]:
    return [
        {
            "id": "enc-1",
            "name": "Goblin Ambush",
            "difficulty": 2,
            "flavorText": "Goblins leap from the bushes.",
            "description": "<p>A roadside ambush.</p>",
            "rewards": "50 gp",
            "campaign": {"id": 77, "name": "Lost Mine"},
            "monsters": [
                {"id": 16907, "quantity": 4},
                {"id": 17100, "quantity": 1},
            ],
            "players": [
                {"id": 12345678, "name": "Thalion", "hidden": False},
                {"id": 222, "name": "Brom", "hidden": False},
                {"id": 333, "name": "Spectator", "hidden": True},
            ],
        },
        {
            "id": "enc-2",
            "name": "Dragon Lair",
            "difficulty": 4,
            "campaign": {"id": 88, "name": "Other Campaign"},
            "monsters": [],
            "players": [],
        },
        {
            "id": "enc-3",
            "name": "Unfiled",
            "difficulty": None,
            "campaign": None,
            "monsters": [],
            "players": [],
        },
    ]


@pytest.fixture
def monster_index() -> list[dict]:
    return [
        {"_id": "goblin0000000000", "name": "Goblin", "flags": {"ddbimporter": {"id": 16907}}},
        {"_id": "orc0000000000000", "name": "Orc", "flags": {"ddbimporter": {"id": 17001}}},
    ]


@pytest.fixture
def actors() -> list[dict]:
    return [
        {
            "_id": "actorThalion0000",
            "name": "Thalion Nightbreeze",
            "flags": {"ddbimporter": {"dndbeyond": {"characterId": "12345678"}}},
        },
        {"_id": "actorNpc00000000", "name": "Sildar", "flags": {}},
    ]


class TestDifficulty:
    """Test difficulty lookup."""

    def test_known_levels(self):
        assert get_difficulty(1).name == "Easy"
        assert get_difficulty("3").color == "orange"
        assert get_difficulty(4).name == "Deadly"

    def test_unknown_is_no_challenge(self):
        assert get_difficulty(None) == DIFFICULTY_LEVELS[0]
        assert get_difficulty(9).name == "No challenge"


class TestFilterEncounters:
    """Test campaign filtering."""

    def test_filter_by_campaign(self, encounters):
        filtered = filter_encounters(encounters, "77", [77, 88])
        assert [e["id"] for e in filtered] == ["enc-1"]

    def test_empty_campaign_returns_all(self, encounters):
        assert filter_encounters(encounters, "", [77, 88]) == encounters
        assert filter_encounters(encounters, None, [77, 88]) == encounters

    def test_unknown_campaign_returns_all(self, encounters):
        assert filter_encounters(encounters, 999, [77, 88]) == encounters


class TestSummarizeEncounter:
    """Test resolving monsters and characters."""

    def test_monsters_split(self, encounters, monster_index, actors):
        summary = summarize_encounter(encounters[0], monster_index, actors)
        assert len(summary.good_monsters) == 1
        goblin = summary.good_monsters[0]
        assert (goblin.ddb_id, goblin.quantity, goblin.name, goblin.id) == (16907, 4, "Goblin", "goblin0000000000")
        assert [m.ddb_id for m in summary.missing_monster_list] == [17100]
        assert summary.missing_monsters is True

    def test_characters_split(self, encounters, monster_index, actors):
        summary = summarize_encounter(encounters[0], monster_index, actors)
        assert [c.name for c in summary.good_characters] == ["Thalion Nightbreeze"]
        assert summary.good_characters[0].id == "actorThalion0000"
        assert [c.name for c in summary.missing_character_list] == ["Brom"]
        assert summary.missing_characters is True

    def test_hidden_players_skipped(self, encounters, monster_index, actors):
        summary = summarize_encounter(encounters[0], monster_index, actors)
        all_ids = [c.ddb_id for c in summary.good_characters + summary.missing_character_list]
        assert 333 not in all_ids

    def test_details(self, encounters):
        summary = summarize_encounter(encounters[0])
        assert summary.id == "enc-1"
        assert summary.difficulty.name == "Medium"
        assert summary.summary == "Goblins leap from the bushes."
        assert summary.rewards == "50 gp"
        assert summary.campaign == {"id": 77, "name": "Lost Mine"}

    def test_without_index_everything_missing(self, encounters):
        summary = summarize_encounter(encounters[0])
        assert summary.good_monsters == []
        assert len(summary.missing_monster_list) == 2
        assert len(summary.missing_character_list) == 2

    def test_empty_encounter(self, encounters):
        summary = summarize_encounter(encounters[2])
        assert summary.missing_monsters is False
        assert summary.missing_characters is False
        assert summary.difficulty.name == "No challenge"

    def test_format(self, encounters, monster_index, actors):
        text = summarize_encounter(encounters[0], monster_index, actors).format()
        assert "Encounter: Goblin Ambush" in text
        assert "Goblin" in text
        assert "Missing 1: 17100" in text
        assert "Missing 1: Brom" in text


class TestEncounterMuncher:
    """Test the fetching wrapper."""

    @pytest.fixture
    def settings(self) -> ImporterSettings:
        return ImporterSettings(cobalt="cookie")

    @pytest.mark.asyncio
    async def test_load_caches(self, settings, encounters):
        muncher = EncounterMuncher(settings)
        with patch("ddb_importer.encounters.fetch_encounters", new=AsyncMock(return_value=encounters)) as fetch:
            first = await muncher.load()
            second = await muncher.load()
            assert first is second
            assert fetch.await_count == 1

            await muncher.load(refresh=True)
            assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_filter_loads_campaigns(self, settings, encounters):
        muncher = EncounterMuncher(settings)
        with patch("ddb_importer.encounters.fetch_encounters", new=AsyncMock(return_value=encounters)), \
             patch("ddb_importer.encounters.fetch_campaigns", new=AsyncMock(return_value=[{"id": 88}])):
            filtered = await muncher.filter("88")

        assert [e["id"] for e in filtered] == ["enc-2"]
        assert muncher.campaign_ids == [88]

    @pytest.mark.asyncio
    async def test_filter_without_campaign_skips_campaign_fetch(self, settings, encounters):
        muncher = EncounterMuncher(settings)
        campaigns = AsyncMock(return_value=[])
        with patch("ddb_importer.encounters.fetch_encounters", new=AsyncMock(return_value=encounters)), \
             patch("ddb_importer.encounters.fetch_campaigns", new=campaigns):
            filtered = await muncher.filter()

        assert len(filtered) == 3
        campaigns.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_parse(self, settings, encounters, monster_index, actors):
        muncher = EncounterMuncher(settings)
        with patch("ddb_importer.encounters.fetch_encounters", new=AsyncMock(return_value=encounters)):
            summary = await muncher.parse("enc-1", monster_index, actors)

        assert summary.name == "Goblin Ambush"
        assert len(summary.good_monsters) == 1

    @pytest.mark.asyncio
    async def test_parse_unknown_id(self, settings, encounters):
        muncher = EncounterMuncher(settings)
        with patch("ddb_importer.encounters.fetch_encounters", new=AsyncMock(return_value=encounters)):
            with pytest.raises(DDBImportError) as exc_info:
                await muncher.parse("enc-404")

        assert "enc-404" in str(exc_info.value)

    def test_find_before_load(self, settings):
        with pytest.raises(DDBImportError):
            EncounterMuncher(settings).find("enc-1")
