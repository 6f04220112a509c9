"""
DDB Importer MCP Server
Turns D&D Beyond characters, spells and encounters into Foundry dnd5e documents.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from .base import DDBImportError
from .character import munch_character
from .config import ImporterSettings, load_settings
from .encounters import EncounterMuncher
from .enrichers.custom import load_custom_overrides
from .fetcher import fetch_character, read_character_file
from .spells.parser import DDBSpell

logger = logging.getLogger("ddb-importer")

logging.basicConfig(
    level=logging.INFO,
    )

importer_settings = load_settings()
logger.debug(f"📡 Proxy endpoint: {importer_settings.api_endpoint}")

encounter_muncher = EncounterMuncher(importer_settings)

mcp = FastMCP(
    name="ddb-importer"
)

logger.debug("✅ Server initialized, registering tools")


def _read_json_list(path: str | None, label: str) -> list[dict]:
    if not path:
        return []
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise DDBImportError(f"{label} file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise DDBImportError(f"Invalid JSON in {label} file: {e}") from None
    if not isinstance(data, list):
        raise DDBImportError(f"{label} file must hold a JSON list, got {type(data).__name__}")
    return data


# ----------------------------------------------------------------------
# Character import
# ----------------------------------------------------------------------

async def _import_character_impl(
    source: str,
    output_path: str | None = None,
    settings: ImporterSettings | None = None,
) -> str:
    """Implementation of import_character tool (separated for testing).

    Args:
        source: D&D Beyond character URL, numeric ID, or path to a JSON export
        output_path: Where to write the generated documents as JSON
        settings: Importer settings; module settings when omitted

    Returns:
        Formatted import report, or an error message
    """
    settings = settings or importer_settings
    try:
        if Path(source).suffix == ".json" or Path(source).is_file():
            ddb = read_character_file(source)
        else:
            ddb = await fetch_character(source, settings)
        result = munch_character(ddb, settings=settings)
    except DDBImportError as e:
        return f"❌ Import failed: {e}"

    report = result.build_report().format()
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(result.documents, indent=2), encoding="utf-8")
        logger.info(f"Wrote {len(result.documents)} documents to {path}")
        report += f"\n\nDocuments written to {path}"
    return report


@mcp.tool
async def import_character(
    source: Annotated[str, Field(description="D&D Beyond character URL, numeric ID, or path to a character JSON export")],
    output_path: Annotated[str | None, Field(description="Optional path to write the generated Foundry documents (JSON)")] = None,
) -> str:
    """Import a D&D Beyond character's spells and features as Foundry documents.

    Public characters are fetched from D&D Beyond; private ones can be
    imported from a JSON export. Returns an import report listing what was
    imported, what was skipped and why.
    """
    return await _import_character_impl(source, output_path)


# ----------------------------------------------------------------------
# Spell parsing
# ----------------------------------------------------------------------

def _parse_spell_json_impl(
    spell_json: str,
    is_generic: bool = True,
    settings: ImporterSettings | None = None,
) -> str:
    """Implementation of parse_spell_json tool (separated for testing)."""
    settings = settings or importer_settings
    try:
        spell_data = json.loads(spell_json)
    except json.JSONDecodeError as e:
        return f"❌ Invalid spell JSON: {e}"
    if not isinstance(spell_data, dict):
        return "❌ Spell JSON must be an object"
    if "definition" not in spell_data:
        spell_data = {"definition": spell_data}

    try:
        custom = load_custom_overrides(settings.custom_overrides_file) if settings.custom_overrides_file else None
    except DDBImportError as e:
        return f"❌ {e}"

    document = DDBSpell(spell_data, settings=settings, is_generic=is_generic, custom=custom).parse()
    return json.dumps(document, indent=2)


@mcp.tool
def parse_spell_json(
    spell_json: Annotated[str, Field(description="A D&D Beyond spell payload (entry with 'definition', or a bare definition) as JSON text")],
    is_generic: Annotated[bool, Field(description="Treat as a compendium spell rather than a character's spell")] = True,
) -> str:
    """Convert one D&D Beyond spell into a Foundry dnd5e spell document (JSON)."""
    return _parse_spell_json_impl(spell_json, is_generic)


# ----------------------------------------------------------------------
# Encounters
# ----------------------------------------------------------------------

async def _list_encounters_impl(
    campaign_id: str | None = None,
    muncher: EncounterMuncher | None = None,
) -> str:
    """Implementation of list_encounters tool (separated for testing)."""
    muncher = muncher or encounter_muncher
    if not muncher.settings.cobalt:
        return "❌ No cobalt cookie configured. Set DDB_COBALT to list encounters."
    try:
        encounters = await muncher.filter(campaign_id)
    except DDBImportError as e:
        return f"❌ {e}"

    if not encounters:
        return "No encounters found."

    lines = [f"**Encounters ({len(encounters)}):**"]
    for encounter in encounters:
        campaign = (encounter.get("campaign") or {}).get("name")
        suffix = f" [{campaign}]" if campaign else ""
        lines.append(f"- {encounter.get('name') or 'Unnamed'} (id: {encounter.get('id')}){suffix}")
    return "\n".join(lines)


@mcp.tool
async def list_encounters(
    campaign_id: Annotated[str | None, Field(description="Only list encounters of this D&D Beyond campaign")] = None,
) -> str:
    """List the D&D Beyond encounters available to the configured account."""
    return await _list_encounters_impl(campaign_id)


async def _describe_encounter_impl(
    encounter_id: str,
    monster_index_path: str | None = None,
    actors_path: str | None = None,
    muncher: EncounterMuncher | None = None,
) -> str:
    """Implementation of describe_encounter tool (separated for testing)."""
    muncher = muncher or encounter_muncher
    try:
        monster_index = _read_json_list(monster_index_path, "Monster index")
        actors = _read_json_list(actors_path, "Actors")
        summary = await muncher.parse(encounter_id, monster_index, actors)
    except DDBImportError as e:
        return f"❌ {e}"
    return summary.format()


@mcp.tool
async def describe_encounter(
    encounter_id: Annotated[str, Field(description="D&D Beyond encounter id")],
    monster_index_path: Annotated[str | None, Field(description="JSON list of compendium monster index entries")] = None,
    actors_path: Annotated[str | None, Field(description="JSON list of world actor documents")] = None,
) -> str:
    """Describe an encounter and report which monsters and characters are missing."""
    return await _describe_encounter_impl(encounter_id, monster_index_path, actors_path)


logger.debug("✅ All tools successfully registered. DDB Importer server running! 🎲")

def main() -> None:
    """Main entry point for the DDB Importer MCP Server."""
    mcp.run()

if __name__ == "__main__":
    main()
