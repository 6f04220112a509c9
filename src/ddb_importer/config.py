"""
Importer settings, read from the environment (and an optional .env file).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .schema import DDB_API_BASE_URL, DDB_PROXY_URL

logger = logging.getLogger("ddb-importer")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ImporterSettings(BaseModel):
    """Tunables for fetching and munching D&D Beyond content."""

    api_endpoint: str = Field(default=DDB_PROXY_URL, description="Base URL of the DDB proxy")
    character_api_url: str = Field(default=DDB_API_BASE_URL, description="DDB v5 character service")
    cobalt: str = Field(default="", description="DDB session cookie value, forwarded to the proxy")
    beta_key: str = ""
    debug_json: bool = Field(default=False, description="Write raw proxy payloads to debug_dir")
    debug_dir: Path = Path("ddb_debug")
    munching_policy_add_spell_effects: bool = True
    character_update_policy_add_spell_effects: bool = False
    pact_spells_prepared: bool = False
    custom_overrides_file: Path | None = None
    request_timeout: float = 10.0

    def add_spell_effects(self, is_generic: bool) -> bool:
        """Whether spell effect hints become active effects.

        Compendium munches (generic spells) and character imports have
        separate switches.
        """
        if is_generic:
            return self.munching_policy_add_spell_effects
        return self.character_update_policy_add_spell_effects


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={value!r}, using {default}")
        return default


def load_settings(env_file: str | Path | None = None) -> ImporterSettings:
    """Load settings from ``DDB_*`` environment variables.

    Args:
        env_file: Optional path to a .env file. When omitted, python-dotenv
            searches for one from the working directory.

    Returns:
        ImporterSettings with environment values over the defaults.
    """
    if not load_dotenv(dotenv_path=env_file):
        logger.debug(".env file not found, using process environment only")

    defaults = ImporterSettings()
    overrides_file = os.getenv("DDB_CUSTOM_OVERRIDES_FILE")

    return ImporterSettings(
        api_endpoint=os.getenv("DDB_API_ENDPOINT", defaults.api_endpoint).rstrip("/"),
        character_api_url=os.getenv("DDB_CHARACTER_API_URL", defaults.character_api_url).rstrip("/"),
        cobalt=os.getenv("DDB_COBALT", ""),
        beta_key=os.getenv("DDB_BETA_KEY", ""),
        debug_json=_env_bool("DDB_DEBUG_JSON", defaults.debug_json),
        debug_dir=Path(os.getenv("DDB_DEBUG_DIR", str(defaults.debug_dir))),
        munching_policy_add_spell_effects=_env_bool(
            "DDB_MUNCH_ADD_SPELL_EFFECTS", defaults.munching_policy_add_spell_effects
        ),
        character_update_policy_add_spell_effects=_env_bool(
            "DDB_CHARACTER_ADD_SPELL_EFFECTS", defaults.character_update_policy_add_spell_effects
        ),
        pact_spells_prepared=_env_bool("DDB_PACT_SPELLS_PREPARED", defaults.pact_spells_prepared),
        custom_overrides_file=Path(overrides_file) if overrides_file else None,
        request_timeout=_env_float("DDB_REQUEST_TIMEOUT", defaults.request_timeout),
    )
