"""Tests for importer settings."""

from pathlib import Path

import pytest

from ddb_importer.config import ImporterSettings, load_settings
from ddb_importer.schema import DDB_API_BASE_URL, DDB_PROXY_URL

DDB_ENV_VARS = [
    "DDB_API_ENDPOINT",
    "DDB_CHARACTER_API_URL",
    "DDB_COBALT",
    "DDB_BETA_KEY",
    "DDB_DEBUG_JSON",
    "DDB_DEBUG_DIR",
    "DDB_MUNCH_ADD_SPELL_EFFECTS",
    "DDB_CHARACTER_ADD_SPELL_EFFECTS",
    "DDB_PACT_SPELLS_PREPARED",
    "DDB_CUSTOM_OVERRIDES_FILE",
    "DDB_REQUEST_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No DDB_* variables and no .env file in reach."""
    for name in DDB_ENV_VARS:
        # setenv first so teardown also removes values written by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestImporterSettings:
    """Test defaults and policy helpers."""

    def test_defaults(self):
        settings = ImporterSettings()
        assert settings.api_endpoint == DDB_PROXY_URL
        assert settings.character_api_url == DDB_API_BASE_URL
        assert settings.cobalt == ""
        assert settings.custom_overrides_file is None
        assert settings.request_timeout == 10.0

    def test_only_used_policies(self):
        """Document updates belong to the host; no update policy is carried."""
        assert "munching_policy_update_existing" not in ImporterSettings.model_fields

    def test_add_spell_effects_policy(self):
        settings = ImporterSettings()
        assert settings.add_spell_effects(is_generic=True) is True
        assert settings.add_spell_effects(is_generic=False) is False

        settings = ImporterSettings(
            munching_policy_add_spell_effects=False,
            character_update_policy_add_spell_effects=True,
        )
        assert settings.add_spell_effects(is_generic=True) is False
        assert settings.add_spell_effects(is_generic=False) is True


class TestLoadSettings:
    """Test reading settings from the environment."""

    def test_defaults_without_env(self, clean_env, tmp_path):
        settings = load_settings(env_file=tmp_path / "missing.env")
        assert settings == ImporterSettings()

    def test_environment_values(self, clean_env, tmp_path):
        clean_env.setenv("DDB_API_ENDPOINT", "https://proxy.example.test/")
        clean_env.setenv("DDB_COBALT", "secret-cookie")
        clean_env.setenv("DDB_DEBUG_JSON", "yes")
        clean_env.setenv("DDB_DEBUG_DIR", str(tmp_path / "dumps"))
        clean_env.setenv("DDB_CHARACTER_ADD_SPELL_EFFECTS", "1")
        clean_env.setenv("DDB_MUNCH_ADD_SPELL_EFFECTS", "off")
        clean_env.setenv("DDB_PACT_SPELLS_PREPARED", "TRUE")
        clean_env.setenv("DDB_CUSTOM_OVERRIDES_FILE", "overrides.yaml")
        clean_env.setenv("DDB_REQUEST_TIMEOUT", "2.5")

        settings = load_settings(env_file=tmp_path / "missing.env")

        assert settings.api_endpoint == "https://proxy.example.test"
        assert settings.cobalt == "secret-cookie"
        assert settings.debug_json is True
        assert settings.debug_dir == tmp_path / "dumps"
        assert settings.character_update_policy_add_spell_effects is True
        assert settings.munching_policy_add_spell_effects is False
        assert settings.pact_spells_prepared is True
        assert settings.custom_overrides_file == Path("overrides.yaml")
        assert settings.request_timeout == 2.5

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "ddb.env"
        env_file.write_text("DDB_COBALT=from-file\nDDB_BETA_KEY=beta\n")

        settings = load_settings(env_file=env_file)

        assert settings.cobalt == "from-file"
        assert settings.beta_key == "beta"

    def test_invalid_timeout_falls_back(self, clean_env, tmp_path):
        clean_env.setenv("DDB_REQUEST_TIMEOUT", "soon")
        settings = load_settings(env_file=tmp_path / "missing.env")
        assert settings.request_timeout == 10.0

    def test_blank_bool_uses_default(self, clean_env, tmp_path):
        clean_env.setenv("DDB_MUNCH_ADD_SPELL_EFFECTS", "")
        settings = load_settings(env_file=tmp_path / "missing.env")
        assert settings.munching_policy_add_spell_effects is True
