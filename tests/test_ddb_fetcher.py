"""Tests for D&D Beyond character and proxy fetching."""

import pytest
from unittest.mock import AsyncMock, patch, MagicMock
import httpx
import json
from pathlib import Path

from ddb_importer.fetcher import (
    extract_character_id,
    fetch_campaigns,
    fetch_character,
    fetch_encounters,
    read_character_file,
)
from ddb_importer.base import DDBImportError
from ddb_importer.config import ImporterSettings


def mock_client_with(method: str, response=None, side_effect=None) -> MagicMock:
    """Build an httpx.AsyncClient stand-in usable as an async context manager."""
    mock_client = MagicMock()
    setattr(mock_client, method, AsyncMock(return_value=response, side_effect=side_effect))
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


def json_response(data, status_code: int = 200) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = data
    return mock_response


class TestExtractCharacterId:
    """Test character ID extraction from various URL formats."""

    def test_extract_character_id_from_full_url(self):
        """Extract ID from full DDB character URL."""
        url = "https://www.dndbeyond.com/characters/12345678"
        assert extract_character_id(url) == 12345678

    def test_extract_character_id_from_builder_url(self):
        """Extract ID from DDB character builder URL."""
        url = "https://www.dndbeyond.com/characters/12345678/builder"
        assert extract_character_id(url) == 12345678

    def test_extract_character_id_bare_number(self):
        """Extract ID from bare numeric string."""
        assert extract_character_id("12345678") == 12345678

    def test_extract_character_id_without_protocol(self):
        """Extract ID from URL without protocol."""
        url = "dndbeyond.com/characters/87654321"
        assert extract_character_id(url) == 87654321

    def test_extract_character_id_invalid(self):
        """Reject invalid input that's not a URL or number."""
        with pytest.raises(DDBImportError) as exc_info:
            extract_character_id("not-a-url")
        assert "Invalid D&D Beyond character URL or ID" in str(exc_info.value)


class TestFetchCharacter:
    """Test fetching character data from the DDB character service."""

    @pytest.mark.asyncio
    async def test_fetch_character_success(self):
        """Successfully fetch a character from the API."""
        mock_response_data = {
            "data": {
                "name": "Test Character",
                "classes": [{"level": 5, "definition": {"name": "Fighter"}}],
            }
        }

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_client_with("get", json_response(mock_response_data))
            mock_client_class.return_value = mock_client

            result = await fetch_character("12345678")

            assert result["name"] == "Test Character"
            assert "data" not in result  # Envelope should be unwrapped
            called_url = mock_client.get.call_args.args[0]
            assert called_url.endswith("/character/v5/character/12345678")

    @pytest.mark.asyncio
    async def test_fetch_character_uses_settings(self):
        """Service URL and timeout come from the settings."""
        settings = ImporterSettings(character_api_url="http://localhost:9000/character", request_timeout=3.0)
        data = {"name": "Local", "classes": []}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_client_with("get", json_response(data))
            mock_client_class.return_value = mock_client

            await fetch_character("42", settings)

            mock_client.get.assert_awaited_once_with("http://localhost:9000/character/42", timeout=3.0)

    @pytest.mark.asyncio
    async def test_fetch_character_not_found(self):
        """Handle 404 error with user-friendly message."""
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with("get", json_response({}, status_code=404))

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_character("99999999")

            assert "not found" in str(exc_info.value).lower()
            assert "99999999" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_fetch_character_private(self):
        """Handle 403 error for private characters."""
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with("get", json_response({}, status_code=403))

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_character("12345678")

            assert "private" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_fetch_character_timeout(self):
        """Handle timeout with user-friendly message."""
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with(
                "get", side_effect=httpx.TimeoutException("Timeout")
            )

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_character("12345678")

            assert "not responding" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_fetch_character_connection_error(self):
        """Transport errors become DDBImportError."""
        request = httpx.Request("GET", "https://character-service.dndbeyond.com")
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with(
                "get", side_effect=httpx.ConnectError("refused", request=request)
            )

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_character("12345678")

            assert "Failed to connect" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_fetch_character_missing_fields(self):
        """Reject payloads without name and classes."""
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with("get", json_response({"data": {"id": 1}}))

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_character("12345678")

            assert "missing required fields" in str(exc_info.value)


class TestReadCharacterFile:
    """Test reading character data from local JSON files."""

    def test_read_character_file_valid(self):
        """Read the sample character export."""
        fixture_path = Path(__file__).parent / "fixtures" / "ddb_character_sample.json"
        result = read_character_file(str(fixture_path))

        assert isinstance(result, dict)
        assert result["name"] == "Thalion Nightbreeze"
        assert "classes" in result

    def test_read_character_file_not_found(self):
        """Handle missing file with clear error."""
        with pytest.raises(DDBImportError) as exc_info:
            read_character_file("/nonexistent/path/character.json")

        assert "not found" in str(exc_info.value).lower()

    def test_read_character_file_invalid_json(self, tmp_path):
        """Handle malformed JSON with clear error."""
        bad_file = tmp_path / "bad.json"
        bad_file.write_text("this is not valid JSON {{{")

        with pytest.raises(DDBImportError) as exc_info:
            read_character_file(str(bad_file))

        assert "Invalid JSON" in str(exc_info.value)

    def test_read_character_file_unwraps_envelope(self, tmp_path):
        """Unwrap data envelope if present."""
        wrapped_file = tmp_path / "wrapped.json"
        wrapped_file.write_text(json.dumps({"data": {"name": "Wrapped Character", "classes": [{"level": 1}]}}))

        result = read_character_file(wrapped_file)

        assert result["name"] == "Wrapped Character"
        assert "data" not in result

    def test_read_character_file_not_an_object(self, tmp_path):
        """Reject a top-level JSON list."""
        list_file = tmp_path / "list.json"
        list_file.write_text("[1, 2, 3]")

        with pytest.raises(DDBImportError) as exc_info:
            read_character_file(list_file)

        assert "expected JSON object" in str(exc_info.value)

    def test_read_character_file_missing_classes(self, tmp_path):
        """Reject file missing the classes field."""
        incomplete_file = tmp_path / "incomplete.json"
        incomplete_file.write_text(json.dumps({"name": "Incomplete Character"}))

        with pytest.raises(DDBImportError) as exc_info:
            read_character_file(str(incomplete_file))

        assert "missing required field" in str(exc_info.value).lower()
        assert "classes" in str(exc_info.value)


class TestProxyFetch:
    """Test encounter and campaign fetching through the DDB proxy."""

    @pytest.fixture
    def settings(self, tmp_path) -> ImporterSettings:
        return ImporterSettings(
            api_endpoint="https://proxy.example.test",
            cobalt="cobalt-cookie",
            beta_key="beta",
            debug_dir=tmp_path / "debug",
        )

    @pytest.mark.asyncio
    async def test_fetch_encounters(self, settings):
        """POST the credentials and return the data list."""
        payload = {"success": True, "data": [{"id": "enc-1", "name": "Goblin Ambush"}]}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_client_with("post", json_response(payload))
            mock_client_class.return_value = mock_client

            encounters = await fetch_encounters(settings)

            assert encounters == [{"id": "enc-1", "name": "Goblin Ambush"}]
            mock_client.post.assert_awaited_once_with(
                "https://proxy.example.test/proxy/encounters",
                json={"cobalt": "cobalt-cookie", "betaKey": "beta"},
                timeout=settings.request_timeout,
            )

    @pytest.mark.asyncio
    async def test_fetch_campaigns(self, settings):
        payload = {"success": True, "data": [{"id": 77, "name": "Lost Mine"}]}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_client_with("post", json_response(payload))
            mock_client_class.return_value = mock_client

            campaigns = await fetch_campaigns(settings)

            assert campaigns[0]["name"] == "Lost Mine"
            assert mock_client.post.call_args.args[0].endswith("/proxy/campaigns")

    @pytest.mark.asyncio
    async def test_proxy_failure(self, settings):
        """success: false raises with the proxy message."""
        payload = {"success": False, "message": "Invalid cobalt"}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with("post", json_response(payload))

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_encounters(settings)

            assert str(exc_info.value) == "API Failure: Invalid cobalt"

    @pytest.mark.asyncio
    async def test_proxy_http_error(self, settings):
        """HTTP errors are reported with the status code."""
        request = httpx.Request("POST", "https://proxy.example.test/proxy/encounters")
        response = httpx.Response(502, request=request)
        error = httpx.HTTPStatusError("Bad Gateway", request=request, response=response)
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = error

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with("post", mock_response)

            with pytest.raises(DDBImportError) as exc_info:
                await fetch_encounters(settings)

            assert "502" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_debug_json_written(self, settings):
        """Raw payloads are written when debug_json is on."""
        settings.debug_json = True
        payload = {"success": True, "data": []}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = mock_client_with("post", json_response(payload))

            await fetch_encounters(settings)

        debug_file = settings.debug_dir / "proxy-encounters-raw.json"
        assert debug_file.exists()
        assert json.loads(debug_file.read_text()) == payload
