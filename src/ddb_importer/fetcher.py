"""
Fetch and read D&D Beyond data.

Characters come from the public v5 character service (or a local JSON
export). Encounters and campaigns come from the DDB proxy, which needs the
user's cobalt cookie value.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from .base import DDBImportError
from .config import ImporterSettings
from .schema import DDB_CHARACTER_URL_PATTERN

logger = logging.getLogger("ddb-importer")


def extract_character_id(url_or_id: str) -> int:
    """
    Extract character ID from a D&D Beyond URL or bare numeric ID.

    Accepts:
    - Full URL: https://www.dndbeyond.com/characters/12345678
    - Builder URL: https://www.dndbeyond.com/characters/12345678/builder
    - Bare ID: "12345678"

    Raises:
        DDBImportError: If the input doesn't match expected format
    """
    match = DDB_CHARACTER_URL_PATTERN.search(url_or_id)
    if match:
        return int(match.group(1))

    try:
        return int(url_or_id)
    except ValueError:
        raise DDBImportError(
            f"Invalid D&D Beyond character URL or ID: '{url_or_id}'. "
            "Expected format: https://www.dndbeyond.com/characters/12345678 or just the numeric ID."
        ) from None


async def fetch_character(url_or_id: str, settings: ImporterSettings | None = None) -> dict:
    """
    Fetch character JSON from the D&D Beyond character service.

    Args:
        url_or_id: D&D Beyond character URL or numeric ID
        settings: Importer settings (service URL, timeout)

    Returns:
        Raw character data as dictionary

    Raises:
        DDBImportError: If fetch fails, character not found, or character is private
    """
    settings = settings or ImporterSettings()
    character_id = extract_character_id(url_or_id)
    api_url = f"{settings.character_api_url}/{character_id}"

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(api_url, timeout=settings.request_timeout)

            if response.status_code == 404:
                raise DDBImportError(
                    f"Character not found. Check the ID or URL: {character_id}"
                )
            elif response.status_code == 403:
                raise DDBImportError(
                    "Character is private. Set it to Public on D&D Beyond, or use file import."
                )

            response.raise_for_status()
            data = response.json()

    except httpx.TimeoutException:
        raise DDBImportError(
            "D&D Beyond is not responding. Try again later or use file import."
        ) from None
    except httpx.HTTPStatusError as e:
        raise DDBImportError(
            f"D&D Beyond returned HTTP {e.response.status_code}: {e.response.reason_phrase}"
        ) from None
    except httpx.RequestError as e:
        raise DDBImportError(f"Failed to connect to D&D Beyond: {e}") from None

    # Unwrap {"data": {...}} envelope if present
    if isinstance(data, dict) and "data" in data:
        data = data["data"]

    if not isinstance(data, dict):
        raise DDBImportError("Invalid response from D&D Beyond: expected JSON object")

    if "name" not in data or "classes" not in data:
        raise DDBImportError(
            "Invalid character data from D&D Beyond: missing required fields (name, classes)"
        )

    logger.info(f"Fetched character {data['name']} ({character_id})")
    return data


def read_character_file(file_path: str | Path) -> dict:
    """
    Read and validate a local D&D Beyond character JSON file.

    Raises:
        DDBImportError: If file not found, invalid JSON, or unrecognized format
    """
    path = Path(file_path)

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise DDBImportError(f"Character file not found: {file_path}") from None
    except json.JSONDecodeError as e:
        raise DDBImportError(f"Invalid JSON in character file: {e}") from None
    except OSError as e:
        raise DDBImportError(f"Failed to read character file: {e}") from None

    if isinstance(data, dict) and "data" in data:
        data = data["data"]

    if not isinstance(data, dict):
        raise DDBImportError(
            f"Invalid character file format: expected JSON object, got {type(data).__name__}"
        )

    if "classes" not in data:
        raise DDBImportError(
            "Unrecognized character file format: missing required field (classes). "
            "Ensure this is a valid D&D Beyond character export."
        )

    return data


def _write_debug_json(settings: ImporterSettings, filename: str, data: Any) -> None:
    settings.debug_dir.mkdir(parents=True, exist_ok=True)
    path = settings.debug_dir / filename
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.debug(f"Wrote raw payload to {path}")


async def _post_proxy(path: str, settings: ImporterSettings) -> list[dict]:
    """POST the cobalt credentials to a proxy endpoint and return its data list.

    Raises:
        DDBImportError: On transport errors or when the proxy reports failure.
    """
    url = f"{settings.api_endpoint}{path}"
    body = {"cobalt": settings.cobalt, "betaKey": settings.beta_key}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=body, timeout=settings.request_timeout)
            response.raise_for_status()
            payload = response.json()
    except httpx.TimeoutException:
        raise DDBImportError("The DDB proxy is not responding. Try again later.") from None
    except httpx.HTTPStatusError as e:
        raise DDBImportError(
            f"DDB proxy returned HTTP {e.response.status_code}: {e.response.reason_phrase}"
        ) from None
    except httpx.RequestError as e:
        raise DDBImportError(f"Failed to connect to the DDB proxy: {e}") from None

    if not isinstance(payload, dict) or not payload.get("success"):
        message = payload.get("message", "unknown error") if isinstance(payload, dict) else "unexpected response"
        raise DDBImportError(f"API Failure: {message}")

    if settings.debug_json:
        name = path.strip("/").replace("/", "-")
        _write_debug_json(settings, f"{name}-raw.json", payload)

    return payload.get("data") or []


async def fetch_encounters(settings: ImporterSettings) -> list[dict]:
    """Fetch every encounter visible to the cobalt user."""
    encounters = await _post_proxy("/proxy/encounters", settings)
    logger.info(f"Retrieved {len(encounters)} encounters")
    return encounters


async def fetch_campaigns(settings: ImporterSettings) -> list[dict]:
    """Fetch the campaigns the cobalt user belongs to."""
    campaigns = await _post_proxy("/proxy/campaigns", settings)
    logger.info(f"Retrieved {len(campaigns)} campaigns")
    return campaigns
