"""
Optional game metadata lookup against the RetroAchievements web API.

Every failure (not configured, timeout, HTTP error, unexpected body) yields
None so callers fall back to what the challenge document stores.
"""
import asyncio
import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from select_start.config import (
    ENRICHMENT_TIMEOUT_SECONDS,
    RA_API_BASE_URL,
    RA_API_KEY,
    RA_USERNAME,
)

# Set up logging
logger = logging.getLogger(__name__)

MEDIA_BASE_URL = "https://media.retroachievements.org"


class GameInfo(BaseModel):
    game_id: str
    title: Optional[str] = None
    console_name: Optional[str] = None
    icon_url: Optional[str] = None


class GameInfoClient:
    """Looks up game title, console and icon by RetroAchievements game ID."""

    def __init__(
        self,
        username: Optional[str] = RA_USERNAME,
        api_key: Optional[str] = RA_API_KEY,
        base_url: str = RA_API_BASE_URL,
        timeout: float = ENRICHMENT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.username = username
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.username and self.api_key)

    async def get_game_info(self, game_id: Optional[str]) -> Optional[GameInfo]:
        if not game_id or not self.configured:
            return None

        try:
            # httpx timeouts are per phase; wait_for bounds the whole lookup
            return await asyncio.wait_for(self._fetch(str(game_id)), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Game info lookup for {game_id} timed out after {self.timeout}s")
            return None
        except (httpx.HTTPError, ValueError) as e:
            # httpx errors can include the request URL, which carries the key.
            # pydantic's ValidationError is a ValueError.
            logger.warning(f"Game info lookup failed for {game_id}: {type(e).__name__}")
            return None

    async def _fetch(self, game_id: str) -> Optional[GameInfo]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            r = await client.get(
                f"{self.base_url}/API_GetGame.php",
                params={"z": self.username, "y": self.api_key, "i": game_id},
                headers={"accept": "application/json"},
            )
        r.raise_for_status()
        body = r.json()

        if not isinstance(body, dict) or not body.get("Title"):
            logger.warning(f"Game info lookup for {game_id} returned no title")
            return None

        icon = body.get("ImageIcon")
        return GameInfo(
            game_id=game_id,
            title=body.get("Title"),
            console_name=body.get("ConsoleName"),
            icon_url=f"{MEDIA_BASE_URL}{icon}" if isinstance(icon, str) and icon else None,
        )
