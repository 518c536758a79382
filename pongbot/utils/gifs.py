"""
Celebration GIF lookup for Pongbot.
"""

import asyncio
from typing import Optional
import aiohttp
import structlog

from ..config import Settings, get_config

logger = structlog.get_logger(__name__)

GIPHY_RANDOM_URL = "https://api.giphy.com/v1/gifs/random"


class GifFetcher:
    """Fetches a random duel GIF from Giphy."""

    def __init__(self, config: Optional[Settings] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.config = config or get_config()
        self._session = session

    async def fetch_celebration_url(self) -> str:
        """
        Return a GIF URL for the channel.

        Without an API key, or when Giphy does not answer with a usable image,
        the configured fallback URL is returned instead.
        """
        if not self.config.giphy_api_key:
            return self.config.fallback_gif_url

        params = {
            "api_key": self.config.giphy_api_key,
            "tag": self.config.giphy_tag,
            "rating": "g",
        }
        try:
            if self._session is not None:
                data = await self._get(self._session, params)
            else:
                timeout = aiohttp.ClientTimeout(total=self.config.gif_timeout)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    data = await self._get(session, params)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Giphy request failed", error=str(e))
            return self.config.fallback_gif_url

        url = (data.get("data") or {}).get("images", {}).get("original", {}).get("url")
        if not url or not url.startswith("http"):
            logger.warning("Giphy returned no image", response_keys=list(data))
            return self.config.fallback_gif_url
        return url

    @staticmethod
    async def _get(session: aiohttp.ClientSession, params: dict) -> dict:
        async with session.get(GIPHY_RANDOM_URL, params=params) as response:
            response.raise_for_status()
            return await response.json()
