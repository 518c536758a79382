from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from pongbot.config import Settings
from pongbot.utils.gifs import GIPHY_RANDOM_URL, GifFetcher

FALLBACK = "https://example.com/fallback.gif"


def make_session(payload=None, error=None):
    response = MagicMock()
    response.raise_for_status = MagicMock(side_effect=error)
    response.json = AsyncMock(return_value=payload)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get = MagicMock(return_value=context)
    return session


@pytest.fixture
def config():
    return Settings(_env_file=None, giphy_api_key="key", fallback_gif_url=FALLBACK)


async def test_returns_giphy_image(config):
    session = make_session({"data": {"images": {"original": {"url": "https://giphy.com/duel.gif"}}}})

    url = await GifFetcher(config, session=session).fetch_celebration_url()

    assert url == "https://giphy.com/duel.gif"
    args, kwargs = session.get.call_args
    assert args == (GIPHY_RANDOM_URL,)
    assert kwargs["params"]["api_key"] == "key"
    assert kwargs["params"]["tag"] == "ping pong"


async def test_without_api_key_uses_fallback():
    config = Settings(_env_file=None, giphy_api_key=None, fallback_gif_url=FALLBACK)
    assert await GifFetcher(config).fetch_celebration_url() == FALLBACK


async def test_empty_result_uses_fallback(config):
    session = make_session({"data": []})
    assert await GifFetcher(config, session=session).fetch_celebration_url() == FALLBACK


async def test_http_error_uses_fallback(config):
    session = make_session(error=aiohttp.ClientError("503"))
    assert await GifFetcher(config, session=session).fetch_celebration_url() == FALLBACK
