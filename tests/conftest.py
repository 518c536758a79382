import pytest

from pongbot.config import Settings
from pongbot.database import MemoryChallengeStore, MemoryPlayerStore
from pongbot.service import PongService

GIF_URL = "https://media.giphy.com/media/test/giphy.gif"


class StaticGifFetcher:
    async def fetch_celebration_url(self):
        return GIF_URL


@pytest.fixture
def config():
    return Settings(_env_file=None, giphy_api_key=None)


@pytest.fixture
def players():
    return MemoryPlayerStore()


@pytest.fixture
def challenges():
    return MemoryChallengeStore()


@pytest.fixture
async def pong(config, players, challenges):
    """Service wired to in-memory stores; built inside the running loop."""
    return PongService(config, players, challenges, gif_fetcher=StaticGifFetcher())


@pytest.fixture
def register(pong):
    """Register several players at once.

    Usage::

        async def test_something(pong, register):
            await register("ZhangJike", "DengYaping")
    """
    async def register_players(*names):
        for name in names:
            result = await pong.register_player(name)
            assert result.ok, result
    return register_players


@pytest.fixture
def gif_url():
    return GIF_URL
