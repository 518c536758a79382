"""
Public operations of Pongbot.

``PongService`` is what a chat transport calls. Each operation returns a
``Result``: domain errors become ``Failure`` values, storage errors propagate.
"""

import functools
from typing import Optional
from bson import ObjectId
import structlog

from .challenge import ChallengeCoordinator
from .config import Settings
from .database.models import Player
from .exceptions import PongError
from .rating import RatingEngine
from .results import Failure, Notice, Result, Success
from .utils.gifs import GifFetcher

logger = structlog.get_logger(__name__)


def returns_result(func):
    """Wrap a coroutine's value in ``Success`` and its domain errors in ``Failure``."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Result:
        try:
            value = await func(*args, **kwargs)
        except PongError as e:
            logger.info("Command refused", operation=func.__name__,
                        kind=e.kind.value, reason=e.message)
            return Failure.from_error(e)
        if isinstance(value, (Success, Notice, Failure)):
            return value
        return Success(payload=value)
    return wrapper


def _add_win(player: Player):
    player.wins += 1


def _add_loss(player: Player):
    player.losses += 1


def _reset_stats(player: Player):
    # A reset player starts over with full volatility
    player.wins = 0
    player.losses = 0
    player.elo = 0
    player.tau = 1


class PongService:
    """Facade over the player store, challenge store and coordinator."""

    def __init__(self, config: Settings, players, challenges,
                 gif_fetcher: Optional[GifFetcher] = None):
        self.config = config
        self.channel = config.channel
        self.players = players
        self.challenges = challenges
        self.rating_engine = RatingEngine(config.rating_settings())
        self.coordinator = ChallengeCoordinator(players, challenges, self.rating_engine)
        self.gif_fetcher = gif_fetcher or GifFetcher(config)

    @property
    def delta_tau(self) -> float:
        return self.rating_engine.delta_tau

    # Players

    @returns_result
    async def register_player(self, name: str):
        return await self.players.create(name)

    @returns_result
    async def find_player(self, name: str):
        return await self.coordinator.find_player(name)

    @returns_result
    async def get_everyone(self):
        players = await self.players.list_all()
        listing = [p.model_dump(include={"name", "wins", "losses", "elo", "tau"}) for p in players]
        logger.info("Players listed", count=len(players), players=listing)
        return players

    @returns_result
    async def leaderboard(self, limit: int = 10):
        return await self.players.leaderboard(limit)

    @returns_result
    async def update_wins(self, name: str):
        return await self.coordinator.update_player(name, _add_win)

    @returns_result
    async def update_losses(self, name: str):
        return await self.coordinator.update_player(name, _add_loss)

    @returns_result
    async def reset(self, name: str):
        player = await self.coordinator.update_player(name, _reset_stats)
        logger.info("Player reset", player=name)
        return player

    # Challenges

    @returns_result
    async def check_challenge(self, name: str):
        player = await self.coordinator.find_player(name)
        return await self.coordinator.current_challenge(player)

    @returns_result
    async def set_challenge(self, name: str, challenge_id: Optional[ObjectId]):
        return await self.coordinator.set_challenge(name, challenge_id)

    @returns_result
    async def remove_challenge(self, name: str):
        return await self.coordinator.remove_challenge(name)

    @returns_result
    async def create_single_challenge(self, challenger_name: str, challenged_name: str):
        return await self.coordinator.create_single_challenge(challenger_name, challenged_name)

    @returns_result
    async def create_double_challenge(self, c1: str, c2: str, d1: str, d2: str):
        return await self.coordinator.create_double_challenge(c1, c2, d1, d2)

    @returns_result
    async def accept_challenge(self, name: str):
        return await self.coordinator.accept_challenge(name)

    @returns_result
    async def decline_challenge(self, name: str):
        return await self.coordinator.decline_challenge(name)

    @returns_result
    async def win(self, name: str):
        return await self.coordinator.win(name)

    @returns_result
    async def lose(self, name: str):
        return await self.coordinator.lose(name)

    @returns_result
    async def find_doubles_players(self, c1: str, c2: str, d1: str, d2: str):
        return await self.coordinator.find_doubles_players(c1, c2, d1, d2)

    # Celebration

    @returns_result
    async def get_duel_gif(self):
        return await self.gif_fetcher.fetch_celebration_url()
