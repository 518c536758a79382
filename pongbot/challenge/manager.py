"""
Challenge coordinator for Pongbot.

Owns every change to ``Player.current_challenge`` and to challenge records.
Multi-record changes run under a single lock and are undone by writing back
snapshots if any storage call fails part way.
"""

import asyncio
from typing import Callable, Iterable, List, Optional
from bson import ObjectId
import structlog

from ..database.models import Challenge, ChallengeState, ChallengeType, Player
from ..exceptions import (
    ChallengeAlreadyActive,
    ChallengeMismatch,
    InvalidChallenge,
    InvalidChallengeState,
    NoActiveChallenge,
    PlayerNotFound,
)
from ..rating import RatingEngine
from ..results import Notice
from .state_machine import ChallengeStateMachine

logger = structlog.get_logger(__name__)


def _names(names: Iterable[str]) -> str:
    return " and ".join(names)


class ChallengeCoordinator:
    """Manages the challenge lifecycle and match resolution."""

    def __init__(self, players, challenges, rating_engine: RatingEngine):
        self.players = players
        self.challenges = challenges
        self.rating_engine = rating_engine
        self._lock = asyncio.Lock()

    # Lookups

    async def find_player(self, name: str) -> Player:
        player = await self.players.find_one(name)
        if player is None:
            raise PlayerNotFound(name)
        return player

    async def find_players(self, names: Iterable[str]) -> List[Player]:
        """Resolve names in order, failing on the first unknown one."""
        return [await self.find_player(name) for name in names]

    async def find_doubles_players(self, c1: str, c2: str, d1: str, d2: str) -> List[Player]:
        return await self.find_players([c1, c2, d1, d2])

    async def current_challenge(self, player: Player) -> Challenge:
        if player.current_challenge is None:
            raise NoActiveChallenge(player.name)
        challenge = await self.challenges.find_one(player.current_challenge)
        if challenge is None or not challenge.is_active():
            logger.warning("Player references a stale challenge", player=player.name,
                           challenge_id=str(player.current_challenge))
            raise NoActiveChallenge(player.name)
        return challenge

    # Creation

    async def create_single_challenge(self, challenger_name: str, challenged_name: str) -> Notice:
        async with self._lock:
            challenger, challenged = await self.find_players([challenger_name, challenged_name])
            if challenger_name == challenged_name:
                raise InvalidChallenge("You can't challenge yourself.")
            if challenger.is_challenged():
                raise ChallengeAlreadyActive(challenger_name)

            challenge = Challenge(
                type=ChallengeType.SINGLE,
                challenger=[challenger_name],
                challenged=[challenged_name]
            )
            await self._open(challenge, [challenger, challenged])

        return Notice(
            message=f"You have challenged {challenged_name} to a ping pong match!",
            payload=challenge
        )

    async def create_double_challenge(self, c1: str, c2: str, d1: str, d2: str) -> Notice:
        async with self._lock:
            players = await self.find_doubles_players(c1, c2, d1, d2)
            if len({c1, c2, d1, d2}) != 4:
                raise InvalidChallenge("A player can only appear once in a challenge.")
            if players[0].is_challenged():
                raise ChallengeAlreadyActive(c1)

            challenge = Challenge(
                type=ChallengeType.DOUBLE,
                challenger=[c1, c2],
                challenged=[d1, d2]
            )
            await self._open(challenge, players)

        return Notice(
            message=f"You and {c2} have challenged {d1} and {d2} to a ping pong match!",
            payload=challenge
        )

    async def _open(self, challenge: Challenge, players: List[Player]):
        superseded = await self._superseded(players)
        bystanders = await self._bystanders(superseded, players)
        challenges_before = [c.model_copy(deep=True) for c in superseded]
        before = [p.model_copy(deep=True) for p in players + bystanders]

        for old in superseded:
            self._transition(old, ChallengeState.DECLINED)
        for player in bystanders:
            player.current_challenge = None

        await self.challenges.create(challenge)
        try:
            for old in superseded:
                await self.challenges.save(old)
            for player in bystanders:
                await self.players.save(player)
            for player in players:
                player.current_challenge = challenge.id
                await self.players.save(player)
        except Exception:
            logger.error("Challenge creation failed, rolling back",
                         challenge_id=str(challenge.id))
            await self._restore(before, challenges_before)
            try:
                await self.challenges.delete(challenge.id)
            except Exception as e:
                logger.error("Failed to delete orphaned challenge", error=str(e),
                             challenge_id=str(challenge.id))
            raise

        for old in superseded:
            logger.info("Challenge superseded", challenge_id=str(old.id),
                        by=str(challenge.id))
        logger.info("Challenge created", challenge_id=str(challenge.id),
                    type=challenge.type.value, challenger=challenge.challenger,
                    challenged=challenge.challenged)

    async def _superseded(self, players: List[Player]) -> List[Challenge]:
        """Active challenges the given players leave behind by joining a new one."""
        found = {}
        for player in players:
            if player.current_challenge is None or player.current_challenge in found:
                continue
            old = await self.challenges.find_one(player.current_challenge)
            if old is not None and old.is_active():
                found[old.id] = old
        return list(found.values())

    async def _bystanders(self, superseded: List[Challenge],
                          players: List[Player]) -> List[Player]:
        """Other participants of superseded challenges who still reference them."""
        joining = {p.name for p in players}
        bystanders = []
        for old in superseded:
            for name in old.participants:
                if name in joining:
                    continue
                player = await self.players.find_one(name)
                if player is not None and player.current_challenge == old.id:
                    bystanders.append(player)
        return bystanders

    # Responses

    def _transition(self, challenge: Challenge, new_state: ChallengeState):
        machine = ChallengeStateMachine(challenge.state)
        if not machine.transition_to(new_state):
            raise InvalidChallengeState(f"Challenge is already {challenge.state.value}.")
        challenge.state = machine.current_state

    async def accept_challenge(self, name: str) -> Notice:
        async with self._lock:
            player = await self.find_player(name)
            challenge = await self.current_challenge(player)
            if name not in challenge.challenged:
                raise InvalidChallengeState("Only the challenged side can accept this challenge.")

            self._transition(challenge, ChallengeState.ACCEPTED)
            await self.challenges.save(challenge)

        logger.info("Challenge accepted", challenge_id=str(challenge.id), player=name)
        return Notice(
            message=f"{name} accepted {_names(challenge.challenger)}'s challenge.",
            payload=challenge
        )

    async def decline_challenge(self, name: str) -> Notice:
        async with self._lock:
            player = await self.find_player(name)
            challenge = await self.current_challenge(player)
            if name not in challenge.participants:
                raise ChallengeMismatch()
            if challenge.state != ChallengeState.PROPOSED:
                raise InvalidChallengeState(f"Challenge is already {challenge.state.value}.")

            challenge_before = challenge.model_copy(deep=True)
            self._transition(challenge, ChallengeState.DECLINED)

            players = await self.find_players(challenge.participants)
            players_before = [p.model_copy(deep=True) for p in players]
            for p in players:
                if p.current_challenge == challenge.id:
                    p.current_challenge = None
            await self._commit(challenge, challenge_before, players, players_before)

        logger.info("Challenge declined", challenge_id=str(challenge.id), player=name)
        return Notice(
            message=f"{name} declined {_names(challenge.challenger)}'s challenge.",
            payload=challenge
        )

    # Resolution

    async def win(self, name: str) -> Notice:
        return await self._resolve(name, won=True)

    async def lose(self, name: str) -> Notice:
        return await self._resolve(name, won=False)

    async def _resolve(self, name: str, won: bool) -> Notice:
        async with self._lock:
            player = await self.find_player(name)
            challenge = await self.current_challenge(player)
            if challenge.state == ChallengeState.PROPOSED:
                raise InvalidChallengeState(
                    "Challenge needs to be accepted before recording a match."
                )
            reporter_team = challenge.team_of(name)
            if reporter_team is None:
                raise ChallengeMismatch()

            challenge_before = challenge.model_copy(deep=True)
            self._transition(challenge, ChallengeState.COMPLETED)

            if challenge.type == ChallengeType.DOUBLE:
                players = await self.find_doubles_players(*challenge.challenger,
                                                          *challenge.challenged)
            else:
                players = await self.find_players(challenge.participants)
            if any(p.current_challenge != challenge.id for p in players):
                raise ChallengeMismatch()

            by_name = {p.name: p for p in players}
            winner_names = reporter_team if won else challenge.opponents_of(name)
            loser_names = challenge.opponents_of(winner_names[0])
            winners = [by_name[n] for n in winner_names]
            losers = [by_name[n] for n in loser_names]

            players_before = [p.model_copy(deep=True) for p in players]
            self.rating_engine.apply_result(winners, losers)
            for p in players:
                p.current_challenge = None
            challenge.winners = list(winner_names)

            await self._commit(challenge, challenge_before, players, players_before)

        logger.info("Match recorded", challenge_id=str(challenge.id),
                    winners=winner_names, losers=loser_names,
                    ratings={p.name: round(p.elo, 2) for p in players})
        return Notice(
            message=f"Match recorded! {_names(winner_names)} defeated {_names(loser_names)}.",
            payload=challenge
        )

    # Direct player updates

    async def update_player(self, name: str, change: Callable[[Player], None]) -> Player:
        """Apply ``change`` to a player and save it, serialised with challenge updates."""
        async with self._lock:
            player = await self.find_player(name)
            change(player)
            await self.players.save(player)
        return player

    # Direct reference management

    async def set_challenge(self, name: str, challenge_id: Optional[ObjectId]) -> Player:
        async with self._lock:
            player = await self.find_player(name)
            player.current_challenge = challenge_id
            await self.players.save(player)
        return player

    async def remove_challenge(self, name: str) -> Player:
        async with self._lock:
            player = await self.find_player(name)
            if player.current_challenge is not None:
                player.current_challenge = None
                await self.players.save(player)
                logger.info("Challenge reference removed", player=name)
        return player

    # Persistence helpers

    async def _commit(self, challenge: Challenge, challenge_before: Challenge,
                      players: List[Player], players_before: List[Player]):
        try:
            await self.challenges.save(challenge)
            for player in players:
                await self.players.save(player)
        except Exception:
            logger.error("Challenge update failed, rolling back",
                         challenge_id=str(challenge.id))
            await self._restore(players_before, [challenge_before])
            raise

    async def _restore(self, players_before: List[Player],
                       challenges_before: Iterable[Challenge] = ()):
        """Best-effort write-back of snapshots; failures are logged, not raised."""
        for challenge in challenges_before:
            try:
                await self.challenges.save(challenge)
            except Exception as e:
                logger.error("Failed to restore challenge", error=str(e),
                             challenge_id=str(challenge.id))
        for player in players_before:
            try:
                await self.players.save(player)
            except Exception as e:
                logger.error("Failed to restore player", error=str(e), player=player.name)
