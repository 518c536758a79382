"""
Elo rating engine for Pongbot.

Ratings move by ``k_factor * tau * (outcome - expected)`` where ``expected`` is
the logistic expected score of side A against side B. ``tau`` is the player's
volatility: it decays by ``delta_tau`` after every resolved match without
dropping below ``tau_floor``, and a tau under the floor (a freshly registered
player) is rated at the floor but never raised. Established players settle
while freshly reset players (``tau = 1``) swing hard for their first few matches.
"""

from typing import Sequence, TYPE_CHECKING
from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from ..database.models import Player

WIN = 1
LOSS = 0


class RatingSettings(BaseModel):
    """Immutable tuning for the rating engine."""

    model_config = ConfigDict(frozen=True)

    k_factor: float = Field(default=100.0, gt=0)
    delta_tau: float = Field(default=0.94, gt=0, lt=1)
    tau_floor: float = Field(default=0.1, ge=0)

    @model_validator(mode="after")
    def _floor_below_reset(self):
        if self.tau_floor > 1:
            raise ValueError("tau_floor must not exceed the reset volatility of 1")
        return self


class RatingEngine:
    """Pure rating arithmetic, no persistence."""

    def __init__(self, settings: RatingSettings = RatingSettings()):
        self.settings = settings

    @property
    def delta_tau(self) -> float:
        return self.settings.delta_tau

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """Expected score (0.0 to 1.0) of side A against side B."""
        return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))

    @staticmethod
    def calculate_team_elo(players: Sequence["Player"]) -> float:
        """Mean rating of a one or two player team."""
        if not 1 <= len(players) <= 2:
            raise ValueError(f"A team has one or two players, got {len(players)}")
        return sum(p.elo for p in players) / len(players)

    def _change(self, rating_a: float, rating_b: float, tau_a: float, outcome: int) -> float:
        if outcome not in (WIN, LOSS):
            raise ValueError(f"outcome must be {WIN} or {LOSS}, got {outcome!r}")
        volatility = max(tau_a, self.settings.tau_floor)
        expected = self.expected_score(rating_a, rating_b)
        return self.settings.k_factor * volatility * (outcome - expected)

    def elo_singles_change(self, rating_a: float, rating_b: float,
                           tau_a: float, outcome: int) -> float:
        """
        Signed rating delta for player A after a singles match.

        The opponent moves by the negated delta.
        """
        return self._change(rating_a, rating_b, tau_a, outcome)

    def elo_doubles_change(self, team_rating_a: float, team_rating_b: float,
                           tau_a: float, outcome: int) -> float:
        """Signed rating delta for each member of team A after a doubles match."""
        return self._change(team_rating_a, team_rating_b, tau_a, outcome)

    def decay_tau(self, tau: float) -> float:
        """Shrink ``tau`` towards the floor; a tau already below it is never raised."""
        return max(tau * self.settings.delta_tau, min(tau, self.settings.tau_floor))

    @staticmethod
    def _team_tau(players: Sequence["Player"]) -> float:
        return sum(p.tau for p in players) / len(players)

    def apply_result(self, winners: Sequence["Player"], losers: Sequence["Player"]) -> None:
        """
        Update elo, tau and win/loss counters in place for a resolved match.

        The delta is computed once for the winning side, from the pre-match
        team strengths and the winners' volatility, and the losing side moves
        by its negation. Every participant's tau then decays on its own.
        """
        doubles = len(winners) > 1 or len(losers) > 1
        winner_elo = self.calculate_team_elo(winners)
        loser_elo = self.calculate_team_elo(losers)
        change = self.elo_doubles_change if doubles else self.elo_singles_change
        delta = change(winner_elo, loser_elo, self._team_tau(winners), WIN)

        for player in winners:
            player.elo += delta
            player.wins += 1
        for player in losers:
            player.elo -= delta
            player.losses += 1
        for player in (*winners, *losers):
            player.tau = self.decay_tau(player.tau)
