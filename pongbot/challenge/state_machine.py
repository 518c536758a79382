"""
Challenge state machine for Pongbot.
"""

from typing import Dict, Set
import structlog

from ..database.models import ChallengeState

logger = structlog.get_logger(__name__)


class ChallengeStateMachine:
    """State machine for managing challenge states."""

    VALID_TRANSITIONS: Dict[ChallengeState, Set[ChallengeState]] = {
        ChallengeState.PROPOSED: {
            ChallengeState.ACCEPTED,
            ChallengeState.DECLINED
        },
        ChallengeState.ACCEPTED: {
            ChallengeState.COMPLETED,
            # Called off when a participant is pulled into a newer challenge
            ChallengeState.DECLINED
        },
        ChallengeState.DECLINED: set(),   # Terminal state
        ChallengeState.COMPLETED: set()   # Terminal state
    }

    def __init__(self, initial_state: ChallengeState = ChallengeState.PROPOSED):
        self.current_state = initial_state

    def can_transition_to(self, new_state: ChallengeState) -> bool:
        return new_state in self.VALID_TRANSITIONS.get(self.current_state, set())

    def transition_to(self, new_state: ChallengeState) -> bool:
        """Transition to a new state, returning False if the move is illegal."""
        if not self.can_transition_to(new_state):
            logger.warning(
                "Invalid state transition attempted",
                current_state=self.current_state.value,
                new_state=new_state.value
            )
            return False

        old_state = self.current_state
        self.current_state = new_state

        logger.debug(
            "Challenge state transitioned",
            old_state=old_state.value,
            new_state=new_state.value
        )

        return True
