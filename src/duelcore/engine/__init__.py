"""Authoritative, headless rules engine for duelcore.

IMPORTANT: This package must never import transport or UI code.
"""

from .actions import AttackAction, EndTurnAction, PlayCardAction, TargetRef
from .engine import MatchEngine
from .match import (
    MatchConfig,
    MatchState,
    ParticipantNotFound,
    PlayerState,
    StepResult,
    new_match,
    replay,
    step,
)
from .types import CardInstance, CardTemplate, Follower, Spell

__all__ = [
    "AttackAction",
    "CardInstance",
    "CardTemplate",
    "EndTurnAction",
    "Follower",
    "MatchConfig",
    "MatchEngine",
    "MatchState",
    "ParticipantNotFound",
    "PlayCardAction",
    "PlayerState",
    "Spell",
    "StepResult",
    "TargetRef",
    "new_match",
    "replay",
    "step",
]
