from __future__ import annotations

from typing import Mapping, Sequence

from .actions import Action, AttackAction, EndTurnAction, PlayCardAction, TargetRef
from .match import (
    MatchConfig,
    MatchState,
    ParticipantNotFound,
    StepResult,
    end_match,
    new_match,
    step,
)
from .serialize import view_for
from .types import CardTemplate


class MatchEngine:
    """Authoritative state for one match between two participants.

    The engine does no locking of its own; callers must apply at most one
    action at a time (see services.registry.MatchRegistry).
    """

    def __init__(
        self,
        player1_id: str,
        player2_id: str,
        *,
        seed: int | None = None,
        config: MatchConfig | None = None,
        decks: Mapping[str, Sequence[CardTemplate]] | None = None,
    ) -> None:
        self._state = new_match(player1_id, player2_id, seed=seed, config=config, decks=decks)

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def player_ids(self) -> tuple[str, str]:
        return self._state.player_order

    @property
    def in_progress(self) -> bool:
        return self._state.in_progress

    @property
    def winner_id(self) -> str | None:
        return self._state.winner_id

    def get_game_state(self, viewer_id: str) -> dict[str, object]:
        return view_for(self._state, viewer_id)

    def get_opponent_id(self, player_id: str) -> str:
        return self._state.opponent(player_id)

    def apply(self, action: Action) -> StepResult:
        return step(self._state, action)

    def end_turn(self, actor_id: str) -> StepResult:
        return self.apply(EndTurnAction(player=actor_id))

    def play_card(self, actor_id: str, instance_id: str) -> StepResult:
        return self.apply(PlayCardAction(player=actor_id, instance_id=instance_id))

    def attack(
        self, actor_id: str, attacker_id: str, target_id: str, target_kind: str
    ) -> StepResult:
        target = TargetRef(kind=target_kind, target_id=target_id)
        return self.apply(AttackAction(player=actor_id, attacker_id=attacker_id, target=target))

    def end_match(self, winner_id: str) -> None:
        if winner_id not in self._state.players:
            raise ParticipantNotFound(f"Unknown participant: {winner_id!r}")
        if not self._state.in_progress:
            raise RuntimeError("Match already ended.")
        end_match(self._state, winner_id)
