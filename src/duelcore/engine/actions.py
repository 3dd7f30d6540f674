from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TargetRef:
    # kind is checked at resolution time; unknown kinds are rejected there
    kind: str
    target_id: str

    @staticmethod
    def leader(player_id: str) -> "TargetRef":
        return TargetRef(kind="leader", target_id=player_id)

    @staticmethod
    def follower(instance_id: str) -> "TargetRef":
        return TargetRef(kind="follower", target_id=instance_id)


@dataclass(frozen=True)
class PlayCardAction:
    player: str
    instance_id: str


@dataclass(frozen=True)
class AttackAction:
    player: str
    attacker_id: str
    target: TargetRef


@dataclass(frozen=True)
class EndTurnAction:
    player: str


Action = PlayCardAction | AttackAction | EndTurnAction
