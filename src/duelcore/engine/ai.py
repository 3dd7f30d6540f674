from __future__ import annotations

from dataclasses import dataclass

from .actions import Action, AttackAction, EndTurnAction, PlayCardAction, TargetRef
from .match import MatchState, step
from .types import CardInstance


@dataclass(frozen=True)
class AISpec:
    """Simple AI tuning parameters.

    difficulty:
      0 = easy (skips good plays now and then)
      1 = normal
      2 = hard (never skips)
    """

    difficulty: int = 1


def _card_value(card: CardInstance) -> float:
    if card.is_follower:
        return float((card.attack or 0) * 2 + (card.base_defense or 0))
    # Spells do nothing yet; only worth casting to empty the hand.
    return 0.1


def _skip(state: MatchState, spec: AISpec, chance: float) -> bool:
    if spec.difficulty <= 0:
        return state.rng.random() < chance
    if spec.difficulty == 1:
        return state.rng.random() < chance / 3
    return False


def _pick_best_play(state: MatchState, player: str, spec: AISpec) -> PlayCardAction | None:
    ps = state.players[player]
    best: tuple[tuple[int, float], PlayCardAction] | None = None
    for instance_id in ps.hand:
        card = state.cards[instance_id]
        if card.cost > ps.current_mana:
            continue
        # Spend as much mana as possible, followers first on ties.
        score = (card.cost, _card_value(card))
        if best is None or score > best[0]:
            best = (score, PlayCardAction(player=player, instance_id=instance_id))

    if best is None:
        return None
    if _skip(state, spec, 0.3):
        return None
    return best[1]


def _pick_attack(state: MatchState, player: str, spec: AISpec) -> AttackAction | None:
    ps = state.players[player]
    enemy = state.opponent(player)
    eps = state.players[enemy]
    for instance_id in ps.field:
        c = state.cards[instance_id]
        if c.has_acted:
            continue
        attack = c.attack or 0
        defense = c.current_defense or 0

        # Favorable trade: kill without dying
        best_trade: tuple[int, str] | None = None
        for target_id in eps.field:
            dc = state.cards[target_id]
            kills = attack >= (dc.current_defense or 0)
            survives = defense > (dc.attack or 0)
            if kills and survives:
                score = dc.attack or 0  # take out biggest threats
                if best_trade is None or score > best_trade[0]:
                    best_trade = (score, target_id)
        if _skip(state, spec, 0.25):
            return None
        if best_trade is not None:
            return AttackAction(
                player=player, attacker_id=instance_id, target=TargetRef.follower(best_trade[1])
            )
        return AttackAction(player=player, attacker_id=instance_id, target=TargetRef.leader(enemy))
    return None


def choose_action(state: MatchState, player: str, spec: AISpec | None = None) -> Action:
    """Pick one legal action for the active player."""
    spec = spec or AISpec()
    play = _pick_best_play(state, player, spec)
    if play is not None:
        return play
    atk = _pick_attack(state, player, spec)
    if atk is not None:
        return atk
    return EndTurnAction(player=player)


def ai_take_turn(state: MatchState, player: str, spec: AISpec | None = None) -> None:
    """Advance the match through the AI player's turn.

    The AI uses the engine RNG (`state.rng`) so it remains deterministic for a given seed.
    """
    while state.in_progress and state.active_player_id == player:
        action = choose_action(state, player, spec)
        step(state, action)
        if isinstance(action, EndTurnAction):
            break
