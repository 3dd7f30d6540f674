from __future__ import annotations


from .actions import Action, AttackAction, EndTurnAction, PlayCardAction
from .match import MatchState, PlayerState
from .types import CardInstance


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, PlayCardAction):
        return {"type": "play", "player": a.player, "instance_id": a.instance_id}
    if isinstance(a, AttackAction):
        return {
            "type": "attack",
            "player": a.player,
            "attacker_id": a.attacker_id,
            "target": {"kind": a.target.kind, "target_id": a.target.target_id},
        }
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn", "player": a.player}
    # should be unreachable
    return {"type": "unknown"}


def card_to_dict(c: CardInstance) -> dict[str, object]:
    return {
        "template_id": c.template_id,
        "instance_id": c.instance_id,
        "name": c.name,
        "image": c.image,
        "cost": c.cost,
        "attack": c.attack,
        "defense": c.base_defense,
        "current_defense": c.current_defense,
        "has_acted": c.has_acted,
    }


def _cards(state: MatchState, zone: list[str]) -> list[dict[str, object]]:
    return [card_to_dict(state.cards[i]) for i in zone]


def _public_player(state: MatchState, p: PlayerState) -> dict[str, object]:
    return {
        "id": p.id,
        "life": p.life,
        "current_mana": p.current_mana,
        "max_mana": p.max_mana,
        "field": _cards(state, p.field),
        "discard": list(p.discard),
        "hand_count": len(p.hand),
    }


def _full_player(state: MatchState, p: PlayerState) -> dict[str, object]:
    out = _public_player(state, p)
    out["hand"] = _cards(state, p.hand)
    out["deck"] = _cards(state, p.deck)
    out["deck_count"] = len(p.deck)
    return out


def view_for(state: MatchState, viewer_id: str) -> dict[str, object]:
    """Return the JSON-serializable state as seen by one participant.

    The opponent's hand is reduced to a count and their deck is left out.
    Raises ParticipantNotFound for an identifier outside the match.
    """
    me = state.player(viewer_id)
    opponent = state.players[state.opponent(viewer_id)]
    return {
        "my_player": _full_player(state, me),
        "opponent_player": _public_player(state, opponent),
        "is_my_turn": state.active_player_id == viewer_id,
        "turn": state.turn_number,
        "started": state.started,
        "winner": state.winner_id,
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    return {
        "seed": state.seed,
        "player_order": list(state.player_order),
        "active_player": state.active_player_id,
        "turn": state.turn_number,
        "started": state.started,
        "winner": state.winner_id,
        "players": [_full_player(state, state.players[pid]) for pid in state.player_order],
        "action_log": [action_to_dict(a) for a in state.action_log],
    }
