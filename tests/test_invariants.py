from __future__ import annotations

import pytest

from duelcore.engine.actions import EndTurnAction
from duelcore.engine.ai import AISpec, choose_action
from duelcore.engine.match import MatchState, new_match, step


def _check_zones(state: MatchState, initial_ids: set[str]) -> None:
    seen: list[str] = []
    for ps in state.players.values():
        seen.extend(ps.deck)
        seen.extend(ps.hand)
        seen.extend(ps.field)
    # exactly one zone per live card, nothing outside the arena
    assert len(seen) == len(set(seen))
    assert set(seen) == set(state.cards)
    assert set(state.cards) <= initial_ids
    for ps in state.players.values():
        for instance_id in ps.field:
            c = state.cards[instance_id]
            assert c.is_follower
            assert c.current_defense is not None and c.current_defense > 0


def _check_mana(state: MatchState) -> None:
    for ps in state.players.values():
        assert 0 <= ps.current_mana <= ps.max_mana <= state.config.max_mana


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 5, 8, 13])
@pytest.mark.parametrize("difficulty", [0, 2])
def test_simulated_matches_keep_invariants(seed: int, difficulty: int) -> None:
    state = new_match("p1", "p2", seed=seed)
    initial_ids = set(state.cards)
    spec = AISpec(difficulty=difficulty)
    max_seen = {pid: 0 for pid in state.players}

    for _ in range(600):
        if not state.in_progress:
            break
        active = state.active_player_id
        assert active is not None
        turn = state.turn_number
        action = choose_action(state, active, spec)
        res = step(state, action)
        assert res.ok, res.error

        _check_zones(state, initial_ids)
        _check_mana(state)
        for pid, ps in state.players.items():
            assert ps.max_mana >= max_seen[pid]
            max_seen[pid] = ps.max_mana

        if isinstance(action, EndTurnAction):
            assert state.active_player_id == state.opponent(active)
            assert state.turn_number == turn + 1
        elif state.in_progress:
            assert state.active_player_id == active
            assert state.turn_number == turn

    if not state.in_progress:
        loser = state.opponent(state.winner_id or "")
        assert state.players[loser].life <= 0
        assert state.active_player_id is None
