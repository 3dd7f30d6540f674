from __future__ import annotations

from duelcore.engine.ai import AISpec, choose_action
from duelcore.engine.match import new_match, replay, step
from duelcore.engine.serialize import snapshot


def _play_out(seed: int, max_actions: int = 400):
    state = new_match("p1", "p2", seed=seed)
    spec = AISpec(difficulty=2)
    for _ in range(max_actions):
        if not state.in_progress:
            break
        assert state.active_player_id is not None
        res = step(state, choose_action(state, state.active_player_id, spec))
        assert res.ok, res.error
    return state


def test_engine_determinism_replay() -> None:
    seed = 424242
    state1 = _play_out(seed)
    snap1 = snapshot(state1)

    state2 = replay("p1", "p2", seed=seed, actions=list(state1.action_log))
    snap2 = snapshot(state2)

    assert snap1 == snap2


def test_same_seed_same_setup() -> None:
    a = new_match("p1", "p2", seed=7)
    b = new_match("p1", "p2", seed=7)
    assert snapshot(a) == snapshot(b)
    assert a.active_player_id == b.active_player_id


def test_different_seeds_differ() -> None:
    a = new_match("p1", "p2", seed=1)
    b = new_match("p1", "p2", seed=2)
    assert set(a.cards).isdisjoint(b.cards)


def test_unseeded_match_records_its_seed() -> None:
    state = new_match("p1", "p2")
    again = new_match("p1", "p2", seed=state.seed)
    assert snapshot(state) == snapshot(again)


def test_reference_decks_shape() -> None:
    state = new_match("p1", "p2", seed=99)
    assert len(state.cards) == 40
    for pid in ("p1", "p2"):
        ps = state.players[pid]
        cards = [state.cards[i] for i in ps.deck + ps.hand]
        assert len(cards) == 20
        assert sum(1 for c in cards if c.is_follower) == 10
        for c in cards:
            assert 1 <= c.cost <= 5
            if c.is_follower:
                assert 1 <= (c.attack or 0) <= 5
                assert 1 <= (c.base_defense or 0) <= 5
