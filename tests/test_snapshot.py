from __future__ import annotations

import json

import pytest

from duelcore.engine.engine import MatchEngine
from duelcore.engine.match import ParticipantNotFound


def test_viewer_sees_own_hand_but_not_opponents() -> None:
    engine = MatchEngine("p1", "p2", seed=21)
    view = engine.get_game_state("p1")

    me = view["my_player"]
    opp = view["opponent_player"]
    assert isinstance(me, dict) and isinstance(opp, dict)
    assert me["id"] == "p1"
    assert opp["id"] == "p2"
    assert len(me["hand"]) == 4
    assert len(me["deck"]) == 16
    assert me["hand_count"] == 4
    assert me["deck_count"] == 16
    assert "hand" not in opp
    assert "deck" not in opp
    assert opp["hand_count"] == 4
    assert "deck_count" not in opp
    assert opp["life"] == 20
    assert view["turn"] == 1
    assert view["started"] is True
    assert view["winner"] is None


def test_turn_flag_matches_active_player() -> None:
    engine = MatchEngine("p1", "p2", seed=22)
    active = engine.state.active_player_id
    assert active is not None
    other = engine.get_opponent_id(active)
    assert engine.get_game_state(active)["is_my_turn"] is True
    assert engine.get_game_state(other)["is_my_turn"] is False

    engine.end_turn(active)
    assert engine.get_game_state(active)["is_my_turn"] is False
    assert engine.get_game_state(other)["is_my_turn"] is True
    assert engine.get_game_state(other)["turn"] == 2


def test_card_fields_are_exposed() -> None:
    engine = MatchEngine("p1", "p2", seed=23)
    hand = engine.get_game_state("p2")["my_player"]["hand"]  # type: ignore[index]
    for card in hand:
        assert set(card) == {
            "template_id",
            "instance_id",
            "name",
            "image",
            "cost",
            "attack",
            "defense",
            "current_defense",
            "has_acted",
        }
        # Follower stats come as a pair; spells carry neither.
        assert (card["attack"] is None) == (card["defense"] is None)
        assert card["current_defense"] is None
        assert card["has_acted"] is None


def test_view_is_json_serializable() -> None:
    engine = MatchEngine("p1", "p2", seed=24)
    for pid in ("p1", "p2"):
        json.dumps(engine.get_game_state(pid))


def test_unknown_viewer_is_not_found() -> None:
    engine = MatchEngine("p1", "p2", seed=25)
    with pytest.raises(ParticipantNotFound):
        engine.get_game_state("p3")
    with pytest.raises(LookupError):
        engine.get_opponent_id("p3")


def test_opponent_lookup() -> None:
    engine = MatchEngine("alice", "bob", seed=26)
    assert engine.get_opponent_id("alice") == "bob"
    assert engine.get_opponent_id("bob") == "alice"
