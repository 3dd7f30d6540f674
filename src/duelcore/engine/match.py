from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Literal, Mapping, Sequence

from .actions import Action, AttackAction, EndTurnAction, PlayCardAction
from .decks import build_deck, reference_deck
from .types import CardInstance, CardTemplate

logger = logging.getLogger(__name__)

Event = dict[str, object]

ErrorCode = Literal[
    "not_your_turn",
    "game_not_active",
    "card_not_found",
    "insufficient_mana",
    "invalid_attacker",
    "already_acted",
    "target_not_found",
    "invalid_target",
]


class ParticipantNotFound(LookupError):
    """Raised when an identifier is not one of the two match participants."""


@dataclass(frozen=True)
class MatchConfig:
    starting_life: int = 20
    starting_hand: int = 4
    deck_size: int = 20
    max_mana: int = 10
    mana_per_turn: int = 1
    draw_per_turn: int = 1


@dataclass
class PlayerState:
    id: str
    life: int
    max_mana: int = 0
    current_mana: int = 0
    # Zones hold instance ids into MatchState.cards; deck[0] is the next draw.
    deck: list[str] = field(default_factory=list)
    hand: list[str] = field(default_factory=list)
    discard: list[str] = field(default_factory=list)  # template ids
    field: list[str] = field(default_factory=list)


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None
    code: ErrorCode | None = None


@dataclass
class MatchState:
    config: MatchConfig
    seed: int
    rng: random.Random
    player_order: tuple[str, str]
    players: dict[str, PlayerState]
    cards: dict[str, CardInstance]
    active_player_id: str | None = None
    turn_number: int = 0
    started: bool = False
    winner_id: str | None = None
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def in_progress(self) -> bool:
        return self.started and self.winner_id is None

    def player(self, player_id: str) -> PlayerState:
        try:
            return self.players[player_id]
        except KeyError:
            raise ParticipantNotFound(f"Unknown participant: {player_id!r}") from None

    def opponent(self, player_id: str) -> str:
        first, second = self.player_order
        if player_id == first:
            return second
        if player_id == second:
            return first
        raise ParticipantNotFound(f"Unknown participant: {player_id!r}")

    def card(self, instance_id: str) -> CardInstance:
        return self.cards[instance_id]


def _fail(code: ErrorCode, message: str) -> StepResult:
    logger.debug("Action rejected (%s): %s", code, message)
    return StepResult(ok=False, events=[], error=message, code=code)


def _draw_one(state: MatchState, player_id: str) -> bool:
    ps = state.players[player_id]
    if not ps.deck:
        logger.debug("Deck of %s is empty, draw skipped", player_id)
        return False
    instance_id = ps.deck.pop(0)
    ps.hand.append(instance_id)
    state.event_log.append({"type": "CARD_DRAWN", "player": player_id, "instance_id": instance_id})
    return True


def _start_turn(state: MatchState, player_id: str) -> None:
    ps = state.players[player_id]
    cfg = state.config
    ps.max_mana = min(cfg.max_mana, ps.max_mana + cfg.mana_per_turn)
    ps.current_mana = ps.max_mana
    for _ in range(cfg.draw_per_turn):
        _draw_one(state, player_id)
    state.event_log.append(
        {"type": "TURN_STARTED", "player": player_id, "turn": state.turn_number, "mana": ps.max_mana}
    )


def _destroy_dead(state: MatchState) -> None:
    for player_id in state.player_order:
        ps = state.players[player_id]
        survivors: list[str] = []
        for instance_id in ps.field:
            c = state.cards[instance_id]
            if c.current_defense is not None and c.current_defense <= 0:
                del state.cards[instance_id]
                ps.discard.append(c.template_id)
                state.event_log.append(
                    {"type": "FOLLOWER_DESTROYED", "player": player_id, "instance_id": instance_id}
                )
                logger.debug("%s (%s) was destroyed", c.name, instance_id)
            else:
                survivors.append(instance_id)
        ps.field = survivors


def end_match(state: MatchState, winner_id: str) -> None:
    state.started = False
    state.active_player_id = None
    state.winner_id = winner_id
    state.event_log.append({"type": "GAME_ENDED", "winner": winner_id})
    logger.info("Match ended after turn %d, winner: %s", state.turn_number, winner_id)


def _end_turn(state: MatchState, action: EndTurnAction) -> StepResult:
    if action.player != state.active_player_id:
        return _fail("not_your_turn", "Not your turn.")
    ps = state.players[action.player]
    for instance_id in ps.field:
        state.cards[instance_id].has_acted = False
    state.event_log.append({"type": "TURN_ENDED", "player": action.player})

    state.active_player_id = state.opponent(action.player)
    state.turn_number += 1
    _start_turn(state, state.active_player_id)
    logger.debug("Turn %d: %s is now active", state.turn_number, state.active_player_id)
    return StepResult(ok=True, events=[])


def _play_card(state: MatchState, action: PlayCardAction) -> StepResult:
    if action.player != state.active_player_id:
        return _fail("not_your_turn", "Not your turn.")
    ps = state.players[action.player]
    if action.instance_id not in ps.hand:
        return _fail("card_not_found", "That card is not in your hand.")
    card = state.cards[action.instance_id]
    if card.cost > ps.current_mana:
        return _fail("insufficient_mana", "Not enough mana.")

    # Pay + remove from hand
    ps.current_mana -= card.cost
    ps.hand.remove(action.instance_id)
    state.event_log.append(
        {
            "type": "CARD_PLAYED",
            "player": action.player,
            "instance_id": card.instance_id,
            "card_id": card.template_id,
        }
    )

    if card.is_follower:
        card.current_defense = card.base_defense
        card.has_acted = True
        ps.field.append(card.instance_id)
        state.event_log.append(
            {"type": "FOLLOWER_SUMMONED", "player": action.player, "instance_id": card.instance_id}
        )
    else:
        # Spells have no effect yet; they simply leave play.
        del state.cards[card.instance_id]
        ps.discard.append(card.template_id)
        state.event_log.append(
            {"type": "SPELL_RESOLVED", "player": action.player, "card_id": card.template_id}
        )
    logger.debug(
        "%s played %s, mana %d/%d", action.player, card.name, ps.current_mana, ps.max_mana
    )
    return StepResult(ok=True, events=[])


def _attack(state: MatchState, action: AttackAction) -> StepResult:
    if action.player != state.active_player_id:
        return _fail("not_your_turn", "Not your turn.")
    ps = state.players[action.player]
    attacker = state.cards.get(action.attacker_id) if action.attacker_id in ps.field else None
    if attacker is None or not attacker.is_follower:
        return _fail("invalid_attacker", "That card cannot attack.")
    if attacker.has_acted:
        return _fail("already_acted", "That follower has already acted.")

    enemy = state.opponent(action.player)
    eps = state.players[enemy]
    attack = attacker.attack or 0

    if action.target.kind == "follower":
        if action.target.target_id not in eps.field:
            return _fail("target_not_found", "Target follower not found.")
        defender = state.cards[action.target.target_id]
        if defender.current_defense is None or attacker.current_defense is None:
            return _fail("target_not_found", "Target follower not found.")

        # Simultaneous damage: both sides can die in the same exchange.
        defender.current_defense -= attack
        attacker.current_defense -= defender.attack or 0
        attacker.has_acted = True
        state.event_log.append(
            {
                "type": "DAMAGE_FOLLOWER",
                "player": enemy,
                "instance_id": defender.instance_id,
                "amount": attack,
            }
        )
        state.event_log.append(
            {
                "type": "DAMAGE_FOLLOWER",
                "player": action.player,
                "instance_id": attacker.instance_id,
                "amount": defender.attack or 0,
            }
        )
        logger.debug(
            "%s (%d/%d) traded with %s (%d/%d)",
            attacker.name,
            attack,
            attacker.current_defense,
            defender.name,
            defender.attack or 0,
            defender.current_defense,
        )
        _destroy_dead(state)
    elif action.target.kind == "leader":
        eps.life -= attack
        attacker.has_acted = True
        state.event_log.append({"type": "DAMAGE_LEADER", "player": enemy, "amount": attack})
        logger.debug("%s hit %s's leader for %d, life now %d", attacker.name, enemy, attack, eps.life)
    else:
        return _fail("invalid_target", f"Invalid target kind: {action.target.kind!r}.")

    if eps.life <= 0:
        end_match(state, action.player)
    return StepResult(ok=True, events=[])


def step(state: MatchState, action: Action) -> StepResult:
    """Apply a single action to the match state.

    Mutates `state` in place only when the action is accepted; a rejected
    action leaves every field, the logs included, untouched. For a given
    seed and action sequence the result is deterministic.
    """
    if not state.in_progress:
        return _fail("game_not_active", "The match is not in progress.")

    mark = len(state.event_log)
    if isinstance(action, PlayCardAction):
        result = _play_card(state, action)
    elif isinstance(action, AttackAction):
        result = _attack(state, action)
    elif isinstance(action, EndTurnAction):
        result = _end_turn(state, action)
    else:
        raise TypeError(f"Unknown action: {action!r}")

    if result.ok:
        state.action_log.append(action)
        result.events = state.event_log[mark:]
    return result


def new_match(
    player1_id: str,
    player2_id: str,
    *,
    seed: int | None = None,
    config: MatchConfig | None = None,
    decks: Mapping[str, Sequence[CardTemplate]] | None = None,
) -> MatchState:
    if player1_id == player2_id:
        raise ValueError("A match needs two distinct participants.")
    cfg = config or MatchConfig()
    if seed is None:
        seed = random.SystemRandom().randrange(2**63)
    if decks is not None:
        unknown = set(decks) - {player1_id, player2_id}
        if unknown:
            raise ValueError(f"Decks given for unknown participants: {sorted(unknown)}")

    rng = random.Random(seed)
    order = (player1_id, player2_id)
    cards: dict[str, CardInstance] = {}
    players: dict[str, PlayerState] = {}
    for player_id in order:
        templates = decks.get(player_id) if decks is not None else None
        if templates is None:
            templates = reference_deck(rng, cfg.deck_size)
        deck = build_deck(rng, templates)
        for inst in deck:
            cards[inst.instance_id] = inst
        players[player_id] = PlayerState(
            id=player_id,
            life=cfg.starting_life,
            deck=[inst.instance_id for inst in deck],
        )

    state = MatchState(
        config=cfg, seed=seed, rng=rng, player_order=order, players=players, cards=cards
    )
    state.active_player_id = rng.choice(order)
    state.turn_number = 1
    state.started = True

    # Starting hands; a short deck just stops dealing.
    for player_id in order:
        for _ in range(cfg.starting_hand):
            if not _draw_one(state, player_id):
                break

    state.event_log.append(
        {"type": "MATCH_STARTED", "first_player": state.active_player_id, "seed": seed}
    )
    logger.info("Match %s vs %s started, %s goes first", player1_id, player2_id, state.active_player_id)
    return state


def replay(
    player1_id: str,
    player2_id: str,
    seed: int,
    actions: Iterable[Action],
    config: MatchConfig | None = None,
    decks: Mapping[str, Sequence[CardTemplate]] | None = None,
) -> MatchState:
    state = new_match(player1_id, player2_id, seed=seed, config=config, decks=decks)
    for a in actions:
        step(state, a)
        if not state.in_progress:
            break
    return state
