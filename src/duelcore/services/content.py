from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from duelcore.engine.types import CardBody, CardTemplate, Follower, Spell


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_card(raw: Mapping[str, object]) -> CardTemplate:
    ctype = _require_str(raw, "type")
    body: CardBody
    if ctype == "follower":
        body = Follower(attack=_require_int(raw, "attack"), defense=_require_int(raw, "defense"))
    elif ctype == "spell":
        body = Spell()
    else:
        raise ContentError(f"Unknown card type: {ctype}")
    return CardTemplate(
        id=_require_str(raw, "id"),
        name=_require_str(raw, "name"),
        image=_require_str(raw, "image"),
        cost=_require_int(raw, "cost"),
        body=body,
    )


@dataclass(frozen=True)
class CardCatalog:
    """Card templates by id plus named decklists (template id, count)."""

    cards: dict[str, CardTemplate]
    decklists: dict[str, tuple[tuple[str, int], ...]]

    def get(self, card_id: str) -> CardTemplate:
        try:
            return self.cards[card_id]
        except KeyError:
            raise ContentError(f"Unknown card id: {card_id}") from None

    def deck_names(self) -> list[str]:
        return sorted(self.decklists)

    def build_deck(self, name: str) -> tuple[CardTemplate, ...]:
        entries = self.decklists.get(name)
        if entries is None:
            raise ContentError(f"Unknown deck: {name}")
        out: list[CardTemplate] = []
        for card_id, count in entries:
            out.extend([self.get(card_id)] * count)
        return tuple(out)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_catalog(self) -> CardCatalog:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        schema = _load_json(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))

        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        raw_cards = raw.get("cards")
        if not isinstance(raw_cards, list):
            raise ContentError("cards.json.cards must be a list")

        cards: dict[str, CardTemplate] = {}
        for item in raw_cards:
            if not isinstance(item, dict):
                continue
            card = _parse_card(item)
            if card.id in cards:
                raise ContentError(f"Duplicate card id: {card.id}")
            cards[card.id] = card

        decklists: dict[str, tuple[tuple[str, int], ...]] = {}
        raw_decks = raw.get("decks", {})
        if isinstance(raw_decks, dict):
            for deck_name, entries in raw_decks.items():
                if not isinstance(entries, list):
                    continue
                parsed: list[tuple[str, int]] = []
                for e in entries:
                    if not isinstance(e, dict):
                        continue
                    card_id = _require_str(e, "card")
                    if card_id not in cards:
                        raise ContentError(f"Deck {deck_name} references unknown card {card_id}")
                    parsed.append((card_id, _require_int(e, "count")))
                decklists[deck_name] = tuple(parsed)

        return CardCatalog(cards=cards, decklists=decklists)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_catalog()
