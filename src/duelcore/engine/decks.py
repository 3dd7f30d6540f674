from __future__ import annotations

import random
import uuid
from typing import Sequence

from .types import CardInstance, CardTemplate, Follower, Spell


def new_instance_id(rng: random.Random) -> str:
    # Drawn from the match rng so a seed reproduces the same ids.
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def reference_deck(rng: random.Random, size: int = 20) -> list[CardTemplate]:
    """Generate the starter deck: even slots are followers, odd slots are spells.

    Cost, attack and defense are each rolled in 1..5.
    """
    templates: list[CardTemplate] = []
    for i in range(size):
        cost = rng.randint(1, 5)
        body: Follower | Spell
        if i % 2 == 0:
            body = Follower(attack=rng.randint(1, 5), defense=rng.randint(1, 5))
        else:
            body = Spell()
        templates.append(
            CardTemplate(
                id=f"SD01-{i + 1:03d}",
                name=f"Starter Card {i + 1}",
                image=f"/cards/SD01-{(i % 20) + 1:03d}.png",
                cost=cost,
                body=body,
            )
        )
    return templates


def build_deck(rng: random.Random, templates: Sequence[CardTemplate]) -> list[CardInstance]:
    """Create one instance per template copy and shuffle uniformly."""
    deck = [CardInstance(instance_id=new_instance_id(rng), template=t) for t in templates]
    rng.shuffle(deck)
    return deck
