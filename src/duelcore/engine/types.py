from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Follower:
    attack: int
    defense: int


@dataclass(frozen=True)
class Spell:
    pass


CardBody = Follower | Spell


@dataclass(frozen=True)
class CardTemplate:
    """Immutable card definition shared by every copy of a card."""

    id: str
    name: str
    image: str
    cost: int
    body: CardBody

    @property
    def is_follower(self) -> bool:
        return isinstance(self.body, Follower)


@dataclass
class CardInstance:
    """One physical copy of a card, tracked in the match arena by instance_id."""

    instance_id: str
    template: CardTemplate
    current_defense: int | None = None
    has_acted: bool | None = None

    @property
    def template_id(self) -> str:
        return self.template.id

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def image(self) -> str:
        return self.template.image

    @property
    def cost(self) -> int:
        return self.template.cost

    @property
    def is_follower(self) -> bool:
        return self.template.is_follower

    @property
    def attack(self) -> int | None:
        body = self.template.body
        return body.attack if isinstance(body, Follower) else None

    @property
    def base_defense(self) -> int | None:
        body = self.template.body
        return body.defense if isinstance(body, Follower) else None
