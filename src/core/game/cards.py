"""
Event card system.

A card's effect is an ordered list of steps. The engine applies them front
to back, so "pay 50 then move back 2" and "move back 2 then pay 50" are
different cards.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union


class EffectKind(Enum):
    """Kinds of card effect steps."""

    MONEY = "money"
    MOVE = "move"
    TELEPORT = "teleport"
    GO_TO_JAIL = "go_to_jail"


@dataclass(frozen=True)
class MoneyEffect:
    """Gain (positive) or pay (negative) an amount."""

    amount: int
    kind: EffectKind = field(default=EffectKind.MONEY, init=False)


@dataclass(frozen=True)
class MoveEffect:
    """Move relative to the current position; negative steps move back."""

    steps: int
    kind: EffectKind = field(default=EffectKind.MOVE, init=False)


@dataclass(frozen=True)
class TeleportEffect:
    """Jump to an absolute board index."""

    position: int
    collect_start: bool = True
    kind: EffectKind = field(default=EffectKind.TELEPORT, init=False)


@dataclass(frozen=True)
class GoToJailEffect:
    """Go directly to jail; ends the card."""

    kind: EffectKind = field(default=EffectKind.GO_TO_JAIL, init=False)


CardEffect = Union[MoneyEffect, MoveEffect, TeleportEffect, GoToJailEffect]


@dataclass(frozen=True)
class EventCard:
    """Represents one event card."""

    id: str
    title: str
    description: str = ""
    effects: Sequence[CardEffect] = ()

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "description": self.description}

    def __repr__(self) -> str:
        return f"EventCard('{self.id}')"


EVENT_CARDS: Sequence[EventCard] = (
    EventCard("bonus-100", "Unexpected bonus", "Receive 100", (MoneyEffect(100),)),
    EventCard("tax-100", "Special tax", "Pay 100", (MoneyEffect(-100),)),
    EventCard("advance-3", "Advance 3 tiles", "Move 3 tiles forward", (MoveEffect(3),)),
    EventCard("back-2", "Go back 2 tiles", "Move 2 tiles back", (MoveEffect(-2),)),
    EventCard("go-to-jail", "Go to jail", "Go directly to jail", (GoToJailEffect(),)),
    EventCard("advance-to-start", "Advance to Start", "Collect the pass-start bonus", (TeleportEffect(0),)),
)


class EventDeck:
    """
    A draw pile consumed front to back.

    When it runs out it is replaced by a freshly shuffled copy of the full
    card set.
    """

    def __init__(self, rng: random.Random, cards: Optional[Sequence[EventCard]] = None):
        self.rng = rng
        self.card_set: List[EventCard] = list(cards if cards is not None else EVENT_CARDS)
        self.cards: List[EventCard] = []
        self.reshuffle()

    def reshuffle(self) -> None:
        """Replace the pile with a shuffled copy of the full card set."""
        self.cards = list(self.card_set)
        self.rng.shuffle(self.cards)

    def draw(self) -> EventCard:
        """Draw the top card, reshuffling first if the pile is empty."""
        if not self.cards:
            self.reshuffle()
        return self.cards.pop(0)

    def stack(self, cards: Sequence[EventCard]) -> None:
        """Put specific cards on top of the pile, in order."""
        self.cards = list(cards) + self.cards

    def __len__(self) -> int:
        return len(self.cards)
