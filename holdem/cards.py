from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import EmptyDeck, InsufficientCards

RANKS = "23456789TJQKA"
SUITS = "hdcs"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
RANK_LABEL = {value: rank for rank, value in RANK_VALUE.items()}
RANK_NAME = {
    2: "Two",
    3: "Three",
    4: "Four",
    5: "Five",
    6: "Six",
    7: "Seven",
    8: "Eight",
    9: "Nine",
    10: "Ten",
    11: "Jack",
    12: "Queen",
    13: "King",
    14: "Ace",
}
RANK_PLURAL = {value: ("Sixes" if value == 6 else f"{name}s") for value, name in RANK_NAME.items()}


@dataclass(frozen=True)
class Card:
    rank: int
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANK_LABEL:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{RANK_LABEL[self.rank]}{self.suit}"

    def __str__(self) -> str:
        return self.label


class Deck:
    """Cards are consumed from the top (index 0) by `deal` and `burn`."""

    def __init__(self, cards: Iterable[Card]) -> None:
        self._cards: List[Card] = list(cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self):
        return iter(list(self._cards))

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def deal(self, count: int) -> List[Card]:
        if count < 0 or count > len(self._cards):
            raise InsufficientCards(f"Cannot deal {count} cards from {len(self._cards)} remaining")
        cards = self._cards[:count]
        del self._cards[:count]
        return cards

    def burn(self) -> Card:
        if not self._cards:
            raise EmptyDeck("Cannot burn from an empty deck")
        return self._cards.pop(0)


def full_deck() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in range(2, 15)]


def new_shuffled_deck(rng: Optional[random.Random] = None) -> Deck:
    rng = rng or random.Random()
    cards = full_deck()
    rng.shuffle(cards)
    return Deck(cards)


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = label[0].upper(), label[1].lower()
    if rank not in RANK_VALUE:
        raise ValueError(f"Invalid rank: {label[0]}")
    return Card(RANK_VALUE[rank], suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def format_cards(cards: Iterable[Card]) -> str:
    return " ".join(card.label for card in cards)


def is_complete_deck(cards: Sequence[Card]) -> bool:
    return len(cards) == 52 and len(set(cards)) == 52
