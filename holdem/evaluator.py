from __future__ import annotations

import itertools
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import RANK_NAME, RANK_PLURAL, Card

# Strength layout: category * CATEGORY_BAND + tie-break digits (base 15, first
# kicker most significant) + optional draw bonus. The largest tie-break value is
# 14 * (15**4 + 15**3 + 15**2 + 15 + 1) = 759_374, and the biggest draw bonus
# keeps every score strictly inside its own band.
CATEGORY_BAND = 1_000_000
KICKER_BASE = 15
FLUSH_DRAW_BONUS = 120_000
STRAIGHT_DRAW_BONUS = 80_000

# Pre-flop scale (0-1000). Tiers never overlap, suited adds a fixed bonus within a tier.
SUITED_BONUS = 40
PAIR_BASE = 800
BROADWAY_BASE = 560
SPECULATIVE_BASE = 300
WEAK_BASE = 100


class HandCategory(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


DRAW_CATEGORIES = frozenset(
    {HandCategory.HIGH_CARD, HandCategory.PAIR, HandCategory.TWO_PAIR, HandCategory.THREE_OF_A_KIND}
)

CATEGORY_NAMES = {
    HandCategory.HIGH_CARD: "high_card",
    HandCategory.PAIR: "pair",
    HandCategory.TWO_PAIR: "two_pair",
    HandCategory.THREE_OF_A_KIND: "three_of_a_kind",
    HandCategory.STRAIGHT: "straight",
    HandCategory.FLUSH: "flush",
    HandCategory.FULL_HOUSE: "full_house",
    HandCategory.FOUR_OF_A_KIND: "four_of_a_kind",
    HandCategory.STRAIGHT_FLUSH: "straight_flush",
}


@dataclass(frozen=True)
class HandEvaluation:
    strength: int
    category: HandCategory
    description: str
    cards: Tuple[Card, ...]
    draw_bonus: int = 0

    @property
    def is_preflop(self) -> bool:
        return len(self.cards) == 2


def describe_category(category: HandCategory) -> str:
    return CATEGORY_NAMES[category]


def evaluate(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> HandEvaluation:
    """Score two hole cards against 0, 3, 4 or 5 board cards. Higher strength wins."""
    if len(hole_cards) != 2:
        raise ValueError("Exactly two hole cards are required")
    if len(community_cards) not in (0, 3, 4, 5):
        raise ValueError(f"Unsupported community card count: {len(community_cards)}")
    cards = _canonical(list(hole_cards) + list(community_cards))
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in evaluation")

    if not community_cards:
        return _evaluate_preflop(cards)

    category, tiebreak, best = best_five(cards)
    strength = int(category) * CATEGORY_BAND + _encode(tiebreak)
    bonus = 0
    if len(community_cards) < 5 and category in DRAW_CATEGORIES:
        bonus = _draw_bonus(cards)
    return HandEvaluation(
        strength=strength + bonus,
        category=category,
        description=_describe(category, tiebreak),
        cards=best,
        draw_bonus=bonus,
    )


def compare_hands(first: HandEvaluation, second: HandEvaluation) -> int:
    if first.strength > second.strength:
        return 1
    if first.strength < second.strength:
        return -1
    return 0


def best_five(cards: Sequence[Card]) -> Tuple[HandCategory, List[int], Tuple[Card, ...]]:
    best: Optional[Tuple[HandCategory, List[int]]] = None
    best_cards: Tuple[Card, ...] = ()
    for combo in itertools.combinations(_canonical(cards), 5):
        rank = _evaluate_five(combo)
        if best is None or rank > best:
            best = rank
            best_cards = combo
    if best is None:
        raise ValueError("At least five cards are required")
    return best[0], best[1], best_cards


def _canonical(cards: Iterable[Card]) -> List[Card]:
    return sorted(cards, key=lambda card: (-card.rank, card.suit))


def _evaluate_five(cards: Sequence[Card]) -> Tuple[HandCategory, List[int]]:
    ranks = sorted((card.rank for card in cards), reverse=True)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(ranks)

    counts = Counter(ranks)
    ordered = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    grouped = [rank for rank, _ in ordered]
    shape = [count for _, count in ordered]

    if straight_high and is_flush:
        return HandCategory.STRAIGHT_FLUSH, [straight_high]
    if shape[0] == 4:
        return HandCategory.FOUR_OF_A_KIND, grouped
    if shape[0] == 3 and shape[1] == 2:
        return HandCategory.FULL_HOUSE, grouped
    if is_flush:
        return HandCategory.FLUSH, ranks
    if straight_high:
        return HandCategory.STRAIGHT, [straight_high]
    if shape[0] == 3:
        return HandCategory.THREE_OF_A_KIND, grouped
    if shape[0] == 2 and shape[1] == 2:
        return HandCategory.TWO_PAIR, grouped
    if shape[0] == 2:
        return HandCategory.PAIR, grouped
    return HandCategory.HIGH_CARD, ranks


def _straight_high(ranks: Sequence[int]) -> Optional[int]:
    unique = sorted(set(ranks), reverse=True)
    if len(unique) != 5:
        return None
    if unique[0] - unique[4] == 4:
        return unique[0]
    if unique == [14, 5, 4, 3, 2]:  # wheel
        return 5
    return None


def _encode(tiebreak: Sequence[int]) -> int:
    value = 0
    for idx in range(5):
        digit = tiebreak[idx] if idx < len(tiebreak) else 0
        value = value * KICKER_BASE + digit
    return value


def _draw_bonus(cards: Sequence[Card]) -> int:
    bonus = 0
    suits = Counter(card.suit for card in cards)
    if max(suits.values()) == 4:
        bonus += FLUSH_DRAW_BONUS
    ranks = {card.rank for card in cards}
    if 14 in ranks:
        ranks.add(1)
    for low in range(1, 11):
        window = set(range(low, low + 5))
        if len(window & ranks) == 4:
            bonus += STRAIGHT_DRAW_BONUS
            break
    return bonus


def _describe(category: HandCategory, tiebreak: Sequence[int]) -> str:
    top = tiebreak[0]
    if category == HandCategory.STRAIGHT_FLUSH:
        if top == 14:
            return "Royal Flush"
        return f"Straight Flush, {RANK_NAME[top]} high"
    if category == HandCategory.FOUR_OF_A_KIND:
        return f"Four of a Kind, {RANK_PLURAL[top]}"
    if category == HandCategory.FULL_HOUSE:
        return f"Full House, {RANK_PLURAL[top]} over {RANK_PLURAL[tiebreak[1]]}"
    if category == HandCategory.FLUSH:
        return f"Flush, {RANK_NAME[top]} high"
    if category == HandCategory.STRAIGHT:
        return f"Straight, {RANK_NAME[top]} high"
    if category == HandCategory.THREE_OF_A_KIND:
        return f"Three of a Kind, {RANK_PLURAL[top]}"
    if category == HandCategory.TWO_PAIR:
        return f"Two Pair, {RANK_PLURAL[top]} and {RANK_PLURAL[tiebreak[1]]}"
    if category == HandCategory.PAIR:
        return f"Pair of {RANK_PLURAL[top]}"
    return f"High Card, {RANK_NAME[top]}"


def _evaluate_preflop(cards: Sequence[Card]) -> HandEvaluation:
    high, low = cards[0], cards[1]
    suited = high.suit == low.suit
    if high.rank == low.rank:
        strength = PAIR_BASE + high.rank * 10
        return HandEvaluation(
            strength=strength,
            category=HandCategory.PAIR,
            description=f"Pocket {RANK_PLURAL[high.rank]}",
            cards=tuple(cards),
        )

    bonus = SUITED_BONUS if suited else 0
    body = high.rank * 10 + low.rank * 5
    connected = high.rank - low.rank == 1
    if low.rank >= 10:
        strength = BROADWAY_BASE + body + bonus
    elif suited or connected:
        strength = SPECULATIVE_BASE + body + bonus
    else:
        strength = WEAK_BASE + body
    label = "suited" if suited else "offsuit"
    return HandEvaluation(
        strength=strength,
        category=HandCategory.HIGH_CARD,
        description=f"{RANK_NAME[high.rank]}-{RANK_NAME[low.rank]} {label}",
        cards=tuple(cards),
    )
