from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Tuple

_RANK_POINTS = {rank: idx for idx, rank in enumerate("23456789TJQKA", start=2)}


def _rough_hand_strength(hole: List[str], community: List[str]) -> int:
    """Very rough proxy for hand quality used to drive aggression choices."""
    if len(hole) < 2:
        return 0

    ranks = [card[0] for card in hole]
    suits = [card[1] for card in hole]
    values = [_RANK_POINTS.get(rank, 2) for rank in ranks]

    score = sum(values)
    if ranks[0] == ranks[1]:
        score += 14  # pairs are quite strong pre-flop
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if suits[0] == suits[1]:
        score += 3
    if min(values) >= 11:
        score += 2

    # Board hits: each hole rank paired on the board is worth about a pocket pair.
    board_ranks = [card[0] for card in community]
    for rank in set(ranks):
        score += 10 * board_ranks.count(rank)
    return score


def _should_raise(strength: int, betting_round: str, facing_bet: bool, rng: random.Random) -> bool:
    base = 0.2 if facing_bet else 0.35
    round_bonus = {
        "preflop": 0.0,
        "flop": 0.05,
        "turn": 0.1,
        "river": 0.12,
    }.get(betting_round, 0.0)
    scaled_strength = min(strength / 45.0, 0.45)
    probability = min(0.85, base + round_bonus + scaled_strength)

    # Always attack with premium holdings.
    if strength >= 36:
        return True
    return rng.random() < probability


def _choose_raise_amount(
    min_raise_to: Optional[int],
    max_raise_to: Optional[int],
    facing_bet: bool,
    rng: random.Random,
) -> int:
    if min_raise_to is None:
        raise ValueError("Raise requested without a minimum amount")
    if max_raise_to is None or max_raise_to <= min_raise_to:
        return min_raise_to

    # Keep most raises modest; shoves stay rare.
    span = min(max_raise_to - min_raise_to, 4 * min_raise_to)
    roll = rng.random()
    if facing_bet:
        if roll < 0.3:
            return min_raise_to
        if roll > 0.97:
            return max_raise_to
    else:
        if roll < 0.45:
            return min_raise_to
        if roll > 0.98:
            return max_raise_to

    return min_raise_to + int(span * rng.random())


def baseline_strategy(context: Dict[str, Any], rng: random.Random) -> Tuple[str, Optional[int], str]:
    """House bot: mixes in random raises with a bias toward stronger holdings."""

    legal = list(context.get("legal", []))
    if not legal or legal == ["fold"]:
        return "fold", None, "Nothing else is legal"

    hole = list(context.get("hole_cards", []))
    strength = _rough_hand_strength(hole, list(context.get("community", [])))
    betting_round = str(context.get("betting_round", "preflop"))
    facing_bet = (context.get("to_call") or 0) > 0

    if "raise" in legal and hole and _should_raise(strength, betting_round, facing_bet, rng):
        amount = _choose_raise_amount(context.get("min_raise_to"), context.get("max_raise_to"), facing_bet, rng)
        return "raise", amount, f"Raising with rough strength {strength}"

    if "call" in legal:
        return "call", None, f"Calling with rough strength {strength}"

    if "check" in legal:
        return "check", None, "Free card"

    return "fold", None, "Giving up"
