from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from holdem.cards import parse_cards
from holdem.evaluator import CATEGORY_BAND, HandEvaluation, evaluate
from holdem.models import ActionType, Phase

from .context import DecisionContext
from .profiles import StrategyProfile

# Hand ratings live on a 0-1000 scale. Pre-flop the evaluator already reports
# on that scale; after the flop each made-hand category gets a 110 point band.
POSTFLOP_FLOOR = 150
POSTFLOP_BAND = 110
MAX_RATING = 1000.0

# Base (fold, call, raise, all-in) thresholds for a neutral 0.5/0.5 profile.
PREFLOP_BASE = (180, 300, 500, 750)
POSTFLOP_BASE = (150, 250, 450, 700)
TRAIT_SWING = 200

POSITION_FACTORS = {
    "Button": 1.15,
    "Cutoff": 1.05,
    "Small Blind": 0.95,
    "Big Blind": 1.0,
    "Under the Gun": 0.85,
}
LATE_POSITIONS = ("Button", "Cutoff")

SHORT_STACK_SPR = 10.0
GOOD_POT_ODDS = 2.5
GREAT_POT_ODDS = 4.0
MIN_ODDS_STRENGTH = 200
# Above this tightness a hand below the fold line is given up even when checking is free.
FREE_CARD_MAX_TIGHTNESS = 0.85

BLUFF_CHANCE = 0.08
SEMI_BLUFF_CHANCE = 0.2

# Raise sizes as a fraction of the pot after calling.
VALUE_SIZING = (0.5, 0.8)
AGGRESSIVE_SIZING = (0.8, 1.2)
BLUFF_SIZING = (0.6, 0.8)


@dataclass(frozen=True)
class Decision:
    action: ActionType
    amount: Optional[int] = None
    reasoning: str = ""
    source: str = "rules"


@dataclass(frozen=True)
class Thresholds:
    fold: float
    call: float
    raise_: float
    all_in: float

    @classmethod
    def for_profile(cls, profile: StrategyProfile, preflop: bool) -> "Thresholds":
        fold, call, raise_, all_in = PREFLOP_BASE if preflop else POSTFLOP_BASE
        tight_shift = (profile.tightness - 0.5) * TRAIT_SWING
        aggr_shift = (profile.aggression - 0.5) * TRAIT_SWING
        return cls(
            fold=fold + 0.6 * tight_shift,
            call=call + tight_shift,
            raise_=raise_ + 0.5 * tight_shift - aggr_shift,
            all_in=all_in + 0.25 * tight_shift - 0.5 * aggr_shift,
        )


def hand_rating(evaluation: HandEvaluation, preflop: bool) -> float:
    if preflop:
        return float(min(evaluation.strength, MAX_RATING))
    category, rest = divmod(evaluation.strength, CATEGORY_BAND)
    rating = POSTFLOP_FLOOR + category * POSTFLOP_BAND + (rest / CATEGORY_BAND) * POSTFLOP_BAND
    return min(rating, MAX_RATING)


def position_multiplier(position: str, profile: StrategyProfile) -> float:
    raw = POSITION_FACTORS.get(position, 0.95)
    return 1.0 + (raw - 1.0) * (0.5 + profile.adaptability)


def pot_odds_verdict(ctx: DecisionContext, profile: StrategyProfile) -> Tuple[bool, bool]:
    """(good, great) pot odds for the amount owed, with tighter players demanding more."""
    if ctx.to_call <= 0:
        return False, False
    ratio = ctx.pot / ctx.to_call
    scale = 0.75 + 0.5 * profile.tightness
    return ratio >= GOOD_POT_ODDS * scale, ratio >= GREAT_POT_ODDS * scale


class RuleBasedStrategy:
    """Deterministic threshold model; the only randomness is the injected rng."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def decide(self, ctx: DecisionContext, profile: StrategyProfile) -> Decision:
        legal = [ActionType.parse(action) for action in ctx.legal]
        if not legal:
            return Decision(ActionType.FOLD, None, "No legal actions available")

        preflop = ctx.betting_round == Phase.PREFLOP.value
        evaluation = evaluate(parse_cards(ctx.hole_cards), parse_cards(ctx.community))
        rating = hand_rating(evaluation, preflop)
        strength = rating * position_multiplier(ctx.position, profile)

        short_stack = ctx.pot > 0 and ctx.chips / ctx.pot < SHORT_STACK_SPR
        if short_stack:
            strength *= 1.0 + 0.1 * profile.risk_tolerance

        limits = Thresholds.for_profile(profile, preflop)
        good_odds, great_odds = pot_odds_verdict(ctx, profile)
        bluffing, semi_bluffing = self._bluff_rolls(ctx, profile, preflop, rating, evaluation)

        if ActionType.ALL_IN in legal and (
            strength >= limits.all_in or (short_stack and strength >= limits.raise_ and profile.risk_tolerance >= 0.5)
        ):
            return Decision(ActionType.ALL_IN, None, f"Shoving with strength {strength:.0f}")

        if ActionType.RAISE in legal:
            if strength >= limits.raise_:
                midpoint = (limits.raise_ + limits.all_in) / 2
                sizing = AGGRESSIVE_SIZING if strength >= midpoint else VALUE_SIZING
                label = "aggressive" if sizing is AGGRESSIVE_SIZING else "value"
                amount = self._raise_amount(ctx, profile, sizing)
                return Decision(ActionType.RAISE, amount, f"{label.capitalize()} raise with strength {strength:.0f}")
            if bluffing or semi_bluffing:
                amount = self._raise_amount(ctx, profile, BLUFF_SIZING)
                kind = "Semi-bluff" if semi_bluffing else "Bluff"
                return Decision(ActionType.RAISE, amount, f"{kind} raise with strength {strength:.0f}")

        if ctx.to_call > 0 and ActionType.CALL in legal:
            if strength >= limits.call:
                return Decision(ActionType.CALL, None, f"Calling with strength {strength:.0f}")
            if good_odds and strength >= MIN_ODDS_STRENGTH:
                return Decision(ActionType.CALL, None, "Calling on good pot odds")
            if great_odds:
                return Decision(ActionType.CALL, None, "Calling on great pot odds")

        if ActionType.CHECK in legal:
            if strength >= limits.fold or profile.tightness <= FREE_CARD_MAX_TIGHTNESS:
                return Decision(ActionType.CHECK, None, "Checking for a free card")
            return Decision(ActionType.FOLD, None, f"Giving up strength {strength:.0f} rather than see another card")

        return Decision(ActionType.FOLD, None, f"Folding strength {strength:.0f} facing {ctx.to_call}")

    def _bluff_rolls(
        self,
        ctx: DecisionContext,
        profile: StrategyProfile,
        preflop: bool,
        rating: float,
        evaluation: HandEvaluation,
    ) -> Tuple[bool, bool]:
        # No bluffs pre-flop or into a bet bigger than the pot.
        if preflop or ctx.to_call > ctx.pot:
            return False, False
        bluffing = False
        if ctx.position in LATE_POSITIONS:
            late = 1.5 if ctx.position == "Button" else 1.0
            bluffing = self.rng.random() < BLUFF_CHANCE * (0.5 + profile.aggression) * late
        semi_bluffing = False
        if ctx.betting_round == Phase.FLOP.value and rating >= 200 and evaluation.draw_bonus > 0:
            semi_bluffing = self.rng.random() < SEMI_BLUFF_CHANCE * (0.5 + profile.aggression)
        return bluffing, semi_bluffing

    def _raise_amount(self, ctx: DecisionContext, profile: StrategyProfile, sizing: Tuple[float, float]) -> int:
        low, high = sizing
        fraction = low + (high - low) * self.rng.random()
        fraction *= 0.8 + 0.2 * profile.aggression + 0.2 * profile.risk_tolerance
        pot_after_call = ctx.pot + ctx.to_call
        target = ctx.current_bet + int(pot_after_call * fraction)
        return clamp_raise(target, ctx.min_raise_to, ctx.max_raise_to)


def clamp_raise(target: int, min_raise_to: Optional[int], max_raise_to: Optional[int]) -> int:
    if min_raise_to is not None:
        target = max(target, min_raise_to)
    if max_raise_to is not None:
        target = min(target, max_raise_to)
    return target


def safe_fallback(legal: List[ActionType]) -> Decision:
    if ActionType.CHECK in legal:
        return Decision(ActionType.CHECK, None, "Substituted check for an illegal choice")
    return Decision(ActionType.FOLD, None, "Substituted fold for an illegal choice")
