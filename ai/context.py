from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from holdem.cards import cards_to_labels
from holdem.game import GameEngine
from holdem.models import GameState

from .memory import OpponentMemory
from .profiles import StrategyProfile


@dataclass
class DecisionContext:
    # Everything a decision maker may look at. Only public information plus the seat's own cards.
    seat: int
    name: str
    hand_number: int
    betting_round: str
    hole_cards: List[str]
    community: List[str]
    burned: int
    chips: int
    seat_bet: int
    current_bet: int
    to_call: int
    pot: int
    big_blind: int
    position: str
    opponents_in_hand: int
    legal: List[str]
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]
    pot_odds: float
    stack_to_pot: float
    strategy: str
    personality: str
    recent_actions: List[str] = field(default_factory=list)
    memory: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, object]:
        return asdict(self)


def build_context(
    engine: GameEngine,
    state: GameState,
    seat_idx: int,
    profile: StrategyProfile,
    memory: Optional[OpponentMemory] = None,
) -> DecisionContext:
    hand = state.hand
    if hand is None:
        raise ValueError("No hand in progress")
    seat = state.seats[seat_idx]
    window = engine.legal_actions(state, seat_idx)

    recent_actions: List[str] = []
    remembered: List[str] = []
    if memory is not None:
        history = memory.recent(seat_idx)
        recent_actions = [
            f"{entry.name}: {entry.action}{f' {entry.amount}' if entry.amount else ''}"
            for entry in history
            if entry.hand_number == hand.hand_number
        ]
        remembered = [entry.render() for entry in history if entry.hand_number != hand.hand_number]

    return DecisionContext(
        seat=seat.id,
        name=seat.name,
        hand_number=hand.hand_number,
        betting_round=hand.betting_round.value,
        hole_cards=cards_to_labels(seat.hole_cards),
        community=cards_to_labels(hand.community),
        burned=len(hand.burned),
        chips=seat.chips,
        seat_bet=seat.current_bet,
        current_bet=hand.current_bet,
        to_call=window.call_amount,
        pot=hand.pot,
        big_blind=hand.big_blind,
        position=engine.position_name(state, seat_idx),
        opponents_in_hand=sum(1 for other in state.seats if other.is_active and other.id != seat.id),
        legal=[action.value for action in window.legal],
        min_raise_to=window.min_raise_to,
        max_raise_to=window.max_raise_to,
        pot_odds=round(engine.pot_odds(state, seat_idx), 2),
        stack_to_pot=round(engine.stack_to_pot_ratio(state, seat_idx), 2),
        strategy=profile.describe(),
        personality=profile.personality_prompt(seat.name),
        recent_actions=recent_actions,
        memory=remembered,
    )


def render_prompt(ctx: DecisionContext) -> str:
    """Natural-language request handed to text-based decision providers."""
    community = " ".join(ctx.community) if ctx.community else "none yet"
    recent = "\n".join(ctx.recent_actions) if ctx.recent_actions else "none"
    remembered = "\n".join(ctx.memory) if ctx.memory else "none"
    if ctx.min_raise_to is not None:
        raise_line = f"Raise range (total bet): {ctx.min_raise_to} to {ctx.max_raise_to}"
    else:
        raise_line = "Raising is not available"
    pot_odds = f"{ctx.pot_odds:.2f}:1" if ctx.to_call else "n/a (nothing to call)"
    hole = " ".join(ctx.hole_cards)
    legal = ", ".join(ctx.legal)
    return f"""{ctx.personality}

Current game situation:
- Your hole cards: {hole}
- Community cards: {community}
- Cards burned this hand: {ctx.burned} (face down, unknown)
- Your chips: {ctx.chips:,}
- Current bet to call: {ctx.to_call:,}
- Pot size: {ctx.pot:,}
- Betting round: {ctx.betting_round}
- Hand number: {ctx.hand_number}
- Your position: {ctx.position}
- Opponents still in the hand: {ctx.opponents_in_hand}

Recent opponent actions this hand:
{recent}

Your memory of opponents from previous hands:
{remembered}

Pot odds: {pot_odds}
Stack to pot ratio: {ctx.stack_to_pot:.2f}

Available actions: {legal}
{raise_line}

Note: Burn cards are face down and unknown. Base your decisions on visible cards only.

Respond with a JSON object:
{{
  "action": "fold|check|call|raise|all-in",
  "amount": number (total bet, only for raise),
  "reasoning": "brief explanation of your decision"
}}

Your entire response must be valid JSON only."""
