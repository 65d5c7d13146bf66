from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from .cards import Card, Deck


class Phase(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"


BETTING_ROUNDS = (Phase.PREFLOP, Phase.FLOP, Phase.TURN, Phase.RIVER)
# Community cards revealed when moving into each street.
STREET_CARDS = {Phase.FLOP: 3, Phase.TURN: 1, Phase.RIVER: 1}


class GamePhase(str, Enum):
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class HandStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    SHOWDOWN = "showdown"
    EARLY_END = "early_end"
    ABORTED = "aborted"


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    ALL_IN = "all-in"

    @classmethod
    def parse(cls, value: object) -> "ActionType":
        if isinstance(value, ActionType):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown action {value!r}")
        normalized = value.strip().lower().replace("_", "-")
        if normalized in ("allin", "all in"):
            normalized = "all-in"
        if normalized in ("raise-to", "bet"):
            normalized = "raise"
        return cls(normalized)


@dataclass
class TableConfig:
    starting_stack: int = 60_000
    small_blind: int = 100
    big_blind: int = 200
    max_seats: int = 9
    max_actions_per_round: int = 50

    def __post_init__(self) -> None:
        if self.small_blind <= 0 or self.big_blind < self.small_blind:
            raise ValueError("Blinds must be positive and big blind >= small blind")
        if self.starting_stack <= 0:
            raise ValueError("Starting stack must be positive")
        if self.max_seats < 2:
            raise ValueError("A table needs at least two seats")


@dataclass
class SeatConfig:
    name: str
    is_human: bool = False
    # StrategyProfile for AI seats; the table itself never inspects it.
    profile: Any = None
    chips: Optional[int] = None


@dataclass
class Seat:
    id: int
    name: str
    is_human: bool
    chips: int
    profile: Any = None
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_contribution: int = 0
    is_active: bool = False
    is_all_in: bool = False
    has_acted: bool = False

    def reset_for_hand(self) -> None:
        self.hole_cards = []
        self.current_bet = 0
        self.total_contribution = 0
        self.is_active = self.chips > 0
        self.is_all_in = False
        self.has_acted = False

    def reset_for_round(self) -> None:
        self.current_bet = 0
        self.has_acted = False

    @property
    def can_act(self) -> bool:
        return self.is_active and not self.is_all_in


@dataclass
class Pot:
    amount: int
    eligible: List[int]


@dataclass
class SeatActionWindow:
    legal: List[ActionType]
    call_amount: int
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]


@dataclass
class LastAction:
    seat: int
    action: ActionType
    amount: int


@dataclass
class HandState:
    # All mutable info about one hand. Replaced wholesale when the next hand starts.
    hand_number: int
    deck: Deck
    button: int
    small_blind: int
    big_blind: int
    burned: List[Card] = field(default_factory=list)
    community: List[Card] = field(default_factory=list)
    pot: int = 0
    side_pots: List[Pot] = field(default_factory=list)
    current_bet: int = 0
    last_raise_size: int = 0
    to_act: Optional[int] = None
    betting_round: Phase = Phase.PREFLOP
    last_action: Optional[LastAction] = None
    action_count: int = 0
    round_action_count: int = 0
    status: HandStatus = HandStatus.IN_PROGRESS
    # Seats that already acted before a short all-in: they may call or fold, not raise.
    raise_closed: Set[int] = field(default_factory=set)
    results: List[Dict[str, object]] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.status != HandStatus.IN_PROGRESS


@dataclass
class GameState:
    config: TableConfig
    seats: List[Seat]
    button: int
    total_chips: int
    hand_number: int = 0
    phase: GamePhase = GamePhase.SETUP
    hand: Optional[HandState] = None

    def seat_by_id(self, seat_id: int) -> Seat:
        for seat in self.seats:
            if seat.id == seat_id:
                return seat
        raise KeyError(seat_id)

    def seats_with_chips(self) -> List[Seat]:
        return [seat for seat in self.seats if seat.chips > 0]
