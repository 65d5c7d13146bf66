"""Hold'em table engine shared by the tournament runner, the AI layer and the practice service."""

from .cards import RANKS, SUITS, Card, Deck, new_shuffled_deck, parse_cards, parse_label
from .errors import (
    DealingError,
    EmptyDeck,
    IllegalAction,
    InsufficientCards,
    InvariantViolation,
    PokerError,
    ProviderFailure,
)
from .evaluator import HandCategory, HandEvaluation, compare_hands, evaluate
from .events import Event, EventType, Transition
from .game import GameEngine
from .models import (
    ActionType,
    GamePhase,
    GameState,
    HandState,
    HandStatus,
    Phase,
    Pot,
    Seat,
    SeatActionWindow,
    SeatConfig,
    TableConfig,
)
from .pots import compute_side_pots

__all__ = [
    "RANKS",
    "SUITS",
    "Card",
    "Deck",
    "new_shuffled_deck",
    "parse_cards",
    "parse_label",
    "DealingError",
    "EmptyDeck",
    "IllegalAction",
    "InsufficientCards",
    "InvariantViolation",
    "PokerError",
    "ProviderFailure",
    "HandCategory",
    "HandEvaluation",
    "compare_hands",
    "evaluate",
    "Event",
    "EventType",
    "Transition",
    "GameEngine",
    "ActionType",
    "GamePhase",
    "GameState",
    "HandState",
    "HandStatus",
    "Phase",
    "Pot",
    "Seat",
    "SeatActionWindow",
    "SeatConfig",
    "TableConfig",
    "compute_side_pots",
]
