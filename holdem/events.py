from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple

from .models import GameState


class EventType(str, Enum):
    GAME_INITIALIZED = "GAME_INITIALIZED"
    HAND_INITIALIZED = "HAND_INITIALIZED"
    HAND_STARTED = "HAND_STARTED"
    ACTION_APPLIED = "ACTION_APPLIED"
    PHASE_ADVANCED = "PHASE_ADVANCED"
    SHOWDOWN_STARTED = "SHOWDOWN_STARTED"
    SHOWDOWN_COMPLETE = "SHOWDOWN_COMPLETE"
    HAND_ENDED_EARLY = "HAND_ENDED_EARLY"
    HAND_ABORTED = "HAND_ABORTED"
    GAME_OVER = "GAME_OVER"


TERMINAL_EVENTS = frozenset(
    {EventType.SHOWDOWN_COMPLETE, EventType.HAND_ENDED_EARLY, EventType.HAND_ABORTED, EventType.GAME_OVER}
)


@dataclass
class Event:
    ev: EventType
    data: Dict[str, object] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, object]:
        return {"ev": self.ev.value, **self.data}


class Transition(NamedTuple):
    """Result of every engine operation: the new state plus what happened."""

    state: GameState
    events: List[Event]
