from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, List, Optional

from holdem.events import Event, EventType
from holdem.models import GameState

DEFAULT_MEMORY_SIZE = 20


@dataclass(frozen=True)
class MemoryEntry:
    hand_number: int
    seat: int
    name: str
    action: str
    amount: int
    round: str

    def render(self) -> str:
        amount = f" {self.amount}" if self.amount else ""
        return f"Hand {self.hand_number} ({self.round}) - {self.name}: {self.action}{amount}"


class OpponentMemory:
    """Rolling record of what each computer seat has seen its opponents do.

    One bounded deque per (observer, opponent) pair; the oldest entry drops
    off once `max_entries` is reached. Entries are only ever appended.
    """

    def __init__(self, max_entries: int = DEFAULT_MEMORY_SIZE) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: Dict[int, Dict[int, Deque[MemoryEntry]]] = {}

    def observe(self, state: GameState, event: Event) -> None:
        if event.ev != EventType.ACTION_APPLIED:
            return
        data = event.data
        actor = int(data["seat"])
        entry = MemoryEntry(
            hand_number=state.hand.hand_number if state.hand else state.hand_number,
            seat=actor,
            name=str(data.get("name", f"Seat {actor}")),
            action=str(data["action"]),
            amount=int(data.get("amount") or 0),
            round=str(data.get("round", "")),
        )
        for seat in state.seats:
            if seat.is_human or seat.id == actor:
                continue
            self._record(seat.id, entry)

    def _record(self, observer: int, entry: MemoryEntry) -> None:
        per_observer = self._entries.setdefault(observer, {})
        history = per_observer.get(entry.seat)
        if history is None:
            history = deque(maxlen=self.max_entries)
            per_observer[entry.seat] = history
        history.append(entry)

    def recent(self, observer: int, opponent: Optional[int] = None, limit: Optional[int] = None) -> List[MemoryEntry]:
        per_observer = self._entries.get(observer, {})
        if opponent is not None:
            entries: Iterable[MemoryEntry] = per_observer.get(opponent, ())
            result = list(entries)
        else:
            result = [entry for history in per_observer.values() for entry in history]
            result.sort(key=lambda entry: entry.hand_number)
        if limit is not None:
            result = result[-limit:]
        return result

    def stats(self, observer: int, opponent: int) -> Dict[str, float]:
        history = self.recent(observer, opponent)
        if not history:
            return {"actions": 0, "aggression": 0.0, "fold_rate": 0.0, "call_rate": 0.0}
        counts = Counter(entry.action for entry in history)
        total = len(history)
        return {
            "actions": total,
            "aggression": (counts["raise"] + counts["all-in"]) / total,
            "fold_rate": counts["fold"] / total,
            "call_rate": counts["call"] / total,
        }
