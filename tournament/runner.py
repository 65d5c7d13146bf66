from __future__ import annotations

import inspect
import logging
import random
from dataclasses import replace
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from ai.engine import DecisionEngine
from ai.profiles import StrategyProfile
from holdem.errors import DealingError, IllegalAction, InvariantViolation
from holdem.events import Event, Transition
from holdem.game import GameEngine
from holdem.models import GamePhase, GameState, SeatActionWindow, SeatConfig

LOGGER = logging.getLogger("tournament")

# TournamentRunner owns the only live GameState. The engine computes new
# states; the runner swaps them in one at a time and hands the resulting events
# to subscribers before anything else happens.

Listener = Callable[[Event, GameState], Union[None, Awaitable[None]]]
HumanInput = Callable[[GameState, int, SeatActionWindow], Awaitable[Tuple[object, Optional[int]]]]


class TournamentRunner:
    def __init__(
        self,
        engine: GameEngine,
        decisions: DecisionEngine,
        human_input: Optional[HumanInput] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.engine = engine
        self.decisions = decisions
        self.human_input = human_input
        self.rng = rng or random.Random()
        self.state: Optional[GameState] = None
        self.listeners: List[Listener] = []
        self.processing = False
        self.aborted = False

    # Subscribers -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    async def _dispatch(self, events: Sequence[Event]) -> None:
        assert self.state is not None
        for event in events:
            self.decisions.observe(self.state, event)
            for listener in list(self.listeners):
                try:
                    result = listener(event, self.state)
                    if inspect.isawaitable(result):
                        await result
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("Listener failed on %s: %s", event.ev.value, exc)

    async def _commit(self, transition: Transition) -> List[Event]:
        self.state = transition.state
        await self._dispatch(transition.events)
        return transition.events

    # Game flow -------------------------------------------------------

    async def setup(self, seat_configs: Sequence[SeatConfig], button: Optional[int] = None) -> GameState:
        # Profiles are resolved once, here; the engine treats them as opaque.
        resolved = [
            config if config.is_human else replace(config, profile=StrategyProfile.from_value(config.profile, self.rng))
            for config in seat_configs
        ]
        humans = sum(1 for config in resolved if config.is_human)
        if humans and self.human_input is None:
            LOGGER.warning("No human input configured; %d human seat(s) will be played by the rule engine", humans)
        self.aborted = False
        await self._commit(self.engine.initialize_game(resolved, button))
        assert self.state is not None
        return self.state

    async def run(self, max_hands: Optional[int] = None) -> GameState:
        if self.state is None:
            raise RuntimeError("Call setup() before run()")
        played = 0
        while not self.aborted and self.state.phase != GamePhase.GAME_OVER:
            if max_hands is not None and played >= max_hands:
                LOGGER.info("Stopping after %d hands", played)
                break
            await self.play_hand()
            played += 1
        return self.state

    async def play_hand(self) -> GameState:
        assert self.state is not None
        try:
            await self._commit(self.engine.start_new_hand(self.state))
        except DealingError as exc:
            await self.abort_hand(f"dealing failed: {exc}")
            raise
        if self.state.phase == GamePhase.GAME_OVER:
            return self.state

        while not self.aborted:
            hand = self.state.hand
            assert hand is not None
            if hand.is_complete:
                break
            seat_idx = hand.to_act
            if seat_idx is None:
                raise InvariantViolation(f"Hand {hand.hand_number} is waiting on nobody")
            try:
                await self._take_turn(seat_idx)
            except DealingError as exc:
                await self.abort_hand(f"dealing failed: {exc}")
                raise
        return self.state

    async def _take_turn(self, seat_idx: int) -> None:
        assert self.state is not None
        seat = self.state.seats[seat_idx]
        if seat.is_human and self.human_input is not None:
            await self._human_turn(seat_idx)
            return

        # The flag covers the whole turn, provider round trip included.
        self.processing = True
        try:
            decision = await self.decisions.decide(self.state, seat_idx, seat.profile)
            if self.aborted:
                return
            await self._apply(seat_idx, decision.action, decision.amount)
        finally:
            self.processing = False

    def _awaiting(self, seat_idx: int) -> bool:
        assert self.state is not None
        hand = self.state.hand
        return not self.aborted and hand is not None and not hand.is_complete and hand.to_act == seat_idx

    async def _human_turn(self, seat_idx: int) -> None:
        assert self.state is not None and self.human_input is not None
        while self._awaiting(seat_idx):
            window = self.engine.legal_actions(self.state, seat_idx)
            action, amount = await self.human_input(self.state, seat_idx, window)
            # The seat may already have acted through submit_action while we waited.
            if not self._awaiting(seat_idx):
                return
            try:
                await self.submit_action(seat_idx, action, amount)
                return
            except IllegalAction as exc:
                LOGGER.info("Rejected %s from seat %d (%s): %s", action, seat_idx, exc.code, exc.msg)

    async def submit_action(self, seat_idx: int, action: object, amount: Optional[int] = None) -> List[Event]:
        """Apply one action. Rejected with ACTION_IN_FLIGHT while another is being applied."""
        if self.state is None:
            raise IllegalAction("HAND_NOT_ACTIVE", "Tournament has not been set up")
        if self.processing:
            raise IllegalAction("ACTION_IN_FLIGHT", "Another action is still being processed")
        self.processing = True
        try:
            return await self._apply(seat_idx, action, amount)
        finally:
            self.processing = False

    async def _apply(self, seat_idx: int, action: object, amount: Optional[int]) -> List[Event]:
        assert self.state is not None
        return await self._commit(self.engine.apply_action(self.state, seat_idx, action, amount))

    async def abort_hand(self, reason: str) -> List[Event]:
        if self.state is None:
            return []
        return await self._commit(self.engine.abort_hand(self.state, reason))

    async def abort(self, reason: str = "tournament aborted") -> None:
        """Stop requesting turns. Chips already moved stay where they are."""
        self.aborted = True
        await self.abort_hand(reason)

    # Inspection ------------------------------------------------------

    def standings(self) -> List[Tuple[str, int]]:
        if self.state is None:
            return []
        return sorted(((seat.name, seat.chips) for seat in self.state.seats), key=lambda item: -item[1])

    def winner(self) -> Optional[str]:
        if self.state is None or self.state.phase != GamePhase.GAME_OVER:
            return None
        remaining = self.state.seats_with_chips()
        return remaining[0].name if len(remaining) == 1 else None
