from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from holdem.errors import IllegalAction, ProviderFailure
from holdem.events import Event
from holdem.game import GameEngine
from holdem.models import ActionType, GameState, SeatActionWindow

from .context import DecisionContext, build_context, render_prompt
from .memory import DEFAULT_MEMORY_SIZE, OpponentMemory
from .profiles import StrategyProfile
from .provider import DecisionProvider
from .rules import Decision, RuleBasedStrategy, clamp_raise, safe_fallback

LOGGER = logging.getLogger("ai.decisions")


@dataclass
class DecisionConfig:
    provider_timeout: float = 10.0
    provider_retries: int = 1
    memory_size: int = DEFAULT_MEMORY_SIZE

    def __post_init__(self) -> None:
        if self.provider_timeout <= 0:
            raise ValueError("provider_timeout must be positive")
        if not 0 <= self.provider_retries <= 1:
            raise ValueError("provider_retries must be 0 or 1")


class DecisionEngine:
    """Chooses actions for computer seats.

    When a provider is configured it is asked first, with each attempt bounded
    by `provider_timeout`. Any timeout, transport error, malformed reply or
    illegal answer is logged and the rule-based model decides instead. The
    returned decision is always legal for the seat at the moment of the call.
    """

    def __init__(
        self,
        game: GameEngine,
        provider: Optional[DecisionProvider] = None,
        config: Optional[DecisionConfig] = None,
        rng: Optional[random.Random] = None,
        memory: Optional[OpponentMemory] = None,
    ) -> None:
        self.game = game
        self.provider = provider
        self.config = config or DecisionConfig()
        self.rng = rng or random.Random()
        self.rules = RuleBasedStrategy(self.rng)
        self.memory = memory or OpponentMemory(self.config.memory_size)

    def observe(self, state: GameState, event: Event) -> None:
        self.memory.observe(state, event)

    async def decide(self, state: GameState, seat_idx: int, profile: Any = None) -> Decision:
        seat = state.seats[seat_idx]
        window = self.game.legal_actions(state, seat_idx)
        if not window.legal:
            raise IllegalAction("OUT_OF_TURN", f"Seat {seat_idx} has no decision to make")
        profile = StrategyProfile.from_value(profile if profile is not None else seat.profile, self.rng)
        ctx = build_context(self.game, state, seat_idx, profile, self.memory)

        decision: Optional[Decision] = None
        if self.provider is not None:
            decision = await self._ask_provider(ctx, window)
        if decision is None:
            decision = self.rules.decide(ctx, profile)

        decision = self._validate(decision, window, seat.name)
        LOGGER.debug(
            "%s (%s) decides %s %s: %s",
            seat.name,
            decision.source,
            decision.action.value,
            decision.amount,
            decision.reasoning,
        )
        return decision

    async def _ask_provider(self, ctx: DecisionContext, window: SeatActionWindow) -> Optional[Decision]:
        assert self.provider is not None
        payload: Dict[str, Any] = {"context": ctx.to_payload(), "prompt": render_prompt(ctx)}
        attempts = 1 + self.config.provider_retries
        for attempt in range(1, attempts + 1):
            try:
                reply = await asyncio.wait_for(
                    self.provider.request_decision(payload), timeout=self.config.provider_timeout
                )
                return self._from_reply(reply, window)
            except asyncio.TimeoutError:
                LOGGER.warning(
                    "Provider %s timed out after %.1fs for %s (attempt %d/%d)",
                    self.provider.name,
                    self.config.provider_timeout,
                    ctx.name,
                    attempt,
                    attempts,
                )
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning(
                    "Provider %s failed for %s (attempt %d/%d): %s",
                    self.provider.name,
                    ctx.name,
                    attempt,
                    attempts,
                    exc,
                )
        LOGGER.warning("Falling back to rule-based decision for %s", ctx.name)
        return None

    def _from_reply(self, reply: Dict[str, Any], window: SeatActionWindow) -> Decision:
        if not isinstance(reply, dict):
            raise ProviderFailure("Provider reply must be a mapping")
        try:
            action = ActionType.parse(reply.get("action"))
        except ValueError as exc:
            raise ProviderFailure(f"Provider chose an unknown action {reply.get('action')!r}") from exc
        if action not in window.legal:
            raise ProviderFailure(f"Provider chose illegal action {action.value}")
        amount = reply.get("amount")
        if action == ActionType.RAISE:
            if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int)):
                raise ProviderFailure(f"Provider raise amount {amount!r} is not an integer")
            amount = clamp_raise(amount if amount is not None else 0, window.min_raise_to, window.max_raise_to)
        else:
            amount = None
        return Decision(action, amount, str(reply.get("reasoning") or ""), source="provider")

    def _validate(self, decision: Decision, window: SeatActionWindow, name: str) -> Decision:
        if decision.action not in window.legal:
            LOGGER.warning("%s picked illegal %s; substituting a safe action", name, decision.action.value)
            return replace(safe_fallback(window.legal), source=decision.source)
        if decision.action == ActionType.RAISE:
            amount = decision.amount if decision.amount is not None else window.min_raise_to
            return replace(decision, amount=clamp_raise(amount, window.min_raise_to, window.max_raise_to))
        return replace(decision, amount=None)
