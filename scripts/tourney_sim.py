#!/usr/bin/env python3
"""Run all-AI tournaments in-process and check that no chips appear or vanish.

Every seat gets a random preset profile. Optionally point the AI seats at a
decision service (for example `python -m practice.server`) to exercise the
provider path; failures there fall back to the rule-based model.

Example:
    python scripts/tourney_sim.py --players 6 --hands 200 --tournaments 5
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from typing import Optional

from ai.engine import DecisionConfig, DecisionEngine
from ai.provider import WebSocketDecisionProvider
from holdem.errors import InvariantViolation
from holdem.events import Event, EventType
from holdem.game import GameEngine
from holdem.models import GameState, SeatConfig, TableConfig
from tournament.runner import TournamentRunner

LOGGER = logging.getLogger("tourney_sim")


class ChipAudit:
    """Listener that re-counts every chip after each completed hand."""

    def __init__(self) -> None:
        self.hands = 0
        self.showdowns = 0
        self.early_ends = 0

    def __call__(self, event: Event, state: GameState) -> None:
        if event.ev == EventType.SHOWDOWN_COMPLETE:
            self.showdowns += 1
        elif event.ev == EventType.HAND_ENDED_EARLY:
            self.early_ends += 1
        else:
            return
        self.hands += 1
        on_table = sum(seat.chips for seat in state.seats)
        if on_table != state.total_chips:
            raise InvariantViolation(f"Hand {state.hand_number}: {on_table} chips on table, expected {state.total_chips}")


async def run_tournament(args: argparse.Namespace, index: int) -> Optional[str]:
    seed = args.seed + index
    rng = random.Random(seed)
    config = TableConfig(starting_stack=args.starting_stack, small_blind=args.sb, big_blind=args.bb)
    engine = GameEngine(config, rng=random.Random(seed))
    provider = WebSocketDecisionProvider(args.provider_url) if args.provider_url else None
    decisions = DecisionEngine(
        engine,
        provider=provider,
        config=DecisionConfig(provider_timeout=args.provider_timeout),
        rng=random.Random(seed + 1),
    )
    runner = TournamentRunner(engine, decisions, rng=rng)
    audit = ChipAudit()
    runner.subscribe(audit)

    seats = [SeatConfig(name=f"SimBot{i}", profile="RANDOM") for i in range(args.players)]
    state = await runner.setup(seats, button=rng.randrange(args.players))
    starting_total = state.total_chips
    state = await runner.run(max_hands=args.hands)

    final_total = sum(seat.chips for seat in state.seats)
    if final_total != starting_total:
        raise InvariantViolation(f"Tournament {index}: started with {starting_total} chips, ended with {final_total}")

    LOGGER.info(
        "Tournament %d: %d hands (%d showdowns, %d uncontested), winner %s",
        index,
        audit.hands,
        audit.showdowns,
        audit.early_ends,
        runner.winner() or "none yet",
    )
    for name, chips in runner.standings():
        LOGGER.info("  %-10s %8d", name, chips)
    return runner.winner()


async def run_simulation(args: argparse.Namespace) -> None:
    winners = {}
    for index in range(args.tournaments):
        winner = await run_tournament(args, index)
        if winner:
            winners[winner] = winners.get(winner, 0) + 1
    LOGGER.info("Finished %d tournaments; wins by seat: %s", args.tournaments, winners or "none")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate all-AI hold'em tournaments")
    parser.add_argument("--players", type=int, default=6)
    parser.add_argument("--hands", type=int, default=500, help="hand limit per tournament")
    parser.add_argument("--tournaments", type=int, default=1)
    parser.add_argument("--starting-stack", type=int, default=60_000)
    parser.add_argument("--sb", type=int, default=100)
    parser.add_argument("--bb", type=int, default=200)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--provider-url", default=None)
    parser.add_argument("--provider-timeout", type=float, default=10.0)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        asyncio.run(run_simulation(args))
    except KeyboardInterrupt:
        LOGGER.info("Simulation interrupted; shutting down")


if __name__ == "__main__":
    main()
