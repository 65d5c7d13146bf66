import argparse
import asyncio
import logging
import random
from typing import List, Optional, Tuple

from ai.engine import DecisionConfig, DecisionEngine
from ai.profiles import PRESETS
from ai.provider import WebSocketDecisionProvider
from holdem.cards import format_cards
from holdem.events import Event, EventType
from holdem.game import GameEngine
from holdem.models import GameState, SeatActionWindow, SeatConfig, TableConfig
from .runner import TournamentRunner

logging.basicConfig(level=logging.INFO)

LOGGER = logging.getLogger("tournament")


async def console_human(state: GameState, seat_idx: int, window: SeatActionWindow) -> Tuple[str, Optional[int]]:
    """Ask the person at the keyboard for an action, e.g. `call` or `raise 1200`."""
    seat = state.seats[seat_idx]
    hand = state.hand
    assert hand is not None
    print(
        f"\n[{hand.betting_round.value}] board: {format_cards(hand.community) or '-'} | pot {hand.pot} | "
        f"you: {format_cards(seat.hole_cards)} chips {seat.chips} | to call {window.call_amount}"
    )
    options = ", ".join(action.value for action in window.legal)
    if window.min_raise_to is not None:
        options += f" (raise {window.min_raise_to}-{window.max_raise_to})"
    line = await asyncio.to_thread(input, f"{options} > ")
    parts = line.strip().split()
    if not parts:
        return "", None
    amount: Optional[int] = None
    if len(parts) > 1:
        try:
            amount = int(parts[1])
        except ValueError:
            print("Amount must be a whole number")
            return "", None
    return parts[0], amount


def log_event(event: Event, state: GameState) -> None:
    data = event.data
    if event.ev == EventType.ACTION_APPLIED:
        LOGGER.info("%s", data["description"])
    elif event.ev == EventType.PHASE_ADVANCED:
        LOGGER.info("--- %s: %s", data["round"], " ".join(data["community"]))
    elif event.ev == EventType.HAND_STARTED:
        LOGGER.info(
            "=== Hand %s (button %s, blinds %s/%s)",
            data["hand_number"],
            state.seats[data["button"]].name,
            data["small_blind"]["amount"],
            data["big_blind"]["amount"],
        )
    elif event.ev == EventType.GAME_OVER:
        LOGGER.info("Game over. Winner: %s", data["name"] or "none")


def build_seats(players: int, human: Optional[str], rng: random.Random) -> List[SeatConfig]:
    seats: List[SeatConfig] = []
    if human:
        seats.append(SeatConfig(name=human, is_human=True))
    presets = sorted(PRESETS)
    while len(seats) < players:
        key = presets[rng.randrange(len(presets))]
        seats.append(SeatConfig(name=f"{PRESETS[key].name} {len(seats)}", profile=key))
    return seats


def main() -> None:
    parser = argparse.ArgumentParser(description="No-limit hold'em tournament")
    parser.add_argument("--players", type=int, default=6)
    parser.add_argument("--starting-stack", type=int, default=60_000)
    parser.add_argument("--sb", type=int, default=100)
    parser.add_argument("--bb", type=int, default=200)
    parser.add_argument("--hands", type=int, default=None, help="Stop after this many hands")
    parser.add_argument("--seed", type=int, default=None, help="Seed shuffles and AI rolls")
    parser.add_argument("--provider-url", default=None, help="ws:// URL of an external decision service")
    parser.add_argument("--provider-timeout", type=float, default=10.0, help="Seconds per provider attempt")
    parser.add_argument("--human", default=None, help="Take a seat under this name and play from the console")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    config = TableConfig(starting_stack=args.starting_stack, small_blind=args.sb, big_blind=args.bb)
    engine = GameEngine(config, rng=rng)
    provider = WebSocketDecisionProvider(args.provider_url) if args.provider_url else None
    decisions = DecisionEngine(engine, provider, DecisionConfig(provider_timeout=args.provider_timeout), rng=rng)
    runner = TournamentRunner(engine, decisions, human_input=console_human if args.human else None, rng=rng)
    runner.subscribe(log_event)

    async def play() -> None:
        await runner.setup(build_seats(args.players, args.human, rng))
        await runner.run(max_hands=args.hands)

    try:
        asyncio.run(play())
    except KeyboardInterrupt:
        LOGGER.info("Interrupted")
    for name, chips in runner.standings():
        LOGGER.info("%-24s %d", name, chips)


if __name__ == "__main__":
    main()
