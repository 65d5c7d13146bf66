import asyncio
import logging
import random

import pytest

from ai.engine import DecisionConfig, DecisionEngine
from ai.profiles import PRESETS
from ai.provider import DecisionProvider
from holdem.cards import Deck, parse_cards
from holdem.errors import IllegalAction, InsufficientCards
from holdem.events import TERMINAL_EVENTS, EventType
from holdem.models import GamePhase, HandStatus, SeatConfig
from tournament.__main__ import build_seats
from tournament.runner import TournamentRunner

from .helpers import create_engine, seat_configs


def _runner(human_input=None, provider=None, seed=1, timeout=10.0):
    engine = create_engine(seed=seed)
    decisions = DecisionEngine(
        engine, provider, DecisionConfig(provider_timeout=timeout), rng=random.Random(seed)
    )
    return TournamentRunner(engine, decisions, human_input=human_input, rng=random.Random(seed))


def _hero_table():
    return [
        SeatConfig(name="Hero", is_human=True),
        SeatConfig(name="Bot1", profile="NIT"),
        SeatConfig(name="Bot2", profile="ROCK"),
    ]


def test_listeners_see_every_event_in_order(caplog):
    runner = _runner()
    seen = []
    awaited = []

    async def async_listener(event, state):
        awaited.append(event.ev)

    def broken(event, state):
        raise RuntimeError("boom")

    runner.subscribe(lambda event, state: seen.append(event.ev))
    runner.subscribe(broken)
    unsubscribe = runner.subscribe(async_listener)

    async def play():
        await runner.setup(seat_configs(3), button=0)
        await runner.play_hand()
        unsubscribe()
        await runner.play_hand()

    with caplog.at_level(logging.ERROR, logger="tournament"):
        asyncio.run(play())

    assert seen[0] == EventType.GAME_INITIALIZED
    assert seen[1:3] == [EventType.HAND_INITIALIZED, EventType.HAND_STARTED]
    assert seen.count(EventType.HAND_STARTED) == 2
    second_start = seen.index(EventType.HAND_INITIALIZED, 2)
    assert any(ev in TERMINAL_EVENTS for ev in seen[2:second_start])
    assert awaited.count(EventType.HAND_STARTED) == 1
    assert "Listener failed" in caplog.text
    assert runner.state.hand_number == 2


def test_setup_resolves_profiles_and_warns_about_unattended_humans(caplog):
    runner = _runner()
    seats = [
        SeatConfig(name="Hero", is_human=True),
        SeatConfig(name="Old", profile="tight"),
        SeatConfig(name="Default"),
    ]
    with caplog.at_level(logging.WARNING, logger="tournament"):
        state = asyncio.run(runner.setup(seats))

    assert state.seats[0].profile is None
    assert state.seats[1].profile is PRESETS["ROCK"]
    assert state.seats[2].profile is PRESETS["SHARK"]
    assert "No human input configured" in caplog.text


def test_run_requires_setup():
    with pytest.raises(RuntimeError):
        asyncio.run(_runner().run())


def test_run_stops_after_hand_limit():
    runner = _runner(seed=4)

    async def play():
        await runner.setup(seat_configs(4), button=2)
        return await runner.run(max_hands=3)

    state = asyncio.run(play())
    assert state.hand_number == 3
    assert state.hand.is_complete
    assert sum(seat.chips for seat in state.seats) == state.total_chips == 240_000
    assert [name for name, _ in runner.standings()][0] in {f"Player{idx}" for idx in range(4)}
    assert runner.winner() is None


def test_human_is_reprompted_after_illegal_action():
    prompts = []

    async def human(state, seat_idx, window):
        prompts.append(window)
        if len(prompts) == 1:
            return "check", None
        return "fold", None

    runner = _runner(human_input=human)

    async def play():
        await runner.setup(_hero_table(), button=0)
        return await runner.play_hand()

    state = asyncio.run(play())
    assert len(prompts) == 2
    assert prompts[0].call_amount == 200
    assert state.hand.is_complete
    assert state.seats[0].chips == 60_000
    assert not state.seats[0].is_active


def test_human_action_submitted_directly_ends_the_prompt():
    prompts = []

    async def human(state, seat_idx, window):
        prompts.append(list(window.legal))
        await runner.submit_action(seat_idx, "fold")
        return "fold", None

    runner = _runner(human_input=human)

    async def play():
        await runner.setup(_hero_table(), button=0)
        return await asyncio.wait_for(runner.play_hand(), timeout=5)

    state = asyncio.run(play())
    assert len(prompts) == 1
    assert state.hand.is_complete
    assert state.seats[0].chips == 60_000
    assert not state.seats[0].is_active
    assert not runner.processing


def test_concurrent_submission_is_rejected_while_a_decision_is_in_flight():
    class ImpatientProvider(DecisionProvider):
        name = "impatient"

        def __init__(self):
            self.codes = []

        async def request_decision(self, payload):
            try:
                await runner.submit_action(payload["context"]["seat"], "fold")
            except IllegalAction as exc:
                self.codes.append(exc.code)
            return {"action": "fold", "amount": None, "reasoning": "done waiting"}

    provider = ImpatientProvider()
    runner = _runner(provider=provider)

    async def play():
        await runner.setup(seat_configs(2), button=0)
        return await runner.play_hand()

    state = asyncio.run(play())
    assert provider.codes == ["ACTION_IN_FLIGHT"]
    assert state.hand.status == HandStatus.EARLY_END
    assert not runner.processing


def test_submit_action_applies_when_idle():
    runner = _runner()

    async def play():
        await runner.setup(seat_configs(2), button=0)
        runner.state = runner.engine.start_new_hand(runner.state).state
        return await runner.submit_action(0, "call")

    events = asyncio.run(play())
    assert events[0].ev == EventType.ACTION_APPLIED
    assert runner.state.hand.to_act == 1

    runner.processing = True
    with pytest.raises(IllegalAction) as excinfo:
        asyncio.run(runner.submit_action(1, "check"))
    assert excinfo.value.code == "ACTION_IN_FLIGHT"


def test_abort_stops_turns_and_keeps_the_snapshot():
    seen = []

    async def human(state, seat_idx, window):
        await runner.abort("table closed")
        return "call", None

    runner = _runner(human_input=human)
    runner.subscribe(lambda event, state: seen.append(event))

    async def play():
        await runner.setup(_hero_table(), button=0)
        return await runner.run()

    state = asyncio.run(play())
    assert seen[-1].ev == EventType.HAND_ABORTED
    assert seen[-1].data["reason"] == "table closed"
    assert state.hand.status == HandStatus.ABORTED
    assert state.hand_number == 1
    assert [seat.chips for seat in state.seats] == [60_000, 59_900, 59_800]
    assert state.hand.pot == 300


def test_dealing_failure_aborts_the_hand_and_propagates(monkeypatch):
    monkeypatch.setattr("holdem.game.new_shuffled_deck", lambda rng=None: Deck(parse_cards(["Ah", "Kd"])))
    runner = _runner()

    async def play():
        await runner.setup(seat_configs(2), button=0)
        await runner.play_hand()

    with pytest.raises(InsufficientCards):
        asyncio.run(play())


def test_slow_provider_never_stalls_the_hand():
    class SlowProvider(DecisionProvider):
        name = "slow"

        async def request_decision(self, payload):
            await asyncio.sleep(1)
            return {"action": "fold"}

    runner = _runner(provider=SlowProvider(), timeout=0.005)

    async def play():
        await runner.setup(seat_configs(2), button=0)
        return await runner.play_hand()

    state = asyncio.run(play())
    assert state.hand.is_complete
    assert sum(seat.chips for seat in state.seats) == 120_000


def test_tournament_plays_to_a_single_winner():
    engine = create_engine(starting_stack=1_000, sb=100, bb=200, seed=21)
    runner = TournamentRunner(engine, DecisionEngine(engine, rng=random.Random(22)), rng=random.Random(23))
    seats = [SeatConfig(name="Maniac", profile="MANIAC"), SeatConfig(name="Gambler", profile="GAMBLER")]

    async def play():
        await runner.setup(seats)
        return await runner.run(max_hands=2_000)

    state = asyncio.run(play())
    assert state.phase == GamePhase.GAME_OVER
    assert runner.winner() in {"Maniac", "Gambler"}
    assert runner.standings()[0] == (runner.winner(), 2_000)


def test_build_seats_for_the_console():
    seats = build_seats(4, "Hero", random.Random(1))
    assert seats[0].name == "Hero" and seats[0].is_human
    assert len(seats) == 4
    assert all(seat.profile in PRESETS for seat in seats[1:])
