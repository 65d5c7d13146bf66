from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence

from holdem.cards import Deck, full_deck, parse_cards, parse_label
from holdem.events import Event, EventType
from holdem.game import GameEngine
from holdem.models import ActionType, GameState, SeatConfig, TableConfig


def create_engine(
    *,
    starting_stack: int = 60_000,
    sb: int = 100,
    bb: int = 200,
    max_actions_per_round: int = 50,
    seed: int = 42,
) -> GameEngine:
    """Instantiate a game engine with a seeded shuffle."""
    config = TableConfig(
        starting_stack=starting_stack,
        small_blind=sb,
        big_blind=bb,
        max_actions_per_round=max_actions_per_round,
    )
    return GameEngine(config, rng=random.Random(seed))


def seat_configs(count: int, stacks: Optional[Sequence[Optional[int]]] = None) -> List[SeatConfig]:
    stacks = list(stacks) if stacks is not None else [None] * count
    return [SeatConfig(name=f"Player{idx}", chips=stacks[idx]) for idx in range(count)]


def new_game(engine: GameEngine, count: int, *, button: int = 0, stacks=None) -> GameState:
    return engine.initialize_game(seat_configs(count, stacks), button=button).state


def start_hand(engine: GameEngine, state: GameState) -> GameState:
    return engine.start_new_hand(state).state


def stacked_deck(holes: Sequence[Sequence[str]], board: Sequence[str]) -> Deck:
    """Deck that deals `holes` (in dealing order, left of the button first) and `board`.

    Burn cards are taken from the unused remainder.
    """
    used = parse_cards([label for pair in holes for label in pair] + list(board))
    spare = [card for card in full_deck() if card not in used]
    community = parse_cards(board)
    order = [spare.pop()]
    order += [parse_label(pair[0]) for pair in holes]
    order += [parse_label(pair[1]) for pair in holes]
    order += [spare.pop()] + community[:3]
    order += [spare.pop()] + community[3:4]
    order += [spare.pop()] + community[4:5]
    return Deck(order + spare)


def stack_deck(monkeypatch, holes: Sequence[Sequence[str]], board: Sequence[str]) -> None:
    monkeypatch.setattr("holdem.game.new_shuffled_deck", lambda rng=None: stacked_deck(holes, board))


def check_down(engine: GameEngine, state: GameState, events: Optional[List[Event]] = None) -> GameState:
    """Advance the current hand with check/call until it completes."""
    while not state.hand.is_complete:
        actor = state.hand.to_act
        legal = engine.legal_actions(state, actor).legal
        action = ActionType.CHECK if ActionType.CHECK in legal else ActionType.CALL
        transition = engine.apply_action(state, actor, action)
        state = transition.state
        if events is not None:
            events.extend(transition.events)
    return state


def perform_actions(engine: GameEngine, state: GameState, actions: Iterable) -> GameState:
    """Apply a scripted sequence of (seat, action, amount)."""
    for seat_idx, action, amount in actions:
        state = engine.apply_action(state, seat_idx, action, amount).state
    return state


def event_types(events: Iterable[Event]) -> List[EventType]:
    return [event.ev for event in events]
