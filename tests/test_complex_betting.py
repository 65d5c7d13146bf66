import pytest

from holdem.errors import IllegalAction
from holdem.events import EventType
from holdem.models import ActionType, Phase

from .helpers import check_down, create_engine, new_game, start_hand


def test_multiple_raises_update_min_raise():
    engine = create_engine()
    state = start_hand(engine, new_game(engine, 2, button=0))

    window = engine.legal_actions(state, 0)
    assert window.min_raise_to == 400
    state = engine.apply_action(state, 0, ActionType.RAISE).state
    assert state.hand.current_bet == 400
    assert state.hand.last_raise_size == 200

    window = engine.legal_actions(state, 1)
    assert window.min_raise_to == 600
    state = engine.apply_action(state, 1, ActionType.RAISE, 1_000).state
    assert state.hand.current_bet == 1_000
    assert state.hand.last_raise_size == 600
    assert engine.legal_actions(state, 0).min_raise_to == 1_600


def test_raise_amount_is_clamped_into_the_legal_range():
    engine = create_engine(starting_stack=5_000)
    state = start_hand(engine, new_game(engine, 3, button=0))

    low = engine.apply_action(state, 0, ActionType.RAISE, 250).state
    assert low.seats[0].current_bet == 400

    high = engine.apply_action(state, 0, ActionType.RAISE, 9_999).state
    assert high.seats[0].current_bet == 5_000
    assert high.seats[0].is_all_in


def test_full_raise_reopens_action_for_players_who_acted():
    engine = create_engine()
    state = start_hand(engine, new_game(engine, 3, button=0))
    state = engine.apply_action(state, 0, ActionType.CALL).state
    state = engine.apply_action(state, 1, ActionType.CALL).state
    state = engine.apply_action(state, 2, ActionType.RAISE, 800).state

    assert state.hand.betting_round == Phase.PREFLOP
    assert state.hand.to_act == 0
    assert not state.seats[0].has_acted
    assert ActionType.RAISE in engine.legal_actions(state, 0).legal


def test_short_all_in_does_not_reopen_raising():
    engine = create_engine()
    state = start_hand(engine, new_game(engine, 3, button=0, stacks=[60_000, 60_000, 500]))

    state = engine.apply_action(state, 0, ActionType.RAISE, 400).state
    state = engine.apply_action(state, 1, ActionType.CALL).state
    transition = engine.apply_action(state, 2, ActionType.ALL_IN)
    state = transition.state

    assert transition.events[0].data["description"] == "Player2 goes all-in for 300 (raises to 500)"
    assert state.hand.current_bet == 500
    assert state.hand.last_raise_size == 200
    assert state.hand.raise_closed == {0, 1}
    assert state.hand.to_act == 0

    window = engine.legal_actions(state, 0)
    assert window.legal == [ActionType.FOLD, ActionType.CALL]
    assert window.call_amount == 100
    with pytest.raises(IllegalAction) as excinfo:
        engine.apply_action(state, 0, ActionType.RAISE, 2_000)
    assert excinfo.value.code == "RAISE_CLOSED"
    with pytest.raises(IllegalAction):
        engine.apply_action(state, 0, ActionType.ALL_IN)

    state = engine.apply_action(state, 0, ActionType.CALL).state
    state = engine.apply_action(state, 1, ActionType.CALL).state
    assert state.hand.betting_round == Phase.FLOP
    assert state.hand.pot == 1_500
    assert not state.hand.raise_closed


def test_all_in_below_the_current_bet_counts_as_a_call():
    engine = create_engine()
    state = start_hand(engine, new_game(engine, 3, button=0, stacks=[60_000, 60_000, 1_000]))
    state = engine.apply_action(state, 0, ActionType.RAISE, 3_000).state
    state = engine.apply_action(state, 1, ActionType.FOLD).state

    window = engine.legal_actions(state, 2)
    assert ActionType.RAISE not in window.legal
    assert window.call_amount == 800

    transition = engine.apply_action(state, 2, ActionType.ALL_IN)
    assert transition.state.hand.current_bet == 3_000
    assert transition.events[0].data["description"] == "Player2 goes all-in for 800"
    # Seat 0 is the only one left who can act, so the board runs out.
    assert transition.events[-1].ev == EventType.SHOWDOWN_COMPLETE


def test_raise_below_minimum_without_chips_is_rejected():
    engine = create_engine()
    state = start_hand(engine, new_game(engine, 3, button=0, stacks=[300, 60_000, 60_000]))
    window = engine.legal_actions(state, 0)
    assert ActionType.RAISE not in window.legal
    assert ActionType.ALL_IN in window.legal
    with pytest.raises(IllegalAction) as excinfo:
        engine.apply_action(state, 0, ActionType.RAISE, 400)
    assert excinfo.value.code == "RAISE_BELOW_MINIMUM"


def test_round_completes_only_after_everyone_acts_since_last_raise():
    engine = create_engine()
    state = start_hand(engine, new_game(engine, 4, button=0))
    assert not engine.is_betting_round_complete(state)

    state = engine.apply_action(state, 3, ActionType.CALL).state
    state = engine.apply_action(state, 0, ActionType.CALL).state
    state = engine.apply_action(state, 1, ActionType.CALL).state
    assert not engine.is_betting_round_complete(state)
    assert state.hand.to_act == 2

    state = engine.apply_action(state, 2, ActionType.CHECK).state
    assert state.hand.betting_round == Phase.FLOP
    assert state.hand.to_act == 1

    state = engine.apply_action(state, 1, ActionType.CHECK).state
    state = engine.apply_action(state, 2, ActionType.RAISE, 600).state
    for seat_idx in (3, 0, 1):
        assert state.hand.betting_round == Phase.FLOP
        state = engine.apply_action(state, seat_idx, ActionType.CALL).state
    assert state.hand.betting_round == Phase.TURN
    assert state.hand.pot == 800 + 4 * 600


def test_pot_conservation_through_a_multiway_hand():
    engine = create_engine(starting_stack=2_000)
    state = start_hand(engine, new_game(engine, 4, button=0, stacks=[500, 1_200, 2_000, 2_000]))
    contributed_before = state.total_chips
    state = engine.apply_action(state, 3, ActionType.RAISE, 1_500).state
    state = engine.apply_action(state, 0, ActionType.ALL_IN).state
    state = engine.apply_action(state, 1, ActionType.ALL_IN).state
    state = engine.apply_action(state, 2, ActionType.CALL).state
    state = check_down(engine, state)

    assert state.hand.is_complete
    assert sum(seat.chips for seat in state.seats) == contributed_before
    awarded = sum(result["amount"] for result in state.hand.results)
    assert awarded == 500 + 1_200 + 1_500 + 1_500
