import itertools
import random

import pytest

from holdem.cards import full_deck, parse_cards
from holdem.evaluator import (
    CATEGORY_BAND,
    FLUSH_DRAW_BONUS,
    STRAIGHT_DRAW_BONUS,
    HandCategory,
    best_five,
    compare_hands,
    describe_category,
    evaluate,
)


def _eval(hole, board):
    return evaluate(parse_cards(hole), parse_cards(board))


def test_evaluate_identifies_all_hand_categories():
    cases = [
        (HandCategory.STRAIGHT_FLUSH, ["Ah", "Kh", "Qh", "Jh", "Th"]),
        (HandCategory.FOUR_OF_A_KIND, ["As", "Ah", "Ad", "Ac", "Kd"]),
        (HandCategory.FULL_HOUSE, ["Qc", "Qd", "Qs", "9h", "9s"]),
        (HandCategory.FLUSH, ["Ah", "Jh", "9h", "6h", "2h"]),
        (HandCategory.STRAIGHT, ["9h", "8d", "7c", "6s", "5h"]),
        (HandCategory.THREE_OF_A_KIND, ["8h", "8d", "8s", "Qd", "Js"]),
        (HandCategory.TWO_PAIR, ["7h", "7d", "4s", "4c", "As"]),
        (HandCategory.PAIR, ["6h", "6s", "Qh", "8d", "4c"]),
        (HandCategory.HIGH_CARD, ["As", "Kd", "Jh", "9c", "4d"]),
    ]

    for expected, labels in cases:
        evaluation = _eval(labels[:2], labels[2:] + ["2c", "3d"])
        assert evaluation.category == expected, f"labels={labels}"
        assert expected * CATEGORY_BAND <= evaluation.strength < (expected + 1) * CATEGORY_BAND


def test_wheel_is_the_lowest_straight():
    wheel = _eval(["Ah", "2d"], ["3c", "4s", "5h", "9d", "Kd"])
    six_high = _eval(["6h", "2d"], ["3c", "4s", "5h", "9d", "Kd"])
    assert wheel.category == HandCategory.STRAIGHT
    assert wheel.description == "Straight, Five high"
    assert compare_hands(six_high, wheel) == 1


def test_kickers_break_ties_inside_a_category():
    hand_a = _eval(["Ah", "Ad"], ["Kc", "Qs", "9h", "2d", "3c"])
    hand_b = _eval(["Ah", "Ad"], ["Qc", "Js", "8h", "2d", "3c"])
    assert hand_a.strength > hand_b.strength

    top_kicker = _eval(["Kh", "Qd"], ["Ks", "9c", "5d", "4h", "2s"])
    weaker_kicker = _eval(["Kd", "Jc"], ["Ks", "9c", "5d", "4h", "2s"])
    assert compare_hands(top_kicker, weaker_kicker) == 1
    assert compare_hands(weaker_kicker, top_kicker) == -1


def test_board_plays_for_both_seats_is_a_tie():
    board = ["As", "Ks", "Qd", "Jh", "Tc"]
    first = _eval(["2c", "3d"], board)
    second = _eval(["4c", "5d"], board)
    assert first.strength == second.strength
    assert compare_hands(first, second) == 0


def test_descriptions_read_naturally():
    assert _eval(["Ah", "Kh"], ["Qh", "Jh", "Th"]).description == "Royal Flush"
    assert _eval(["Qc", "Qd"], ["Qs", "9h", "9s"]).description == "Full House, Queens over Nines"
    assert _eval(["6c", "6d"], ["Ks", "9h", "2s", "3d", "4c"]).description == "Pair of Sixes"
    assert _eval(["Ac", "Ad"], []).description == "Pocket Aces"
    assert _eval(["Kh", "Ah"], []).description == "Ace-King suited"
    assert _eval(["7c", "2d"], []).description == "Seven-Two offsuit"


def test_preflop_tiers_never_overlap():
    aces = _eval(["Ac", "Ad"], [])
    deuces = _eval(["2c", "2d"], [])
    ace_king_suited = _eval(["Ah", "Kh"], [])
    ace_king = _eval(["Ah", "Kd"], [])
    suited_connector = _eval(["8h", "7h"], [])
    seven_deuce = _eval(["7c", "2d"], [])

    assert aces.strength == 940
    assert seven_deuce.strength == 180
    assert aces.strength > deuces.strength > ace_king_suited.strength > ace_king.strength
    assert ace_king.strength > suited_connector.strength > seven_deuce.strength
    assert ace_king_suited.strength - ace_king.strength == 40
    assert aces.is_preflop


def test_draw_bonus_only_with_cards_to_come():
    flush_draw = _eval(["Ah", "9h"], ["Kh", "4h", "2c"])
    assert flush_draw.category == HandCategory.HIGH_CARD
    assert flush_draw.draw_bonus == FLUSH_DRAW_BONUS
    assert flush_draw.strength < CATEGORY_BAND

    straight_draw = _eval(["9c", "8d"], ["7h", "6s", "2c"])
    assert straight_draw.draw_bonus == STRAIGHT_DRAW_BONUS

    river = _eval(["Ah", "9h"], ["Kh", "4h", "2c", "Js", "3d"])
    assert river.draw_bonus == 0


def test_draw_bonus_never_crosses_into_the_next_category():
    # Trips with both draws still rank below the weakest straight.
    trips = _eval(["9h", "9c"], ["9d", "Th", "Jh", "Qh"])
    weakest_straight = _eval(["Ah", "2d"], ["3c", "4s", "5h"])
    assert trips.draw_bonus > 0
    assert trips.strength < weakest_straight.strength


def test_evaluation_is_order_independent():
    cards = parse_cards(["As", "Kd", "Jh", "Jc", "4d", "9s", "2h"])
    rng = random.Random(5)
    reference = evaluate(cards[:2], cards[2:]).strength
    for _ in range(10):
        rng.shuffle(cards)
        assert evaluate(cards[:2], cards[2:]).strength == reference


def test_ranking_is_consistent_over_random_hands():
    rng = random.Random(99)
    deck = full_deck()
    hands = []
    for _ in range(60):
        rng.shuffle(deck)
        hands.append(evaluate(deck[:2], deck[2:7]))
    for first, second in itertools.combinations(hands, 2):
        assert compare_hands(first, second) == -compare_hands(second, first)
    for a, b, c in itertools.combinations(hands[:20], 3):
        if compare_hands(a, b) > 0 and compare_hands(b, c) > 0:
            assert compare_hands(a, c) > 0


def test_best_five_picks_the_winning_combination():
    category, tiebreak, cards = best_five(parse_cards(["2h", "2d", "Ks", "Kd", "Kc", "7h", "7d"]))
    assert category == HandCategory.FULL_HOUSE
    assert tiebreak[:2] == [13, 7]
    assert len(cards) == 5
    assert describe_category(category) == "full_house"


def test_invalid_card_counts_and_duplicates_rejected():
    with pytest.raises(ValueError):
        _eval(["Ah"], [])
    with pytest.raises(ValueError, match="community card count"):
        _eval(["Ah", "Kd"], ["2c"])
    with pytest.raises(ValueError, match="Duplicate"):
        _eval(["Ah", "Kd"], ["Ah", "3c", "4d"])
