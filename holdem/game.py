from __future__ import annotations

import copy
import logging
import random
from typing import Dict, List, Optional, Sequence

from .cards import cards_to_labels, new_shuffled_deck
from .errors import IllegalAction, InvariantViolation
from .evaluator import HandEvaluation, evaluate
from .events import Event, EventType, Transition
from .models import (
    BETTING_ROUNDS,
    STREET_CARDS,
    ActionType,
    GamePhase,
    GameState,
    HandState,
    HandStatus,
    LastAction,
    Phase,
    Seat,
    SeatActionWindow,
    SeatConfig,
    TableConfig,
)
from .pots import compute_side_pots

LOGGER = logging.getLogger("holdem.engine")

# GameEngine holds poker rules only: no I/O, no timers. Every public operation
# deep-copies the incoming GameState, works on the copy and returns it with the
# events that describe what happened, so a rejected action never leaves a
# half-applied state behind.


class GameEngine:
    """No-Limit Texas Hold'em rules for a single tournament table."""

    def __init__(self, config: Optional[TableConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or TableConfig()
        self.rng = rng or random.Random()

    # Game lifecycle --------------------------------------------------

    def initialize_game(self, seat_configs: Sequence[SeatConfig], button: Optional[int] = None) -> Transition:
        if not 2 <= len(seat_configs) <= self.config.max_seats:
            raise ValueError(f"A game needs between 2 and {self.config.max_seats} seats")
        seats = []
        for idx, seat_config in enumerate(seat_configs):
            name = seat_config.name.strip()
            if not name:
                raise ValueError("Seat name is required")
            chips = self.config.starting_stack if seat_config.chips is None else seat_config.chips
            if chips < 0:
                raise ValueError(f"Seat {name} cannot start with negative chips")
            seats.append(
                Seat(
                    id=idx,
                    name=name,
                    is_human=seat_config.is_human,
                    chips=chips,
                    profile=seat_config.profile,
                )
            )

        button = 0 if button is None else button
        if not 0 <= button < len(seats):
            raise ValueError(f"Button seat {button} is not at the table")

        state = GameState(
            config=self.config,
            seats=seats,
            button=button,
            total_chips=sum(seat.chips for seat in seats),
        )
        event = Event(
            EventType.GAME_INITIALIZED,
            {
                "seats": [
                    {"seat": seat.id, "name": seat.name, "chips": seat.chips, "is_human": seat.is_human}
                    for seat in seats
                ],
                "button": button,
                "small_blind": self.config.small_blind,
                "big_blind": self.config.big_blind,
            },
        )
        LOGGER.info("Game initialized with %d seats, %d chips in play", len(seats), state.total_chips)
        return Transition(state, [event])

    def is_game_over(self, state: GameState) -> bool:
        return len(state.seats_with_chips()) < 2

    def start_new_hand(self, state: GameState) -> Transition:
        new_state = copy.deepcopy(state)
        previous = new_state.hand
        if previous is not None and not previous.is_complete:
            raise IllegalAction("HAND_IN_PROGRESS", f"Hand {previous.hand_number} is still in progress")
        if previous is not None and previous.status == HandStatus.ABORTED and previous.pot:
            LOGGER.warning("Discarding %d chips left in aborted hand %d", previous.pot, previous.hand_number)
            new_state.total_chips -= previous.pot
            previous.pot = 0

        if self.is_game_over(new_state):
            return self._game_over(new_state)

        if new_state.hand_number == 0 and new_state.seats[new_state.button].chips > 0:
            button = new_state.button
        else:
            button = self._next_seat_with_chips(new_state, new_state.button)
        new_state.button = button
        new_state.hand_number += 1
        new_state.phase = GamePhase.PLAYING

        for seat in new_state.seats:
            seat.reset_for_hand()

        deck = new_shuffled_deck(self.rng)
        hand = HandState(
            hand_number=new_state.hand_number,
            deck=deck,
            button=button,
            small_blind=self.config.small_blind,
            big_blind=self.config.big_blind,
        )
        new_state.hand = hand
        hand.burned.append(deck.burn())

        order = self._dealing_order(new_state, button)
        for _ in range(2):
            for seat_idx in order:
                new_state.seats[seat_idx].hole_cards.extend(deck.deal(1))

        if len(order) == 2:
            sb_seat, bb_seat = button, order[0]
        else:
            sb_seat, bb_seat = order[0], order[1]
        sb_paid = self._commit(hand, new_state.seats[sb_seat], self.config.small_blind)
        bb_paid = self._commit(hand, new_state.seats[bb_seat], self.config.big_blind)
        hand.current_bet = self.config.big_blind
        hand.last_raise_size = self.config.big_blind
        hand.to_act = self._next_pending_seat(new_state, bb_seat)

        events = [
            Event(
                EventType.HAND_INITIALIZED,
                {"hand_number": hand.hand_number, "button": button, "dealt_in": order, "burned": len(hand.burned)},
            ),
            Event(
                EventType.HAND_STARTED,
                {
                    "hand_number": hand.hand_number,
                    "button": button,
                    "small_blind": {"seat": sb_seat, "amount": sb_paid},
                    "big_blind": {"seat": bb_seat, "amount": bb_paid},
                    "seats": [
                        {"seat": seat.id, "name": seat.name, "chips": seat.chips, "in_hand": seat.is_active}
                        for seat in new_state.seats
                    ],
                    "to_act": hand.to_act,
                },
            )
        ]
        LOGGER.info(
            "Hand %d started: button %s, blinds %d/%d posted by seats %d/%d",
            hand.hand_number,
            button,
            sb_paid,
            bb_paid,
            sb_seat,
            bb_seat,
        )

        if hand.to_act is None:
            # Blinds put everyone all-in: nothing left to decide.
            self._advance(new_state, events)

        self._check_invariants(new_state)
        return Transition(new_state, events)

    def abort_hand(self, state: GameState, reason: str = "aborted") -> Transition:
        new_state = copy.deepcopy(state)
        hand = new_state.hand
        if hand is None or hand.is_complete:
            return Transition(new_state, [])
        hand.status = HandStatus.ABORTED
        hand.to_act = None
        LOGGER.warning("Hand %d aborted: %s", hand.hand_number, reason)
        event = Event(EventType.HAND_ABORTED, {"hand_number": hand.hand_number, "reason": reason, "pot": hand.pot})
        return Transition(new_state, [event])

    # Action handling -------------------------------------------------

    def legal_actions(self, state: GameState, seat_idx: int) -> SeatActionWindow:
        hand = state.hand
        seat = self._seat(state, seat_idx)
        if hand is None or hand.is_complete or not seat.can_act:
            return SeatActionWindow(legal=[], call_amount=0, min_raise_to=None, max_raise_to=None)

        to_call = max(hand.current_bet - seat.current_bet, 0)
        legal: List[ActionType] = [ActionType.FOLD]
        if to_call == 0:
            legal.append(ActionType.CHECK)
        elif seat.chips > 0:
            legal.append(ActionType.CALL)

        min_raise_to = self._min_raise_to(hand)
        max_raise_to = seat.current_bet + seat.chips
        closed = seat.id in hand.raise_closed
        can_raise = not closed and max_raise_to >= min_raise_to
        if can_raise:
            legal.append(ActionType.RAISE)
        if seat.chips > 0 and (not closed or max_raise_to <= hand.current_bet):
            legal.append(ActionType.ALL_IN)

        return SeatActionWindow(
            legal=legal,
            call_amount=min(to_call, seat.chips),
            min_raise_to=min_raise_to if can_raise else None,
            max_raise_to=max_raise_to if can_raise else None,
        )

    def apply_action(
        self,
        state: GameState,
        seat_idx: int,
        action: object,
        amount: Optional[int] = None,
    ) -> Transition:
        new_state = copy.deepcopy(state)
        hand = new_state.hand
        if hand is None or hand.is_complete:
            raise IllegalAction("HAND_NOT_ACTIVE", "No hand is in progress")
        if hand.to_act != seat_idx:
            raise IllegalAction("OUT_OF_TURN", f"Seat {seat_idx} cannot act; waiting on seat {hand.to_act}")
        try:
            action = ActionType.parse(action)
        except ValueError:
            raise IllegalAction("UNKNOWN_ACTION", f"Unknown action {action!r}") from None

        seat = new_state.seats[seat_idx]
        to_call = max(hand.current_bet - seat.current_bet, 0)
        closed = seat.id in hand.raise_closed

        if action == ActionType.FOLD:
            seat.is_active = False
            put = 0
            description = f"{seat.name} folds"
        elif action == ActionType.CHECK:
            if to_call > 0:
                raise IllegalAction("CANNOT_CHECK", f"{seat.name} must call {to_call} or fold")
            put = 0
            description = f"{seat.name} checks"
        elif action == ActionType.CALL:
            if to_call == 0:
                raise IllegalAction("NOTHING_TO_CALL", "Nothing to call; check instead")
            if seat.chips <= 0:
                raise IllegalAction("NO_CHIPS", f"{seat.name} has no chips")
            put = self._commit(hand, seat, to_call)
            description = f"{seat.name} calls {put}"
            if seat.is_all_in:
                description += " and is all-in"
        elif action == ActionType.RAISE:
            if closed:
                raise IllegalAction("RAISE_CLOSED", "Betting was not reopened; call or fold")
            if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int)):
                raise IllegalAction("BAD_AMOUNT", f"Raise amount must be an integer, got {amount!r}")
            min_raise_to = self._min_raise_to(hand)
            max_raise_to = seat.current_bet + seat.chips
            if max_raise_to < min_raise_to:
                raise IllegalAction(
                    "RAISE_BELOW_MINIMUM",
                    f"Minimum raise is to {min_raise_to}; {seat.name} can only go all-in for {max_raise_to}",
                )
            target = min_raise_to if amount is None else min(max(amount, min_raise_to), max_raise_to)
            put = self._bet_to(new_state, seat, target)
            description = f"{seat.name} raises to {target}"
            if seat.is_all_in:
                description += " and is all-in"
        elif action == ActionType.ALL_IN:
            if seat.chips <= 0:
                raise IllegalAction("NO_CHIPS", f"{seat.name} has no chips")
            target = seat.current_bet + seat.chips
            if closed and target > hand.current_bet:
                raise IllegalAction("RAISE_CLOSED", "Betting was not reopened; call or fold")
            raises = target > hand.current_bet
            put = self._bet_to(new_state, seat, target)
            description = f"{seat.name} goes all-in for {put}"
            if raises:
                description += f" (raises to {target})"
        else:
            raise IllegalAction("UNKNOWN_ACTION", f"Unsupported action {action}")

        seat.has_acted = True
        hand.action_count += 1
        hand.round_action_count += 1
        hand.last_action = LastAction(seat=seat_idx, action=action, amount=put)
        events = [
            Event(
                EventType.ACTION_APPLIED,
                {
                    "seat": seat_idx,
                    "name": seat.name,
                    "action": action.value,
                    "amount": put,
                    "total_bet": seat.current_bet,
                    "pot": hand.pot,
                    "round": hand.betting_round.value,
                    "all_in": seat.is_all_in,
                    "description": description,
                },
            )
        ]
        LOGGER.debug("Hand %d: %s", hand.hand_number, description)

        self._after_action(new_state, events)
        self._check_invariants(new_state)
        return Transition(new_state, events)

    def _after_action(self, state: GameState, events: List[Event]) -> None:
        hand = state.hand
        assert hand is not None
        contesting = [seat for seat in state.seats if seat.is_active]
        if len(contesting) == 1:
            self._end_early(state, contesting[0], events)
            return
        if self.is_betting_round_complete(state):
            self._advance(state, events)
            return
        if hand.round_action_count > self.config.max_actions_per_round:
            LOGGER.error(
                "Hand %d: %s round passed %d actions without completing; forcing phase advance",
                hand.hand_number,
                hand.betting_round.value,
                self.config.max_actions_per_round,
            )
            self._advance(state, events)
            return
        previous = hand.to_act if hand.to_act is not None else hand.button
        hand.to_act = self._next_pending_seat(state, previous)
        if hand.to_act is None:
            self._advance(state, events)

    def is_betting_round_complete(self, state: GameState) -> bool:
        hand = state.hand
        if hand is None:
            return True
        contesting = [seat for seat in state.seats if seat.is_active]
        if len(contesting) <= 1:
            return True
        actors = [seat for seat in contesting if not seat.is_all_in]
        if not actors:
            return True
        return all(seat.has_acted and seat.current_bet == hand.current_bet for seat in actors)

    def next_seat_to_act(self, state: GameState, from_index: int) -> Optional[int]:
        count = len(state.seats)
        for step in range(1, count + 1):
            seat = state.seats[(from_index + step) % count]
            if seat.can_act:
                return seat.id
        return None

    def _next_pending_seat(self, state: GameState, from_index: int) -> Optional[int]:
        # Like next_seat_to_act, but skips seats that already acted and matched the bet.
        hand = state.hand
        assert hand is not None
        count = len(state.seats)
        for step in range(1, count + 1):
            seat = state.seats[(from_index + step) % count]
            if seat.can_act and (not seat.has_acted or seat.current_bet < hand.current_bet):
                return seat.id
        return None

    def _min_raise_to(self, hand: HandState) -> int:
        return hand.current_bet + max(hand.last_raise_size, hand.big_blind)

    def _commit(self, hand: HandState, seat: Seat, amount: int) -> int:
        amount = min(amount, seat.chips)
        seat.chips -= amount
        seat.current_bet += amount
        seat.total_contribution += amount
        hand.pot += amount
        if seat.chips == 0:
            seat.is_all_in = True
        return amount

    def _bet_to(self, state: GameState, seat: Seat, target: int) -> int:
        hand = state.hand
        assert hand is not None
        previous_bet = hand.current_bet
        put = self._commit(hand, seat, target - seat.current_bet)
        if seat.current_bet <= previous_bet:
            # All-in for no more than the current bet: effectively a call.
            return put

        raise_size = seat.current_bet - previous_bet
        hand.current_bet = seat.current_bet
        if raise_size >= max(hand.last_raise_size, hand.big_blind):
            hand.last_raise_size = raise_size
            hand.raise_closed.clear()
            for other in state.seats:
                if other.id != seat.id and other.can_act:
                    other.has_acted = False
        else:
            hand.raise_closed.update(
                other.id for other in state.seats if other.id != seat.id and other.can_act and other.has_acted
            )
            LOGGER.debug("Hand %d: short all-in by %s does not reopen betting", hand.hand_number, seat.name)
        return put

    # Streets and showdown --------------------------------------------

    def advance_to_next_phase(self, state: GameState) -> Transition:
        new_state = copy.deepcopy(state)
        hand = new_state.hand
        if hand is None or hand.is_complete:
            raise IllegalAction("HAND_NOT_ACTIVE", "No hand is in progress")
        events: List[Event] = []
        self._advance(new_state, events)
        self._check_invariants(new_state)
        return Transition(new_state, events)

    def _advance(self, state: GameState, events: List[Event]) -> None:
        hand = state.hand
        assert hand is not None
        while True:
            if hand.betting_round == Phase.RIVER:
                self._showdown(state, events)
                return

            round_index = BETTING_ROUNDS.index(hand.betting_round) + 1
            next_round = BETTING_ROUNDS[round_index]
            self._deal_street(hand, round_index, next_round)

            for seat in state.seats:
                seat.reset_for_round()
            hand.current_bet = 0
            hand.last_raise_size = hand.big_blind
            hand.raise_closed.clear()
            hand.round_action_count = 0
            hand.betting_round = next_round

            new_cards = hand.community[-STREET_CARDS[next_round]:]
            events.append(
                Event(
                    EventType.PHASE_ADVANCED,
                    {
                        "round": next_round.value,
                        "cards": cards_to_labels(new_cards),
                        "community": cards_to_labels(hand.community),
                        "pot": hand.pot,
                    },
                )
            )
            LOGGER.debug("Hand %d: %s %s", hand.hand_number, next_round.value, cards_to_labels(new_cards))

            actors = [seat for seat in state.seats if seat.can_act]
            if len(actors) >= 2:
                hand.to_act = self.next_seat_to_act(state, hand.button)
                return
            # Fewer than two seats can bet: run the board out.
            hand.to_act = None

    def _deal_street(self, hand: HandState, round_index: int, street: Phase) -> None:
        # One burn at hand start plus one per street.
        if len(hand.burned) <= round_index:
            hand.burned.append(hand.deck.burn())
        hand.community.extend(hand.deck.deal(STREET_CARDS[street]))

    def showdown(self, state: GameState) -> Transition:
        new_state = copy.deepcopy(state)
        hand = new_state.hand
        if hand is None or hand.is_complete:
            raise IllegalAction("HAND_NOT_ACTIVE", "No hand is in progress")
        events: List[Event] = []
        self._showdown(new_state, events)
        self._check_invariants(new_state)
        return Transition(new_state, events)

    def _showdown(self, state: GameState, events: List[Event]) -> None:
        hand = state.hand
        assert hand is not None
        contesting = [seat for seat in state.seats if seat.is_active]
        if len(contesting) == 1:
            self._end_early(state, contesting[0], events)
            return

        while len(hand.community) < 5:
            round_index = BETTING_ROUNDS.index(hand.betting_round) + 1
            hand.betting_round = BETTING_ROUNDS[round_index]
            self._deal_street(hand, round_index, hand.betting_round)

        hand.betting_round = Phase.SHOWDOWN
        hand.to_act = None
        community = cards_to_labels(hand.community)
        events.append(
            Event(
                EventType.SHOWDOWN_STARTED,
                {
                    "seats": [seat.id for seat in contesting],
                    "community": community,
                    "hole_cards": {seat.id: cards_to_labels(seat.hole_cards) for seat in contesting},
                },
            )
        )

        evaluations: Dict[int, HandEvaluation] = {
            seat.id: evaluate(seat.hole_cards, hand.community) for seat in contesting
        }
        pots = compute_side_pots(state.seats, hand.pot)
        hand.side_pots = pots

        won: Dict[int, int] = {}
        won_pots: Dict[int, List[int]] = {}
        pot_results = []
        for index, pot in enumerate(pots):
            contenders = [seat_id for seat_id in pot.eligible if seat_id in evaluations]
            best = max(evaluations[seat_id].strength for seat_id in contenders)
            winners = self._order_from_button(
                state, [seat_id for seat_id in contenders if evaluations[seat_id].strength == best]
            )
            share, remainder = divmod(pot.amount, len(winners))
            for position, seat_id in enumerate(winners):
                payout = share + (1 if position < remainder else 0)
                state.seats[seat_id].chips += payout
                won[seat_id] = won.get(seat_id, 0) + payout
                won_pots.setdefault(seat_id, []).append(index)
            pot_results.append(
                {"pot": index, "amount": pot.amount, "eligible": list(pot.eligible), "winners": winners}
            )
        hand.pot = 0

        hand.results = [
            {
                "seat": seat_id,
                "name": state.seats[seat_id].name,
                "amount": amount,
                "pots": won_pots[seat_id],
                "description": evaluations[seat_id].description,
            }
            for seat_id, amount in won.items()
        ]
        hand.status = HandStatus.SHOWDOWN
        events.append(
            Event(
                EventType.SHOWDOWN_COMPLETE,
                {
                    "hand_number": hand.hand_number,
                    "winners": list(hand.results),
                    "pots": pot_results,
                    "hands": {seat_id: evaluation.description for seat_id, evaluation in evaluations.items()},
                    "community": community,
                },
            )
        )
        LOGGER.info(
            "Hand %d showdown: %s",
            hand.hand_number,
            ", ".join(f"{result['name']} wins {result['amount']} with {result['description']}" for result in hand.results),
        )

    def _end_early(self, state: GameState, winner: Seat, events: List[Event]) -> None:
        hand = state.hand
        assert hand is not None
        amount = hand.pot
        winner.chips += amount
        hand.pot = 0
        hand.to_act = None
        hand.status = HandStatus.EARLY_END
        hand.results = [{"seat": winner.id, "name": winner.name, "amount": amount, "pots": [0], "description": None}]
        events.append(
            Event(
                EventType.HAND_ENDED_EARLY,
                {"hand_number": hand.hand_number, "winner": winner.id, "name": winner.name, "amount": amount},
            )
        )
        LOGGER.info("Hand %d: %s wins %d uncontested", hand.hand_number, winner.name, amount)

    def _game_over(self, state: GameState) -> Transition:
        state.phase = GamePhase.GAME_OVER
        remaining = state.seats_with_chips()
        winner = remaining[0] if len(remaining) == 1 else None
        event = Event(
            EventType.GAME_OVER,
            {
                "winner": winner.id if winner else None,
                "name": winner.name if winner else None,
                "hands_played": state.hand_number,
                "final_chips": {seat.id: seat.chips for seat in state.seats},
            },
        )
        if winner:
            LOGGER.info("Game over after %d hands: %s wins", state.hand_number, winner.name)
        else:
            LOGGER.info("Game over after %d hands with no winner", state.hand_number)
        return Transition(state, [event])

    # Table geometry and helpers ---------------------------------------

    def position_name(self, state: GameState, seat_idx: int) -> str:
        hand = state.hand
        button = hand.button if hand else state.button
        if hand is not None:
            players = [seat.id for seat in state.seats if seat.hole_cards]
        else:
            players = [seat.id for seat in state.seats_with_chips()]
        if seat_idx not in players:
            return "Sitting Out"

        count = len(state.seats)
        ordered = sorted(players, key=lambda seat_id: (seat_id - button) % count)
        offset = ordered.index(seat_idx)
        if offset == 0 and ordered[0] == button:
            return "Button"
        if len(ordered) == 2:
            return "Big Blind"
        if offset == 1:
            return "Small Blind"
        if offset == 2:
            return "Big Blind"
        if offset == len(ordered) - 1:
            return "Cutoff"
        if offset == 3:
            return "Under the Gun"
        return "Middle Position"

    def pot_odds(self, state: GameState, seat_idx: int) -> float:
        """Ratio of pot size to the amount the seat must call; 0.0 when nothing is owed."""
        hand = state.hand
        if hand is None:
            return 0.0
        seat = self._seat(state, seat_idx)
        to_call = min(max(hand.current_bet - seat.current_bet, 0), seat.chips)
        if to_call == 0:
            return 0.0
        return hand.pot / to_call

    def stack_to_pot_ratio(self, state: GameState, seat_idx: int) -> float:
        hand = state.hand
        seat = self._seat(state, seat_idx)
        pot = hand.pot if hand else 0
        return seat.chips / max(pot, 1)

    def _seat(self, state: GameState, seat_idx: int) -> Seat:
        if not 0 <= seat_idx < len(state.seats):
            raise IllegalAction("UNKNOWN_SEAT", f"Seat {seat_idx} is not at the table")
        return state.seats[seat_idx]

    def _next_seat_with_chips(self, state: GameState, start: int) -> int:
        count = len(state.seats)
        for step in range(1, count + 1):
            seat = state.seats[(start + step) % count]
            if seat.chips > 0:
                return seat.id
        raise InvariantViolation("No seat has chips")

    def _dealing_order(self, state: GameState, button: int) -> List[int]:
        count = len(state.seats)
        order = []
        for step in range(1, count + 1):
            seat = state.seats[(button + step) % count]
            if seat.is_active:
                order.append(seat.id)
        return order

    def _order_from_button(self, state: GameState, seat_ids: List[int]) -> List[int]:
        count = len(state.seats)
        button = state.hand.button if state.hand else state.button
        return sorted(seat_ids, key=lambda seat_id: (seat_id - button - 1) % count)

    def _check_invariants(self, state: GameState) -> None:
        contributed = 0
        for seat in state.seats:
            if seat.chips < 0:
                raise InvariantViolation(f"Seat {seat.id} has negative chips ({seat.chips})")
            if seat.current_bet > seat.total_contribution:
                raise InvariantViolation(f"Seat {seat.id} bet {seat.current_bet} exceeds contribution")
            contributed += seat.total_contribution
        hand = state.hand
        in_pot = 0
        if hand is not None:
            in_pot = hand.pot
            if hand.status in (HandStatus.IN_PROGRESS, HandStatus.ABORTED) and hand.pot != contributed:
                raise InvariantViolation(f"Pot {hand.pot} does not match contributions {contributed}")
        on_table = sum(seat.chips for seat in state.seats) + in_pot
        if on_table != state.total_chips:
            raise InvariantViolation(f"Chip count {on_table} does not match {state.total_chips} in play")
