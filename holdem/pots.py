from __future__ import annotations

from typing import List, Sequence

from .models import Pot, Seat


def compute_side_pots(seats: Sequence[Seat], main_pot_total: int) -> List[Pot]:
    """Split the chips wagered this hand into pots ordered main pot first.

    Every distinct contribution level (folded seats included) closes one band.
    A band holds what each seat put in between the previous level and this
    one, and is contested by the still-active seats that reached the level.
    Folded chips are counted but never make their owner eligible.
    """
    contesting = [seat for seat in seats if seat.is_active]
    if not any(seat.is_all_in for seat in contesting):
        return [Pot(amount=main_pot_total, eligible=[seat.id for seat in contesting])]

    contributors = [seat for seat in seats if seat.total_contribution > 0]
    levels = sorted({seat.total_contribution for seat in contributors})

    pots: List[Pot] = []
    carry = 0
    previous = 0
    for level in levels:
        band = sum(min(seat.total_contribution, level) - min(seat.total_contribution, previous) for seat in contributors)
        eligible = [seat.id for seat in contesting if seat.total_contribution >= level]
        previous = level
        if not eligible:
            # Chips nobody still in the hand matched: fold them into a neighbouring pot.
            if pots:
                pots[-1].amount += band
            else:
                carry += band
            continue
        pots.append(Pot(amount=band + carry, eligible=eligible))
        carry = 0
    return pots


def total_in_pots(pots: Sequence[Pot]) -> int:
    return sum(pot.amount for pot in pots)
