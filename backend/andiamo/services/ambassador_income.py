# Overview: Tiered ambassador commission for cash orders.

"""
Ambassador income (TND) from cumulative tickets sold.

- First 7 tickets: nothing.
- From the 8th ticket: 3 per ticket.
- 15 tickets reached: +15 once.
- 25 tickets reached: +20 once.
- From 35 tickets: +20 for every complete block of 10 beyond 35
  (paid at 45, 55, 65, ...).

Pure and non-decreasing in tickets_sold. Ambassador.commission_rate is not
an input.
"""

from __future__ import annotations

FREE_TICKETS = 7
PER_TICKET = 3
BONUS_15 = (15, 15)
BONUS_25 = (25, 20)
BLOCK_START = 35
BLOCK_SIZE = 10
BLOCK_BONUS = 20


def calculate_ambassador_income(tickets_sold: int) -> int:
    if isinstance(tickets_sold, bool) or not isinstance(tickets_sold, int):
        raise TypeError("tickets_sold must be an integer")
    if tickets_sold <= FREE_TICKETS:
        return 0

    base = (tickets_sold - FREE_TICKETS) * PER_TICKET

    bonus = 0
    for threshold, amount in (BONUS_15, BONUS_25):
        if tickets_sold >= threshold:
            bonus += amount
    if tickets_sold >= BLOCK_START:
        bonus += ((tickets_sold - BLOCK_START) // BLOCK_SIZE) * BLOCK_BONUS

    return base + bonus
