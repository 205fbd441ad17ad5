"""Borrow pricing rules."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from campus_cart.core.exceptions import InvalidInputError

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class BorrowTerms:
    total_days: int
    total_cost: Decimal


def calculate_total_days(start: date | datetime, end: date | datetime) -> int:
    """Whole days between start and end, rounding any partial day up.

    Formula: total_days = ceil((end - start) / 1 day)
    """
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def compute_borrow_terms(
    start: date | datetime,
    end: date | datetime,
    price_per_day: Decimal,
    max_days: int,
) -> BorrowTerms:
    """Validate a borrow window and price it.

    Args:
        start: First day of the loan
        end: Last day of the loan, must be after ``start``
        price_per_day: Item's borrow price per day
        max_days: Item's longest allowed loan

    Returns:
        BorrowTerms with total_days and total_cost = total_days * price_per_day

    Raises:
        InvalidInputError: Empty/negative window or longer than max_days
    """
    total_days = calculate_total_days(start, end)
    if total_days <= 0:
        raise InvalidInputError(
            "end_date must be after start_date", code="INVALID_DATE_RANGE"
        )
    if total_days > max_days:
        raise InvalidInputError(
            f"Maximum borrow period is {max_days} days", code="BORROW_TOO_LONG"
        )
    return BorrowTerms(
        total_days=total_days,
        total_cost=Decimal(total_days) * Decimal(price_per_day),
    )
