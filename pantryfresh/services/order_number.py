"""Human-readable order identifiers: ``PF-<year>-<6 digit sequence>``.

The sequence restarts at 000001 every calendar year. Generation reads the
current maximum for the year, so it must run in the same transaction that
inserts the order; the unique index on ``order.order_number`` rejects any
duplicate that slips past the store's isolation.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from ..errors import ConflictError
from ..models.order import Order

ORDER_NUMBER_PREFIX = "PF"
SEQUENCE_WIDTH = 6
MAX_SEQUENCE = 10 ** SEQUENCE_WIDTH - 1


def format_order_number(year: int, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}-{year}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(order_number: str) -> int:
    return int(order_number.rsplit("-", 1)[-1])


def generate_order_number(session: Session, now: Optional[datetime] = None) -> str:
    year = (now or datetime.now()).year
    year_prefix = f"{ORDER_NUMBER_PREFIX}-{year}-"
    # fixed width, so the string max is the numeric max
    latest = (
        session.query(func.max(Order.order_number))
        .filter(Order.order_number.like(f"{year_prefix}%"))
        .scalar()
    )
    next_sequence = parse_sequence(latest) + 1 if latest else 1
    if next_sequence > MAX_SEQUENCE:
        raise ConflictError(f"Order number sequence for {year} is exhausted")
    return format_order_number(year, next_sequence)
