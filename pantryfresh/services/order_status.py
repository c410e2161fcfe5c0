"""Order lifecycle states and the table of legal transitions between them."""

from enum import Enum
from typing import Dict, FrozenSet


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


INITIAL_STATUS = OrderStatus.PENDING

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.RETURNED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
}

# stock is still reserved, so cancelling from here releases it
CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
)

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Return True when ``current -> target`` is in the transition table.

    Defined for every pair of statuses; a move to the same status is never legal.
    """
    return target in TRANSITIONS[OrderStatus(current)]


def releases_stock(current: OrderStatus, target: OrderStatus) -> bool:
    return OrderStatus(target) is OrderStatus.CANCELLED and OrderStatus(current) in CANCELLABLE_STATUSES


STATUS_INFO: Dict[OrderStatus, dict] = {
    OrderStatus.PENDING: {
        "label": "Pending",
        "description": "Order received, awaiting confirmation",
        "color": "orange",
    },
    OrderStatus.CONFIRMED: {
        "label": "Confirmed",
        "description": "Order confirmed, preparing for shipment",
        "color": "blue",
    },
    OrderStatus.PROCESSING: {
        "label": "Processing",
        "description": "Order is being prepared and packed",
        "color": "purple",
    },
    OrderStatus.SHIPPED: {
        "label": "Shipped",
        "description": "Order is on the way to you",
        "color": "indigo",
    },
    OrderStatus.DELIVERED: {
        "label": "Delivered",
        "description": "Order has been delivered successfully",
        "color": "green",
    },
    OrderStatus.CANCELLED: {
        "label": "Cancelled",
        "description": "Order has been cancelled",
        "color": "red",
    },
    OrderStatus.RETURNED: {
        "label": "Returned",
        "description": "Order has been returned",
        "color": "gray",
    },
}


def status_info(status: OrderStatus) -> dict:
    status = OrderStatus(status)
    info = dict(STATUS_INFO[status])
    info["can_cancel"] = status in CANCELLABLE_STATUSES
    info["next_statuses"] = sorted(s.value for s in TRANSITIONS[status])
    return info
