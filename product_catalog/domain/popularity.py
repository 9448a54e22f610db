"""Category popularity scoring.

The score weights purchase-funnel events by how close they are to a
sale: a view counts once, a cart add three times, an order five times.
"""

from collections.abc import Iterable
from typing import Protocol, TypeVar

VIEW_WEIGHT = 1
CART_ADD_WEIGHT = 3
ORDER_WEIGHT = 5


class PopularityCounters(Protocol):
    """Objects carrying the three funnel counters."""

    view_count: int
    cart_add_count: int
    order_count: int


T = TypeVar("T", bound=PopularityCounters)


def popularity_score(view_count: int, cart_add_count: int, order_count: int) -> int:
    """Compute the weighted popularity score.

    Args:
        view_count: Number of category views.
        cart_add_count: Number of cart additions from the category.
        order_count: Number of completed orders.

    Returns:
        ``view_count + 3 * cart_add_count + 5 * order_count``.
    """
    return (
        VIEW_WEIGHT * view_count
        + CART_ADD_WEIGHT * cart_add_count
        + ORDER_WEIGHT * order_count
    )


def score_of(item: PopularityCounters) -> int:
    """Popularity score of an object with counters (None counts as 0)."""
    return popularity_score(
        item.view_count or 0,
        item.cart_add_count or 0,
        item.order_count or 0,
    )


def rank_by_popularity(items: Iterable[T], limit: int) -> list[T]:
    """Return the ``limit`` highest scoring items, best first.

    Ties keep their input order.
    """
    if limit <= 0:
        return []
    return sorted(items, key=score_of, reverse=True)[:limit]
