"""Tests for popularity scoring."""

from dataclasses import dataclass

from product_catalog.domain.popularity import popularity_score, rank_by_popularity, score_of


@dataclass
class Counters:
    name: str
    view_count: int | None = 0
    cart_add_count: int | None = 0
    order_count: int | None = 0


class TestPopularityScore:
    """Tests for the weighted score."""

    def test_weights(self) -> None:
        """10 views, 2 cart adds and 1 order score 21."""
        assert popularity_score(10, 2, 1) == 21

    def test_zero(self) -> None:
        """No activity scores zero."""
        assert popularity_score(0, 0, 0) == 0

    def test_order_outweighs_view(self) -> None:
        """One order is worth five views."""
        assert popularity_score(0, 0, 1) == popularity_score(5, 0, 0)

    def test_score_of_treats_none_as_zero(self) -> None:
        """Unset counters count as zero."""
        assert score_of(Counters("x", view_count=None, cart_add_count=1, order_count=None)) == 3


class TestRankByPopularity:
    """Tests for ranking."""

    def test_best_first(self) -> None:
        """Higher score ranks first and limit is applied."""
        items = [
            Counters("low", view_count=1),
            Counters("high", order_count=3),
            Counters("mid", cart_add_count=2),
        ]
        ranked = rank_by_popularity(items, 2)
        assert [c.name for c in ranked] == ["high", "mid"]

    def test_ties_keep_input_order(self) -> None:
        """Equal scores keep their original order."""
        items = [Counters("a", view_count=3), Counters("b", cart_add_count=1)]
        assert [c.name for c in rank_by_popularity(items, 5)] == ["a", "b"]

    def test_non_positive_limit(self) -> None:
        """A limit of zero returns nothing."""
        assert rank_by_popularity([Counters("a", view_count=1)], 0) == []
