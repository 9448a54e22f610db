"""Category repository for database operations.

Provides lookups, listing and atomic counter updates for categories.
"""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from product_catalog.catalog.models import Category, utcnow
from product_catalog.domain.popularity import CART_ADD_WEIGHT, ORDER_WEIGHT, VIEW_WEIGHT


class CategoryRepository:
    """Repository for Category database operations.

    Listings are ordered for display: explicit ``sort_order`` first
    (categories without one last), then name.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            roots = await repo.find_roots(active_only=True)
            children = await repo.find_by_parent_id(roots[0].id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, category: Category) -> Category:
        """Insert or update a category and flush it to get its id.

        Args:
            category: Category to save.

        Returns:
            Saved category.
        """
        self.session.add(category)
        await self.session.flush()
        return category

    async def delete(self, category: Category) -> None:
        """Delete a category.

        Args:
            category: Category to delete.
        """
        await self.session.delete(category)
        await self.session.flush()

    async def get_by_id(self, category_id: int) -> Category | None:
        """Get category by ID.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        return await self.session.get(Category, category_id)

    async def get_by_slug(self, slug: str) -> Category | None:
        """Get category by slug.

        Args:
            slug: Category slug.

        Returns:
            Category if found, None otherwise.
        """
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def exists_by_slug(self, slug: str, exclude_id: int | None = None) -> bool:
        """Check whether a slug is taken.

        Args:
            slug: Slug to check.
            exclude_id: Category to ignore (the one being updated).

        Returns:
            True if another category uses the slug.
        """
        query = select(func.count(Category.id)).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)

        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def find_all(self) -> Sequence[Category]:
        """Get every category, in display order."""
        return await self._find()

    async def find_roots(self, active_only: bool = False) -> Sequence[Category]:
        """Get categories without a parent.

        Args:
            active_only: Only return active categories.

        Returns:
            Root categories.
        """
        conditions = [Category.parent_id.is_(None)]
        if active_only:
            conditions.append(Category.active.is_(True))
        return await self._find(*conditions)

    async def find_by_parent_id(self, parent_id: int) -> Sequence[Category]:
        """Get direct subcategories of a category.

        Args:
            parent_id: Parent category ID.

        Returns:
            Subcategories.
        """
        return await self._find(Category.parent_id == parent_id)

    async def find_by_parent_ids(self, parent_ids: Sequence[int]) -> Sequence[Category]:
        """Get direct subcategories of any of the given categories.

        Args:
            parent_ids: Parent category IDs.

        Returns:
            Subcategories.
        """
        if not parent_ids:
            return []
        return await self._find(Category.parent_id.in_(parent_ids))

    async def find_active(self) -> Sequence[Category]:
        """Get all active categories."""
        return await self._find(Category.active.is_(True))

    async def find_popular_flagged(self) -> Sequence[Category]:
        """Get active categories flagged as popular, most ordered first."""
        query = (
            select(Category)
            .where(and_(Category.is_popular.is_(True), Category.active.is_(True)))
            .order_by(Category.order_count.desc(), Category.name.asc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_top_by_popularity(self, limit: int) -> Sequence[Category]:
        """Get the highest scoring active categories.

        Args:
            limit: Maximum results.

        Returns:
            Categories ordered by popularity score, best first.
        """
        score = (
            Category.view_count * VIEW_WEIGHT
            + Category.cart_add_count * CART_ADD_WEIGHT
            + Category.order_count * ORDER_WEIGHT
        )
        query = (
            select(Category)
            .where(Category.active.is_(True))
            .order_by(score.desc(), Category.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def search(self, query: str) -> Sequence[Category]:
        """Search categories by name or description (case-insensitive).

        Args:
            query: Search text.

        Returns:
            Matching categories ordered by name.
        """
        # "%" and "_" in the query match literally
        statement = (
            select(Category)
            .where(
                or_(
                    Category.name.icontains(query, autoescape=True),
                    Category.description.icontains(query, autoescape=True),
                )
            )
            .order_by(Category.name.asc())
        )
        result = await self.session.execute(statement)
        return result.scalars().all()

    async def count(self) -> int:
        """Count all categories."""
        result = await self.session.execute(select(func.count(Category.id)))
        return result.scalar_one()

    async def count_children(self, category_id: int) -> int:
        """Count direct subcategories of a category."""
        result = await self.session.execute(
            select(func.count(Category.id)).where(Category.parent_id == category_id)
        )
        return result.scalar_one()

    async def parent_ids_with_children(self, category_ids: Sequence[int]) -> set[int]:
        """Return which of the given categories have subcategories."""
        if not category_ids:
            return set()
        result = await self.session.execute(
            select(Category.parent_id).where(Category.parent_id.in_(category_ids)).distinct()
        )
        return set(result.scalars().all())

    async def increment_view_count(self, category_id: int) -> Category | None:
        """Atomically add one view.

        Returns:
            Updated category, or None if it does not exist.
        """
        return await self._update_counters(
            category_id,
            view_count=Category.view_count + 1,
        )

    async def increment_cart_add_count(self, category_id: int) -> Category | None:
        """Atomically add one cart addition.

        Returns:
            Updated category, or None if it does not exist.
        """
        return await self._update_counters(
            category_id,
            cart_add_count=Category.cart_add_count + 1,
        )

    async def record_order(
        self,
        category_id: int,
        revenue: Decimal,
        ordered_at: datetime | None = None,
    ) -> Category | None:
        """Atomically record an order against a category.

        Args:
            category_id: Category ID.
            revenue: Order amount added to total revenue.
            ordered_at: Order time. Defaults to now.

        Returns:
            Updated category, or None if it does not exist.
        """
        return await self._update_counters(
            category_id,
            order_count=Category.order_count + 1,
            last_week_order_count=Category.last_week_order_count + 1,
            last_month_order_count=Category.last_month_order_count + 1,
            total_revenue=Category.total_revenue + revenue,
            last_order_date=ordered_at or utcnow(),
        )

    async def set_popular(self, category_id: int, is_popular: bool) -> Category | None:
        """Set the popular flag.

        Returns:
            Updated category, or None if it does not exist.
        """
        return await self._update_counters(category_id, is_popular=is_popular)

    async def _update_counters(self, category_id: int, **values: Any) -> Category | None:
        """Apply a single UPDATE statement to one category.

        The new values are computed by the database, so concurrent
        increments from other sessions are not lost. The returned row
        refreshes the copy held by the session.
        """
        statement = (
            update(Category)
            .where(Category.id == category_id)
            .values(updated_at=utcnow(), **values)
            .returning(Category)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self.session.scalars(statement)
        return result.one_or_none()

    async def _find(self, *conditions: Any) -> Sequence[Category]:
        query = select(Category)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(
            Category.sort_order.is_(None),
            Category.sort_order.asc(),
            Category.name.asc(),
        )
        result = await self.session.execute(query)
        return result.scalars().all()
