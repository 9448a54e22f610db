"""SQLAlchemy models for the category catalog.

Defines the self-referencing Category table. The hierarchy is stored
only as ``parent_id``; subcategories are always queried by parent id
rather than cached on the row.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from product_catalog.domain.popularity import score_of
from product_catalog.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """Category node in the product taxonomy forest.

    Attributes:
        id: Unique category identifier.
        name: Display name.
        description: Optional description.
        slug: URL-safe unique identifier.
        parent_id: Parent category ID (None for root).
        image_url: Public URL of the category image.
        image_id: Opaque image store id of the category image.
        meta_title: SEO title.
        meta_keywords: SEO keywords.
        sort_order: Display position among siblings.
        active: Whether the category is visible.
        is_popular: Manually flagged as popular.
        view_count: Number of category views.
        cart_add_count: Number of cart additions from this category.
        order_count: Number of orders.
        last_week_order_count: Orders in the last week.
        last_month_order_count: Orders in the last month.
        total_revenue: Revenue from orders.
        last_order_date: Time of the most recent order.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    image_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_keywords: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Popularity counters
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cart_add_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_week_order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_month_order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    last_order_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, slug={self.slug}, parent_id={self.parent_id})>"

    @property
    def popularity_score(self) -> int:
        """Weighted score of views, cart adds and orders."""
        return score_of(self)

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "slug": self.slug,
            "parent_id": self.parent_id,
            "image_url": self.image_url,
            "image_id": self.image_id,
            "meta_title": self.meta_title,
            "meta_keywords": self.meta_keywords,
            "sort_order": self.sort_order,
            "active": self.active,
            "is_popular": self.is_popular,
            "view_count": self.view_count,
            "cart_add_count": self.cart_add_count,
            "order_count": self.order_count,
            "last_week_order_count": self.last_week_order_count,
            "last_month_order_count": self.last_month_order_count,
            "total_revenue": str(self.total_revenue),
            "last_order_date": self.last_order_date.isoformat() if self.last_order_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
