"""Category application service.

Orchestrates category use cases over the repository, the hierarchy
engine and the image store:
- Create, update and delete categories (with images)
- Navigation: roots, subcategories, breadcrumbs, levels, full tree
- Popularity counters and popular category selection
- Seeding from a taxonomy file

Domain errors never escape a public method. They are returned as
failed result objects carrying ``error`` and ``error_code``. Storage
errors are not caught and reach the caller's unit of work, which rolls
back.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from product_catalog.catalog.models import Category, utcnow
from product_catalog.catalog.repository import CategoryRepository
from product_catalog.catalog.slugs import generate_slug, with_suffix
from product_catalog.catalog.taxonomy import TaxonomyEntry
from product_catalog.domain.exceptions import (
    CategoryNotFoundError,
    DomainError,
    HasChildrenError,
    InvalidArgumentError,
    SlugConflictError,
)
from product_catalog.domain.popularity import score_of
from product_catalog.domain.tree import CategoryTree, CategoryTreeNode
from product_catalog.infrastructure.config import settings
from product_catalog.infrastructure.image_store import ImageStore, LocalImageStore, StoredImage

logger = structlog.get_logger()


# ============================================================================
# Input Data
# ============================================================================


@dataclass
class ImageUpload:
    """Image file supplied with a create or update."""

    data: bytes
    filename: str


@dataclass
class CategoryData:
    """Descriptive fields of a category.

    Used for both create and update. An update replaces every field, so
    ``parent_id=None`` moves the category to the root and ``slug=None``
    regenerates the slug from the name.
    """

    name: str
    description: str | None = None
    slug: str | None = None
    parent_id: int | None = None
    sort_order: int | None = None
    active: bool = True
    meta_title: str | None = None
    meta_keywords: str | None = None


# ============================================================================
# Read Models
# ============================================================================


@dataclass
class CategoryRef:
    """Minimal reference to a category."""

    id: int
    name: str
    slug: str

    @classmethod
    def of(cls, category: Category) -> "CategoryRef":
        return cls(id=category.id, name=category.name, slug=category.slug)


@dataclass
class CategoryShortInfo:
    """Category as shown in listings."""

    id: int
    name: str
    slug: str
    description: str | None
    image_url: str | None
    is_popular: bool
    sort_order: int | None
    active: bool
    has_subcategories: bool

    @classmethod
    def of(cls, category: Category, has_subcategories: bool) -> "CategoryShortInfo":
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            image_url=category.image_url,
            is_popular=category.is_popular,
            sort_order=category.sort_order,
            active=category.active,
            has_subcategories=has_subcategories,
        )


@dataclass
class PopularCategory:
    """Category with its popularity score."""

    id: int
    name: str
    slug: str
    image_url: str | None
    popularity_score: int


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class CategoryResult:
    """Result of an operation returning one category with its neighbours."""

    category: Category | None = None
    parent: CategoryRef | None = None
    subcategories: list[CategoryRef] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class CategoryListResult:
    """Result of an operation returning a list of categories."""

    items: list[CategoryShortInfo] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class ShortInfoResult:
    """Result of getting a single category listing entry."""

    info: CategoryShortInfo | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class TreeResult:
    """Result of materializing the category forest."""

    tree: list[CategoryTreeNode] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class PopularCategoriesResult:
    """Result of selecting popular categories."""

    items: list[PopularCategory] = field(default_factory=list)
    flagged: bool = False
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class CountResult:
    """Result of counting categories."""

    count: int = 0
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class OperationResult:
    """Result of an operation with no payload."""

    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class SeedResult:
    """Result of seeding categories from a taxonomy."""

    created: int = 0
    existing: int = 0
    total: int = 0
    success: bool = True
    error: str | None = None
    error_code: str | None = None


R = TypeVar("R")


def failed(result_type: type[R], error: DomainError) -> R:
    """Build a failed result of the given type from a domain error."""
    return result_type(success=False, error=error.message, error_code=error.code)  # type: ignore[call-arg]


# ============================================================================
# Category Service
# ============================================================================


class CategoryService:
    """Application service for the category hierarchy.

    Example usage:
        async with async_session_factory() as session:
            service = CategoryService(session)
            result = await service.create_category(CategoryData(name="Shoes"))
            if not result.success:
                print(result.error_code, result.error)
            await session.commit()
    """

    def __init__(
        self,
        session: AsyncSession,
        image_store: ImageStore | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session (one unit of work).
            image_store: Image store. Defaults to LocalImageStore.
            request_id: Request ID for log correlation.
        """
        self.session = session
        self.repository = CategoryRepository(session)
        self.image_store = image_store or LocalImageStore()
        self.request_id = request_id
        self.log = logger.bind(request_id=request_id) if request_id else logger

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    async def create_category(
        self,
        data: CategoryData,
        image: ImageUpload | None = None,
    ) -> CategoryResult:
        """Create a new category.

        Args:
            data: Category fields.
            image: Optional image to upload.

        Returns:
            CategoryResult with the created category.
        """
        self.log.info("Creating category", name=data.name, parent_id=data.parent_id)
        try:
            self._validate_name(data.name)
            slug = await self._resolve_slug(data.slug, data.name)

            parent = None
            if data.parent_id is not None:
                parent = await self._get_or_raise(data.parent_id)

            stored = self._upload(image) if image else None

            now = utcnow()
            category = Category(
                name=data.name.strip(),
                description=data.description,
                slug=slug,
                parent_id=data.parent_id,
                sort_order=data.sort_order,
                active=data.active,
                meta_title=data.meta_title,
                meta_keywords=data.meta_keywords,
                image_url=stored.url if stored else None,
                image_id=stored.image_id if stored else None,
                is_popular=False,
                view_count=0,
                cart_add_count=0,
                order_count=0,
                last_week_order_count=0,
                last_month_order_count=0,
                total_revenue=Decimal("0.00"),
                created_at=now,
                updated_at=now,
            )
            try:
                await self.repository.save(category)
            except Exception:
                if stored:
                    self._release_image(stored.image_id)
                raise

        except DomainError as e:
            self.log.warning("Failed to create category", name=data.name, error=e.message)
            return failed(CategoryResult, e)

        self.log.info("Category created", category_id=category.id, slug=category.slug)
        return CategoryResult(
            category=category,
            parent=CategoryRef.of(parent) if parent else None,
        )

    async def update_category(
        self,
        category_id: int,
        data: CategoryData,
        image: ImageUpload | None = None,
    ) -> CategoryResult:
        """Replace a category's fields, parent and optionally its image.

        The new parent is validated against the stored hierarchy before
        anything is written. The old image is released only once the new
        row is flushed; if the flush fails the new upload is released
        instead and the error propagates.

        Args:
            category_id: Category to update.
            data: New category fields.
            image: Optional replacement image.

        Returns:
            CategoryResult with the updated category.
        """
        self.log.info("Updating category", category_id=category_id, parent_id=data.parent_id)
        try:
            category = await self._get_or_raise(category_id)
            self._validate_name(data.name)
            slug = await self._resolve_slug(data.slug, data.name, exclude_id=category_id)

            if data.parent_id is not None:
                tree = CategoryTree(await self.repository.find_all())
                tree.validate_parent(category_id, data.parent_id)

            stored = self._upload(image) if image else None
            old_image_id = category.image_id
            if stored:
                category.image_url = stored.url
                category.image_id = stored.image_id

            category.name = data.name.strip()
            category.description = data.description
            category.slug = slug
            category.parent_id = data.parent_id
            category.sort_order = data.sort_order
            category.active = data.active
            category.meta_title = data.meta_title
            category.meta_keywords = data.meta_keywords
            category.updated_at = utcnow()
            try:
                await self.repository.save(category)
            except Exception:
                if stored:
                    self._release_image(stored.image_id)
                raise

            if stored:
                self._release_image(old_image_id)

        except DomainError as e:
            self.log.warning("Failed to update category", category_id=category_id, error=e.message)
            return failed(CategoryResult, e)

        self.log.info("Category updated", category_id=category_id)
        return await self._details(category)

    async def delete_category(self, category_id: int) -> OperationResult:
        """Delete a leaf category, then release its image.

        Args:
            category_id: Category to delete.

        Returns:
            OperationResult; HAS_CHILDREN if subcategories exist.
        """
        self.log.info("Deleting category", category_id=category_id)
        try:
            category = await self._get_or_raise(category_id)

            child_count = await self.repository.count_children(category_id)
            if child_count:
                raise HasChildrenError(category_id, child_count)

            image_id = category.image_id
            await self.repository.delete(category)
            self._release_image(image_id)

        except DomainError as e:
            self.log.warning("Failed to delete category", category_id=category_id, error=e.message)
            return failed(OperationResult, e)

        self.log.info("Category deleted", category_id=category_id)
        return OperationResult()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_category(self, category_id: int) -> CategoryResult:
        """Get a category with its parent and subcategories.

        Args:
            category_id: Category ID.

        Returns:
            CategoryResult; NOT_FOUND if missing.
        """
        category = await self.repository.get_by_id(category_id)
        if category is None:
            return failed(CategoryResult, CategoryNotFoundError(category_id))
        return await self._details(category)

    async def get_category_by_slug(self, slug: str) -> CategoryResult:
        """Get a category by slug.

        Args:
            slug: Category slug.

        Returns:
            CategoryResult; NOT_FOUND if missing.
        """
        category = await self.repository.get_by_slug(slug)
        if category is None:
            return failed(CategoryResult, CategoryNotFoundError(slug=slug))
        return await self._details(category)

    async def get_short_info(self, category_id: int) -> ShortInfoResult:
        """Get the listing entry of one category."""
        category = await self.repository.get_by_id(category_id)
        if category is None:
            return failed(ShortInfoResult, CategoryNotFoundError(category_id))

        has_children = await self.repository.count_children(category_id) > 0
        return ShortInfoResult(info=CategoryShortInfo.of(category, has_children))

    async def get_root_categories(self, active_only: bool = False) -> CategoryListResult:
        """Get top-level categories in display order."""
        roots = await self.repository.find_roots(active_only=active_only)
        return CategoryListResult(items=await self._summaries(roots))

    async def get_subcategories(self, parent_id: int) -> CategoryListResult:
        """Get direct subcategories of a category in display order.

        Returns:
            CategoryListResult; NOT_FOUND if the parent is missing.
        """
        if await self.repository.get_by_id(parent_id) is None:
            return failed(CategoryListResult, CategoryNotFoundError(parent_id))

        children = await self.repository.find_by_parent_id(parent_id)
        return CategoryListResult(items=await self._summaries(children))

    async def search_categories(self, query: str) -> CategoryListResult:
        """Search categories by name or description.

        Returns:
            CategoryListResult; INVALID_ARGUMENT for a blank query.
        """
        query = (query or "").strip()
        if not query:
            return failed(
                CategoryListResult,
                InvalidArgumentError("query", query, "must not be blank"),
            )

        found = await self.repository.search(query)
        return CategoryListResult(items=await self._summaries(found))

    async def count_categories(self) -> CountResult:
        """Count all categories."""
        return CountResult(count=await self.repository.count())

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    async def get_breadcrumbs(self, category_id: int) -> CategoryListResult:
        """Get the path from the root down to a category.

        Returns:
            CategoryListResult ordered root first; NOT_FOUND if missing.
        """
        try:
            tree = await self._load_tree()
            path = tree.breadcrumbs(category_id)
        except DomainError as e:
            self.log.warning("Failed to build breadcrumbs", category_id=category_id, error=e.message)
            return failed(CategoryListResult, e)

        return CategoryListResult(items=self._tree_summaries(tree, path))

    async def get_categories_by_level(self, level: int) -> CategoryListResult:
        """Get all categories at a given depth (roots are level 0).

        Returns:
            CategoryListResult; INVALID_ARGUMENT for a negative level.
        """
        try:
            if level < 0:
                raise InvalidArgumentError("level", level, "must not be negative")
            tree = await self._load_tree()
            categories = tree.level(level)
        except DomainError as e:
            self.log.warning("Failed to list level", level=level, error=e.message)
            return failed(CategoryListResult, e)

        return CategoryListResult(items=self._tree_summaries(tree, categories))

    async def get_category_tree(self) -> TreeResult:
        """Materialize the complete category forest.

        Returns:
            TreeResult; INTERNAL_CONSISTENCY if stored data has a cycle.
        """
        try:
            tree = await self._load_tree()
            forest = tree.materialize()
        except DomainError as e:
            self.log.error("Failed to build category tree", error=e.message, details=e.details)
            return failed(TreeResult, e)

        return TreeResult(tree=forest)

    # ------------------------------------------------------------------
    # Popularity
    # ------------------------------------------------------------------

    async def increment_view_count(self, category_id: int) -> OperationResult:
        """Record a category view."""
        self.log.debug("Incrementing view count", category_id=category_id)
        if await self.repository.increment_view_count(category_id) is None:
            return failed(OperationResult, CategoryNotFoundError(category_id))
        return OperationResult()

    async def increment_cart_add_count(self, category_id: int) -> OperationResult:
        """Record a cart addition from a category."""
        self.log.debug("Incrementing cart add count", category_id=category_id)
        if await self.repository.increment_cart_add_count(category_id) is None:
            return failed(OperationResult, CategoryNotFoundError(category_id))
        return OperationResult()

    async def increment_order_count(self, category_id: int, revenue: Decimal) -> OperationResult:
        """Record an order and its revenue against a category.

        Args:
            category_id: Category ID.
            revenue: Order amount, must not be negative.

        Returns:
            OperationResult.
        """
        self.log.debug("Recording order", category_id=category_id, revenue=str(revenue))
        revenue = Decimal(revenue)
        if revenue < 0:
            return failed(
                OperationResult,
                InvalidArgumentError("revenue", str(revenue), "must not be negative"),
            )

        if await self.repository.record_order(category_id, revenue) is None:
            return failed(OperationResult, CategoryNotFoundError(category_id))
        return OperationResult()

    async def update_popular_status(self, category_id: int, is_popular: bool) -> OperationResult:
        """Set or clear the manual popular flag."""
        self.log.info("Updating popular status", category_id=category_id, is_popular=is_popular)
        if await self.repository.set_popular(category_id, is_popular) is None:
            return failed(OperationResult, CategoryNotFoundError(category_id))
        return OperationResult()

    async def get_popular_categories(self, limit: int | None = None) -> PopularCategoriesResult:
        """Get popular categories.

        Active categories flagged as popular win. When none are flagged,
        the ``limit`` highest scoring active categories are returned.

        Args:
            limit: Fallback size. Defaults to settings.popular_categories_limit.

        Returns:
            PopularCategoriesResult; ``flagged`` tells which rule applied.
        """
        limit = settings.popular_categories_limit if limit is None else limit
        if limit <= 0:
            return failed(
                PopularCategoriesResult,
                InvalidArgumentError("limit", limit, "must be positive"),
            )

        categories = await self.repository.find_popular_flagged()
        flagged = bool(categories)
        if not flagged:
            categories = await self.repository.find_top_by_popularity(limit)

        return PopularCategoriesResult(
            items=[
                PopularCategory(
                    id=c.id,
                    name=c.name,
                    slug=c.slug,
                    image_url=c.image_url,
                    popularity_score=score_of(c),
                )
                for c in categories
            ],
            flagged=flagged,
        )

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    async def seed_from_taxonomy(self, entries: Iterable[TaxonomyEntry]) -> SeedResult:
        """Create the categories of a taxonomy that do not exist yet.

        Entries must come parents first. An existing category with the
        same name under the same parent is reused.

        Args:
            entries: Parsed taxonomy entries.

        Returns:
            SeedResult with created/existing counts.
        """
        ids_by_path: dict[tuple[str, ...], int] = {}
        created = existing = 0

        for entry in entries:
            parent_id = ids_by_path.get(entry.parent_path) if entry.parent_path else None
            if entry.parent_path and parent_id is None:
                return failed(
                    SeedResult,
                    InvalidArgumentError(
                        "taxonomy", entry.full_path, "parent path is not defined before it"
                    ),
                )

            siblings = (
                await self.repository.find_by_parent_id(parent_id)
                if parent_id is not None
                else await self.repository.find_roots()
            )
            match = next((c for c in siblings if c.name == entry.name), None)
            if match is not None:
                ids_by_path[entry.path] = match.id
                existing += 1
                continue

            result = await self.create_category(
                CategoryData(name=entry.name, parent_id=parent_id, sort_order=entry.position)
            )
            if not result.success:
                return SeedResult(
                    created=created,
                    existing=existing,
                    success=False,
                    error=result.error,
                    error_code=result.error_code,
                )
            ids_by_path[entry.path] = result.category.id
            created += 1

        total = await self.repository.count()
        self.log.info("Taxonomy seeded", created=created, existing=existing, total=total)
        return SeedResult(created=created, existing=existing, total=total)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_or_raise(self, category_id: int) -> Category:
        category = await self.repository.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def _load_tree(self) -> CategoryTree[Category]:
        return CategoryTree(await self.repository.find_all())

    async def _details(self, category: Category) -> CategoryResult:
        parent = None
        if category.parent_id is not None:
            parent = await self.repository.get_by_id(category.parent_id)
        children = await self.repository.find_by_parent_id(category.id)

        return CategoryResult(
            category=category,
            parent=CategoryRef.of(parent) if parent else None,
            subcategories=[CategoryRef.of(c) for c in children],
        )

    async def _summaries(self, categories: Sequence[Category]) -> list[CategoryShortInfo]:
        with_children = await self.repository.parent_ids_with_children([c.id for c in categories])
        return [CategoryShortInfo.of(c, c.id in with_children) for c in categories]

    def _tree_summaries(
        self, tree: CategoryTree[Category], categories: Sequence[Category]
    ) -> list[CategoryShortInfo]:
        return [CategoryShortInfo.of(c, bool(tree.children_of(c.id))) for c in categories]

    def _validate_name(self, name: str) -> None:
        if not name or not name.strip():
            raise InvalidArgumentError("name", name, "must not be blank")

    async def _resolve_slug(
        self,
        requested: str | None,
        name: str,
        exclude_id: int | None = None,
    ) -> str:
        """Pick the slug for a create or update.

        A requested slug must be free. A generated one gets a numeric
        suffix until it is free.
        """
        max_length = settings.slug_max_length

        if requested and requested.strip():
            slug = generate_slug(requested, max_length)
            if await self.repository.exists_by_slug(slug, exclude_id=exclude_id):
                raise SlugConflictError(slug)
            return slug

        base = generate_slug(name, max_length)
        slug = base
        number = 1
        while await self.repository.exists_by_slug(slug, exclude_id=exclude_id):
            number += 1
            slug = with_suffix(base, number, max_length)
        return slug

    def _upload(self, image: ImageUpload) -> StoredImage:
        stored = self.image_store.upload(image.data, image.filename)
        self.log.info("Category image uploaded", image_id=stored.image_id)
        return stored

    def _release_image(self, image_id: str | None) -> None:
        if not image_id:
            return
        if self.image_store.delete(image_id):
            self.log.info("Category image deleted", image_id=image_id)
        else:
            self.log.warning("Failed to delete category image", image_id=image_id)


def get_category_service(
    session: AsyncSession,
    request_id: str | None = None,
) -> CategoryService:
    """Get category service instance.

    Args:
        session: Database session for this unit of work.
        request_id: Request ID for correlation.

    Returns:
        CategoryService instance.
    """
    return CategoryService(session, request_id=request_id)
