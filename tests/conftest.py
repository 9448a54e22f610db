"""Shared fixtures for catalog tests."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from product_catalog.catalog.models import Category
from product_catalog.infrastructure.database import Base
from product_catalog.infrastructure.image_store import StoredImage


class FakeImageStore:
    """In-memory image store that records calls."""

    def __init__(self) -> None:
        self.images: dict[str, bytes] = {}
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self._counter = 0

    def upload(self, data: bytes, filename: str) -> StoredImage:
        self._counter += 1
        image_id = f"img-{self._counter}-{filename}"
        self.images[image_id] = data
        self.uploaded.append(image_id)
        return StoredImage(url=f"https://cdn.test/{image_id}", image_id=image_id)

    def delete(self, image_id: str) -> bool:
        self.deleted.append(image_id)
        return self.images.pop(image_id, None) is not None


@pytest.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """Create a session on a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def image_store() -> FakeImageStore:
    """Create fake image store."""
    return FakeImageStore()


@pytest.fixture
def make_category(session: AsyncSession):
    """Factory inserting a category row directly."""

    async def factory(
        name: str,
        parent: Category | None = None,
        sort_order: int | None = None,
        **fields,
    ) -> Category:
        slug = fields.pop("slug", name.lower().replace(" ", "-"))
        category = Category(
            name=name,
            slug=slug,
            parent_id=parent.id if parent else None,
            sort_order=sort_order,
            **fields,
        )
        session.add(category)
        await session.flush()
        return category

    return factory
