"""Category hierarchy engine.

Holds a snapshot of the category forest as an arena indexed by id.
Parent links are stored as ids and the child index is derived from them
when the snapshot is built, so ``children_of`` always reflects the
current ``parent_id`` values.

Every walk is bounded by the number of categories in the snapshot. A
stored cycle therefore surfaces as ``InternalConsistencyError`` instead
of an endless loop.

Example usage:
    tree = CategoryTree(await repository.find_all())
    tree.validate_parent(category_id=3, parent_id=7)
    path = tree.breadcrumbs(7)          # [root, ..., category 7]
    forest = tree.materialize()         # [CategoryTreeNode(...), ...]
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from product_catalog.domain.exceptions import (
    CategoryNotFoundError,
    CyclicHierarchyError,
    InternalConsistencyError,
    InvalidArgumentError,
    InvalidHierarchyError,
)


class TreeItem(Protocol):
    """Anything the tree can index: ORM rows, dataclasses, test doubles."""

    id: int
    parent_id: int | None
    name: str
    slug: str
    sort_order: int | None


T = TypeVar("T", bound=TreeItem)


@dataclass
class CategoryTreeNode:
    """A category in the materialized forest.

    Attributes:
        id: Category ID.
        name: Category name.
        slug: Category slug.
        children: Direct subcategories, empty for leaves.
    """

    id: int
    name: str
    slug: str
    children: list["CategoryTreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to nested dictionary."""
        root: dict = {}
        stack: list[tuple["CategoryTreeNode", dict]] = [(self, root)]
        while stack:
            node, data = stack.pop()
            data.update(id=node.id, name=node.name, slug=node.slug, children=[])
            for child in node.children:
                child_data: dict = {}
                data["children"].append(child_data)
                stack.append((child, child_data))
        return root


def display_order(item: TreeItem) -> tuple:
    """Sort key: explicit sort order first (missing last), then name."""
    return (item.sort_order is None, item.sort_order or 0, item.name)


class CategoryTree(Generic[T]):
    """In-memory view of the category forest."""

    def __init__(self, items: Iterable[T]) -> None:
        """Build the arena and the derived child index.

        Args:
            items: Every category in the store.
        """
        self._items: dict[int, T] = {item.id: item for item in items}
        self._children: dict[int | None, list[T]] = {}

        for item in self._items.values():
            self._children.setdefault(item.parent_id, []).append(item)

        for siblings in self._children.values():
            siblings.sort(key=display_order)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._items

    def get(self, category_id: int) -> T:
        """Get a category from the snapshot.

        Raises:
            CategoryNotFoundError: If the id is unknown.
        """
        try:
            return self._items[category_id]
        except KeyError:
            raise CategoryNotFoundError(category_id) from None

    def roots(self) -> list[T]:
        """Categories without a parent, in display order."""
        return list(self._children.get(None, []))

    def children_of(self, category_id: int) -> list[T]:
        """Direct subcategories of a category, in display order."""
        return list(self._children.get(category_id, []))

    def ancestors(self, category_id: int) -> Iterator[T]:
        """Yield the parent chain of a category, nearest first.

        Raises:
            CategoryNotFoundError: If the starting id is unknown.
            InternalConsistencyError: If the chain is longer than the
                snapshot or points at a missing parent.
        """
        current = self.get(category_id)
        hops = 0
        while current.parent_id is not None:
            hops += 1
            if hops >= len(self._items):
                raise InternalConsistencyError(
                    f"parent chain of category {category_id} does not reach a root",
                    [category_id],
                )
            parent = self._items.get(current.parent_id)
            if parent is None:
                raise InternalConsistencyError(
                    f"category {current.id} references missing parent {current.parent_id}",
                    [current.id],
                )
            yield parent
            current = parent

    def validate_parent(self, category_id: int | None, parent_id: int | None) -> None:
        """Check that ``parent_id`` can become the parent of ``category_id``.

        ``category_id`` is None for a category that is not stored yet;
        such a category has no descendants, so only the parent's
        existence is checked.

        Raises:
            InvalidHierarchyError: If the category would be its own parent.
            CategoryNotFoundError: If the parent does not exist.
            CyclicHierarchyError: If the parent is a descendant of the category.
            InternalConsistencyError: If the stored chain is already broken.
        """
        if parent_id is None:
            return
        if category_id is not None and parent_id == category_id:
            raise InvalidHierarchyError(category_id)

        self.get(parent_id)
        if category_id is None:
            return

        for ancestor in self.ancestors(parent_id):
            if ancestor.id == category_id:
                raise CyclicHierarchyError(category_id, parent_id)

    def breadcrumbs(self, category_id: int) -> list[T]:
        """Path from the root down to and including the category."""
        path = [self.get(category_id)]
        path.extend(self.ancestors(category_id))
        path.reverse()
        return path

    def depth_of(self, category_id: int) -> int:
        """Distance from the root; roots are at depth 0."""
        return sum(1 for _ in self.ancestors(category_id))

    def level(self, level: int) -> list[T]:
        """All categories exactly ``level`` steps below a root.

        Raises:
            InvalidArgumentError: If level is negative.
        """
        if level < 0:
            raise InvalidArgumentError("level", level, "must not be negative")

        current = self.roots()
        for _ in range(level):
            if not current:
                return []
            current = [child for parent in current for child in self.children_of(parent.id)]
        return current

    def materialize(self) -> list[CategoryTreeNode]:
        """Build the complete forest as nested nodes.

        Walks with an explicit stack, so arbitrarily deep chains are fine.

        Raises:
            InternalConsistencyError: If some categories are unreachable
                from every root, which only happens when they form a cycle.
        """
        visited: set[int] = set()
        forest: list[CategoryTreeNode] = []

        # (category, depth, list its node is appended to)
        stack: list[tuple[T, int, list[CategoryTreeNode]]] = [
            (root, 0, forest) for root in reversed(self.roots())
        ]
        while stack:
            item, depth, siblings = stack.pop()
            if depth >= len(self._items) or item.id in visited:
                raise InternalConsistencyError(
                    f"category {item.id} appears twice while building the tree",
                    [item.id],
                )
            visited.add(item.id)

            node = CategoryTreeNode(id=item.id, name=item.name, slug=item.slug)
            siblings.append(node)
            for child in reversed(self.children_of(item.id)):
                stack.append((child, depth + 1, node.children))

        if len(visited) != len(self._items):
            unreachable = sorted(set(self._items) - visited)
            raise InternalConsistencyError(
                f"{len(unreachable)} categories are not reachable from any root",
                unreachable,
            )
        return forest
