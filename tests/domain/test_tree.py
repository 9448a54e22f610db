"""Tests for the category hierarchy engine."""

from dataclasses import dataclass

import pytest

from product_catalog.domain.exceptions import (
    CategoryNotFoundError,
    CyclicHierarchyError,
    InternalConsistencyError,
    InvalidArgumentError,
    InvalidHierarchyError,
)
from product_catalog.domain.tree import CategoryTree, CategoryTreeNode, display_order


# ============================================================================
# Test Fixtures
# ============================================================================


@dataclass
class Node:
    """Plain category stand-in."""

    id: int
    parent_id: int | None
    name: str
    sort_order: int | None = None

    @property
    def slug(self) -> str:
        return self.name.lower()


def chain() -> list[Node]:
    """A -> B -> C."""
    return [
        Node(1, None, "A"),
        Node(2, 1, "B"),
        Node(3, 2, "C"),
    ]


def catalog() -> list[Node]:
    """Two roots with a few levels below them."""
    return [
        Node(1, None, "Electronics", sort_order=0),
        Node(2, 1, "Phones", sort_order=1),
        Node(3, 1, "Computers", sort_order=0),
        Node(4, 3, "Laptops"),
        Node(5, 3, "Desktops"),
        Node(6, None, "Clothing", sort_order=1),
        Node(7, 6, "Shoes"),
    ]


def ids(items) -> list[int]:
    return [item.id for item in items]


def walk(nodes: list[CategoryTreeNode]) -> list[int]:
    result = []
    for node in nodes:
        result.append(node.id)
        result.extend(walk(node.children))
    return result


# ============================================================================
# Navigation
# ============================================================================


class TestNavigation:
    """Tests for roots, children and lookups."""

    def test_roots(self) -> None:
        """Categories without parent are roots."""
        tree = CategoryTree(catalog())
        assert ids(tree.roots()) == [1, 6]

    def test_children_in_display_order(self) -> None:
        """Children are ordered by sort_order, then name."""
        tree = CategoryTree(catalog())
        assert ids(tree.children_of(1)) == [3, 2]
        assert ids(tree.children_of(3)) == [5, 4]

    def test_leaf_has_no_children(self) -> None:
        """A leaf returns an empty list."""
        tree = CategoryTree(catalog())
        assert tree.children_of(4) == []

    def test_get_unknown_raises(self) -> None:
        """Unknown ids raise not found."""
        tree = CategoryTree(catalog())
        with pytest.raises(CategoryNotFoundError):
            tree.get(99)

    def test_len_and_contains(self) -> None:
        """Tree reports size and membership."""
        tree = CategoryTree(catalog())
        assert len(tree) == 7
        assert 4 in tree
        assert 99 not in tree

    def test_display_order_puts_unsorted_last(self) -> None:
        """Items without sort_order sort after ordered ones."""
        items = [Node(1, None, "A"), Node(2, None, "Z", sort_order=5)]
        assert ids(sorted(items, key=display_order)) == [2, 1]


# ============================================================================
# Breadcrumbs and Depth
# ============================================================================


class TestBreadcrumbs:
    """Tests for breadcrumbs and depth."""

    def test_breadcrumbs_root_first(self) -> None:
        """Breadcrumbs of C are A, B, C."""
        tree = CategoryTree(chain())
        assert [n.name for n in tree.breadcrumbs(3)] == ["A", "B", "C"]

    def test_breadcrumbs_of_root(self) -> None:
        """Root breadcrumbs contain only the root."""
        tree = CategoryTree(chain())
        assert ids(tree.breadcrumbs(1)) == [1]

    def test_breadcrumbs_length_is_depth_plus_one(self) -> None:
        """Every breadcrumb path is one longer than the depth."""
        tree = CategoryTree(catalog())
        for node in catalog():
            assert len(tree.breadcrumbs(node.id)) == tree.depth_of(node.id) + 1

    def test_depth(self) -> None:
        """Depth counts hops to the root."""
        tree = CategoryTree(chain())
        assert tree.depth_of(1) == 0
        assert tree.depth_of(3) == 2

    def test_breadcrumbs_unknown(self) -> None:
        """Unknown category raises not found."""
        tree = CategoryTree(chain())
        with pytest.raises(CategoryNotFoundError):
            tree.breadcrumbs(42)

    def test_breadcrumbs_with_stored_cycle(self) -> None:
        """A stored cycle is reported instead of looping."""
        tree = CategoryTree([Node(1, 2, "A"), Node(2, 1, "B")])
        with pytest.raises(InternalConsistencyError):
            tree.breadcrumbs(1)

    def test_breadcrumbs_with_missing_parent(self) -> None:
        """A dangling parent reference is reported."""
        tree = CategoryTree([Node(1, None, "A"), Node(2, 77, "B")])
        with pytest.raises(InternalConsistencyError):
            tree.breadcrumbs(2)


# ============================================================================
# Parent Validation
# ============================================================================


class TestValidateParent:
    """Tests for re-parenting checks."""

    def test_no_parent_is_valid(self) -> None:
        """Moving to the root is always allowed."""
        tree = CategoryTree(chain())
        tree.validate_parent(3, None)

    def test_valid_move(self) -> None:
        """Moving under an unrelated category is allowed."""
        tree = CategoryTree(catalog())
        tree.validate_parent(7, 3)

    def test_self_parent(self) -> None:
        """A category cannot be its own parent."""
        tree = CategoryTree(chain())
        with pytest.raises(InvalidHierarchyError):
            tree.validate_parent(2, 2)

    def test_descendant_parent_is_cycle(self) -> None:
        """Setting A's parent to C would close a cycle."""
        tree = CategoryTree(chain())
        with pytest.raises(CyclicHierarchyError) as exc_info:
            tree.validate_parent(1, 3)
        assert exc_info.value.code == "CYCLIC_HIERARCHY"

    def test_direct_child_parent_is_cycle(self) -> None:
        """Setting A's parent to its child B is a cycle."""
        tree = CategoryTree(chain())
        with pytest.raises(CyclicHierarchyError):
            tree.validate_parent(1, 2)

    def test_missing_parent(self) -> None:
        """Unknown parent raises not found."""
        tree = CategoryTree(chain())
        with pytest.raises(CategoryNotFoundError):
            tree.validate_parent(1, 99)

    def test_new_category_only_checks_existence(self) -> None:
        """A category that is not stored yet can go anywhere that exists."""
        tree = CategoryTree(chain())
        tree.validate_parent(None, 3)
        with pytest.raises(CategoryNotFoundError):
            tree.validate_parent(None, 99)

    def test_sibling_move(self) -> None:
        """Moving under a sibling's descendant is allowed."""
        tree = CategoryTree(catalog())
        tree.validate_parent(2, 4)


# ============================================================================
# Levels
# ============================================================================


class TestLevel:
    """Tests for level traversal."""

    def test_level_zero_is_roots(self) -> None:
        """Level 0 equals the roots."""
        tree = CategoryTree(catalog())
        assert ids(tree.level(0)) == ids(tree.roots())

    def test_level_one(self) -> None:
        """Level 1 lists children of every root."""
        tree = CategoryTree(catalog())
        assert ids(tree.level(1)) == [3, 2, 7]

    def test_level_two(self) -> None:
        """Level 2 lists grandchildren."""
        tree = CategoryTree(catalog())
        assert ids(tree.level(2)) == [5, 4]

    def test_level_beyond_depth(self) -> None:
        """Levels past the deepest category are empty."""
        tree = CategoryTree(catalog())
        assert tree.level(3) == []
        assert tree.level(50) == []

    def test_level_matches_depth(self) -> None:
        """Every category on level k has depth k."""
        tree = CategoryTree(catalog())
        for k in range(3):
            assert all(tree.depth_of(item.id) == k for item in tree.level(k))

    def test_negative_level(self) -> None:
        """Negative level is rejected."""
        tree = CategoryTree(catalog())
        with pytest.raises(InvalidArgumentError):
            tree.level(-1)

    def test_empty_tree(self) -> None:
        """An empty tree has empty levels."""
        tree = CategoryTree([])
        assert tree.level(0) == []


# ============================================================================
# Materialization
# ============================================================================


class TestMaterialize:
    """Tests for building the nested forest."""

    def test_every_category_once(self) -> None:
        """Each category appears exactly once."""
        forest = CategoryTree(catalog()).materialize()
        visited = walk(forest)
        assert sorted(visited) == [1, 2, 3, 4, 5, 6, 7]

    def test_structure(self) -> None:
        """Children are nested under their parents in display order."""
        forest = CategoryTree(catalog()).materialize()
        assert [n.name for n in forest] == ["Electronics", "Clothing"]
        computers = forest[0].children[0]
        assert computers.name == "Computers"
        assert [n.name for n in computers.children] == ["Desktops", "Laptops"]

    def test_leaves_have_empty_children(self) -> None:
        """Leaf nodes carry an empty children list."""
        forest = CategoryTree(chain()).materialize()
        leaf = forest[0].children[0].children[0]
        assert leaf.id == 3
        assert leaf.children == []

    def test_empty_forest(self) -> None:
        """No categories materialize to an empty list."""
        assert CategoryTree([]).materialize() == []

    def test_cycle_detected(self) -> None:
        """Categories caught in a cycle are reported."""
        items = [Node(1, None, "Root"), Node(2, 3, "X"), Node(3, 2, "Y")]
        with pytest.raises(InternalConsistencyError) as exc_info:
            CategoryTree(items).materialize()
        assert exc_info.value.details["category_ids"] == [2, 3]

    def test_to_dict(self) -> None:
        """Nodes convert to nested dictionaries."""
        forest = CategoryTree(chain()).materialize()
        data = forest[0].to_dict()
        assert data["name"] == "A"
        assert data["slug"] == "a"
        assert data["children"][0]["children"][0]["children"] == []

    def test_deep_chain(self) -> None:
        """A chain far deeper than the interpreter stack still builds."""
        items = [Node(1, None, "N1")] + [Node(i, i - 1, f"N{i}") for i in range(2, 1501)]
        tree = CategoryTree(items)

        forest = tree.materialize()

        node = forest[0]
        depth = 0
        while node.children:
            assert len(node.children) == 1
            node = node.children[0]
            depth += 1
        assert depth == 1499
        assert node.id == 1500
        assert tree.depth_of(1500) == 1499
        assert len(tree.breadcrumbs(1500)) == 1500

    def test_deep_chain_to_dict(self) -> None:
        """Deep forests convert to dictionaries."""
        items = [Node(1, None, "N1")] + [Node(i, i - 1, f"N{i}") for i in range(2, 1501)]
        data = CategoryTree(items).materialize()[0].to_dict()

        depth = 0
        while data["children"]:
            data = data["children"][0]
            depth += 1
        assert depth == 1499
        assert data["id"] == 1500
