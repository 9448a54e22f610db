"""Domain layer - category hierarchy engine, popularity scoring, errors.

This module exports the framework-free building blocks:

- **CategoryTree**: id-indexed arena over the category forest with
  cycle-safe re-parenting, breadcrumbs, level traversal and tree
  materialization
- **Popularity**: weighted score of views, cart adds and orders
- **Exceptions**: the category error taxonomy

Example usage:
    from product_catalog.domain import CategoryTree, CyclicHierarchyError

    tree = CategoryTree(categories)
    try:
        tree.validate_parent(category_id=1, parent_id=3)
    except CyclicHierarchyError as e:
        print(e.code, e.message)
"""

from product_catalog.domain.exceptions import (
    CategoryError,
    CategoryNotFoundError,
    CyclicHierarchyError,
    DomainError,
    HasChildrenError,
    ImageStoreError,
    InternalConsistencyError,
    InvalidArgumentError,
    InvalidHierarchyError,
    SlugConflictError,
)
from product_catalog.domain.popularity import (
    CART_ADD_WEIGHT,
    ORDER_WEIGHT,
    VIEW_WEIGHT,
    popularity_score,
    rank_by_popularity,
    score_of,
)
from product_catalog.domain.tree import CategoryTree, CategoryTreeNode, TreeItem

__all__ = [
    # Tree
    "CategoryTree",
    "CategoryTreeNode",
    "TreeItem",
    # Popularity
    "CART_ADD_WEIGHT",
    "ORDER_WEIGHT",
    "VIEW_WEIGHT",
    "popularity_score",
    "rank_by_popularity",
    "score_of",
    # Exceptions
    "DomainError",
    "CategoryError",
    "CategoryNotFoundError",
    "CyclicHierarchyError",
    "HasChildrenError",
    "ImageStoreError",
    "InternalConsistencyError",
    "InvalidArgumentError",
    "InvalidHierarchyError",
    "SlugConflictError",
]
