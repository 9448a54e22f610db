"""Domain exceptions.

All domain-level errors that represent business rule violations.
These exceptions are raised by the category tree and the application
service when invariants are violated or invalid operations are attempted.
Each error carries a machine-readable ``code`` that services copy into
their result objects.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Category Errors
# ============================================================================


class CategoryError(DomainError):
    """Base class for category-related errors."""

    code = "CATEGORY_ERROR"


class CategoryNotFoundError(CategoryError):
    """Raised when a category id or slug does not exist."""

    code = "NOT_FOUND"

    def __init__(self, category_id: int | None = None, slug: str | None = None) -> None:
        """Initialize category not found error.

        Args:
            category_id: ID that was looked up.
            slug: Slug that was looked up.
        """
        if slug is not None:
            message = f"Category with slug '{slug}' not found"
        else:
            message = f"Category not found: {category_id}"
        super().__init__(message, details={"category_id": category_id, "slug": slug})


class InvalidHierarchyError(CategoryError):
    """Raised when a category is made its own parent."""

    code = "INVALID_HIERARCHY"

    def __init__(self, category_id: int) -> None:
        """Initialize invalid hierarchy error.

        Args:
            category_id: ID of the category.
        """
        super().__init__(
            f"Category {category_id} cannot be its own parent",
            details={"category_id": category_id},
        )


class CyclicHierarchyError(CategoryError):
    """Raised when re-parenting would create a cycle."""

    code = "CYCLIC_HIERARCHY"

    def __init__(self, category_id: int, parent_id: int) -> None:
        """Initialize cyclic hierarchy error.

        Args:
            category_id: ID of the category being moved.
            parent_id: Requested parent, a descendant of the category.
        """
        super().__init__(
            f"Setting parent {parent_id} on category {category_id} would create a cycle",
            details={"category_id": category_id, "parent_id": parent_id},
        )


class HasChildrenError(CategoryError):
    """Raised when deleting a category that still has subcategories."""

    code = "HAS_CHILDREN"

    def __init__(self, category_id: int, child_count: int) -> None:
        """Initialize has children error.

        Args:
            category_id: ID of the category.
            child_count: Number of direct subcategories.
        """
        super().__init__(
            f"Category {category_id} has {child_count} subcategories and cannot be deleted",
            details={"category_id": category_id, "child_count": child_count},
        )


class InvalidArgumentError(CategoryError):
    """Raised when an operation receives an out-of-range argument."""

    code = "INVALID_ARGUMENT"

    def __init__(self, argument: str, value: Any, reason: str) -> None:
        """Initialize invalid argument error.

        Args:
            argument: Name of the argument.
            value: The rejected value.
            reason: Explanation of why the value is invalid.
        """
        super().__init__(
            f"Invalid {argument} {value!r}: {reason}",
            details={"argument": argument, "value": value, "reason": reason},
        )


class InternalConsistencyError(CategoryError):
    """Raised when stored data already violates the forest invariant."""

    code = "INTERNAL_CONSISTENCY"

    def __init__(self, reason: str, category_ids: list[int] | None = None) -> None:
        """Initialize internal consistency error.

        Args:
            reason: What was detected.
            category_ids: Categories involved, when known.
        """
        super().__init__(
            f"Category hierarchy is corrupted: {reason}",
            details={"category_ids": category_ids or []},
        )


class SlugConflictError(CategoryError):
    """Raised when an explicitly requested slug is already taken."""

    code = "SLUG_CONFLICT"

    def __init__(self, slug: str) -> None:
        """Initialize slug conflict error.

        Args:
            slug: The conflicting slug.
        """
        super().__init__(
            f"Slug '{slug}' is already in use",
            details={"slug": slug},
        )


# ============================================================================
# Image Store Errors
# ============================================================================


class ImageStoreError(DomainError):
    """Raised when the image store cannot store an image."""

    code = "IMAGE_STORE_ERROR"
