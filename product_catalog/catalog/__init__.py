"""Category Catalog.

Provides category persistence, the category application service and
taxonomy seeding.
"""

from product_catalog.catalog.models import Category
from product_catalog.catalog.repository import CategoryRepository
from product_catalog.catalog.service import (
    CategoryData,
    CategoryListResult,
    CategoryRef,
    CategoryResult,
    CategoryService,
    CategoryShortInfo,
    CountResult,
    ImageUpload,
    OperationResult,
    PopularCategoriesResult,
    PopularCategory,
    SeedResult,
    ShortInfoResult,
    TreeResult,
    get_category_service,
)
from product_catalog.catalog.slugs import generate_slug
from product_catalog.catalog.taxonomy import TaxonomyEntry, TaxonomyParser

__all__ = [
    # Models
    "Category",
    # Repository
    "CategoryRepository",
    # Service
    "CategoryService",
    "get_category_service",
    "CategoryData",
    "ImageUpload",
    # Read models
    "CategoryRef",
    "CategoryShortInfo",
    "PopularCategory",
    # Results
    "CategoryResult",
    "CategoryListResult",
    "CountResult",
    "OperationResult",
    "PopularCategoriesResult",
    "SeedResult",
    "ShortInfoResult",
    "TreeResult",
    # Slugs
    "generate_slug",
    # Taxonomy
    "TaxonomyEntry",
    "TaxonomyParser",
]
