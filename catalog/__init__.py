"""Catalog 모듈 - 내장 쿼리 목록"""

from catalog.model import Category, Query, header_to_key
from catalog.registry import (
    DEFAULT_CATALOG_PATH,
    HOST_DISPLAY_MODES,
    USER_DISPLAY_MODES,
    QueryCatalog,
    load_catalog,
)
from catalog.exception import (
    CatalogError,
    CatalogLoadError,
    InvalidCategoryError,
    QueryNotFoundError,
)

__all__ = [
    "Category",
    "Query",
    "header_to_key",
    "DEFAULT_CATALOG_PATH",
    "HOST_DISPLAY_MODES",
    "USER_DISPLAY_MODES",
    "QueryCatalog",
    "load_catalog",
    "CatalogError",
    "CatalogLoadError",
    "InvalidCategoryError",
    "QueryNotFoundError",
]
