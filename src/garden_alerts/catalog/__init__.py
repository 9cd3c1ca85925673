"""Item catalog, its refresh client and category policies."""
from garden_alerts.catalog.catalog import (CatalogClient, ItemCatalog,
                                           parse_catalog_document)
from garden_alerts.catalog.classification import (CategoryPolicy,
                                                  ExplicitTypePolicy,
                                                  KeywordCategoryPolicy)

__all__ = [
    "CatalogClient",
    "CategoryPolicy",
    "ExplicitTypePolicy",
    "ItemCatalog",
    "KeywordCategoryPolicy",
    "parse_catalog_document",
]
