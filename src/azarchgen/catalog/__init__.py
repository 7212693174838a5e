"""Resource catalog and type classification."""

from .classifier import ResourceClassifier
from .resource_catalog import DEFAULT_CATALOG_PATH, CatalogEntry, ResourceCatalog

__all__ = ["CatalogEntry", "DEFAULT_CATALOG_PATH", "ResourceCatalog", "ResourceClassifier"]
