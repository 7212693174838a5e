"""Resolve free-text resource type strings to canonical catalog types."""

import logging
from typing import Optional

from ..core.context import GenerationContext
from ..core.models import WarningKind
from .resource_catalog import ResourceCatalog

logger = logging.getLogger(__name__)


class ResourceClassifier:
    """Maps raw type strings to canonical catalog type ids."""

    def __init__(self, catalog: ResourceCatalog):
        self.catalog = catalog

    def classify(self, type_string: Optional[str]) -> Optional[str]:
        """Resolve a type string.

        Exact canonical match (case-insensitive) wins over the alias table.

        Args:
            type_string: Raw type such as ``"hubVnet"``, ``"Key Vault"`` or ``"fw"``.

        Returns:
            Canonical type id, or None when unresolved.
        """
        if not type_string:
            return None
        value = type_string.strip()
        if not value:
            return None
        return self.catalog.canonical_key(value) or self.catalog.alias_target(value)

    def classify_or_warn(
        self, type_string: str, resource_name: str, context: GenerationContext
    ) -> Optional[str]:
        """Resolve a type string, recording a warning when it is unknown."""
        canonical = self.classify(type_string)
        if canonical is None:
            context.warn(
                WarningKind.UNKNOWN_RESOURCE_TYPE,
                f"Skipping '{resource_name}': unknown resource type '{type_string}'",
            )
        return canonical
