"""Azure resource type catalog."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from ..core.errors import CatalogError
from ..core.models import ResourceCategory

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "resources.json"

# Nominal size used for types the catalog does not describe.
DEFAULT_SIZE = (64, 64)


@dataclass(frozen=True)
class CatalogEntry:
    """Static metadata for one canonical resource type."""

    type: str
    display_name: str
    icon: str
    width: float
    height: float
    category: ResourceCategory = ResourceCategory.OTHER
    can_contain: FrozenSet[str] = frozenset()
    contained_by: FrozenSet[str] = frozenset()

    @property
    def size(self) -> Tuple[int, int]:
        return int(round(self.width)), int(round(self.height))

    @property
    def subnet_only(self) -> bool:
        """True when the type lives in a subnet and never directly in a resource group."""
        return "subnet" in self.contained_by and "resourceGroup" not in self.contained_by

    def can_be_contained_by(self, container_type: str) -> bool:
        return container_type in self.contained_by


class ResourceCatalog:
    """Read-only lookup of resource type metadata and free-text aliases."""

    def __init__(
        self,
        entries: Mapping[str, CatalogEntry],
        aliases: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the catalog.

        Args:
            entries: Canonical type id to catalog entry.
            aliases: Free-text synonym to canonical type id. Aliases that
                point at unknown types are ignored.
        """
        self._entries = MappingProxyType(dict(entries))
        self._by_lower = {key.lower(): key for key in self._entries}

        cleaned = {}
        for alias, target in (aliases or {}).items():
            if target not in self._entries:
                logger.debug(f"Ignoring alias '{alias}' for unknown type '{target}'")
                continue
            cleaned[alias.strip().lower()] = target
        self._aliases = MappingProxyType(cleaned)

        logger.debug(
            f"Catalog loaded with {len(self._entries)} types and {len(self._aliases)} aliases"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResourceCatalog":
        """Build a catalog from the JSON document layout.

        Args:
            data: Mapping with a ``types`` table and an optional ``aliases`` table.

        Returns:
            A new catalog.
        """
        types = data.get("types")
        if not isinstance(types, Mapping):
            raise CatalogError("Catalog data must contain a 'types' mapping")

        entries = {}
        for type_id, spec in types.items():
            try:
                entries[type_id] = CatalogEntry(
                    type=type_id,
                    display_name=spec.get("display_name", type_id),
                    icon=spec["icon"],
                    width=spec.get("width", DEFAULT_SIZE[0]),
                    height=spec.get("height", DEFAULT_SIZE[1]),
                    category=ResourceCategory(spec.get("category", "other")),
                    can_contain=frozenset(spec.get("can_contain", ())),
                    contained_by=frozenset(spec.get("contained_by", ())),
                )
            except (KeyError, ValueError, AttributeError) as e:
                raise CatalogError(f"Invalid catalog entry '{type_id}': {e}") from e

        return cls(entries, data.get("aliases") or {})

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "ResourceCatalog":
        """Load a catalog from a JSON file (defaults to the bundled catalog)."""
        catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
        logger.info(f"Loading resource catalog from {catalog_path}")
        try:
            with open(catalog_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Cannot load catalog {catalog_path}: {e}") from e
        return cls.from_dict(data)

    @property
    def entries(self) -> Mapping[str, CatalogEntry]:
        return self._entries

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._aliases

    def __contains__(self, type_id: str) -> bool:
        return type_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, type_id: Optional[str]) -> Optional[CatalogEntry]:
        """Return the entry for a canonical type id, if any."""
        if type_id is None:
            return None
        return self._entries.get(type_id)

    def canonical_key(self, value: str) -> Optional[str]:
        """Case-insensitive match against canonical type ids."""
        return self._by_lower.get(value.lower())

    def alias_target(self, value: str) -> Optional[str]:
        """Case-insensitive alias lookup."""
        return self._aliases.get(value.lower())

    def size_of(self, type_id: Optional[str]) -> Tuple[int, int]:
        """Nominal box size for a type, or the default size if unknown."""
        entry = self.get(type_id)
        return entry.size if entry else DEFAULT_SIZE

    def types(self) -> List[str]:
        return list(self._entries)

    def by_category(self, category: Union[ResourceCategory, str]) -> List[CatalogEntry]:
        """All entries in a category, in catalog order."""
        category = ResourceCategory(category)
        return [e for e in self._entries.values() if e.category == category]

    def categories(self) -> Dict[str, int]:
        """Number of types per category."""
        counts: Dict[str, int] = {}
        for entry in self._entries.values():
            counts[entry.category.value] = counts.get(entry.category.value, 0) + 1
        return counts
