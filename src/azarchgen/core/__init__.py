"""Core azarchgen module."""

from .context import GenerationContext
from .errors import AzArchGenError, CatalogError, LayoutError, MalformedInputError
from .generator import ArchGen
from .models import (
    Architecture,
    ArchitectureRequest,
    Connection,
    ConnectionStyle,
    GenerationConfig,
    GenerationResult,
    GenerationWarning,
    Geometry,
    Node,
    NodeKind,
    RawConnection,
    RawResource,
    RegistryEntry,
    ResolvedConnection,
    ResourceCategory,
    WarningKind,
)

__all__ = [
    "ArchGen",
    "Architecture",
    "ArchitectureRequest",
    "AzArchGenError",
    "CatalogError",
    "Connection",
    "ConnectionStyle",
    "GenerationConfig",
    "GenerationContext",
    "GenerationResult",
    "GenerationWarning",
    "Geometry",
    "LayoutError",
    "MalformedInputError",
    "Node",
    "NodeKind",
    "RawConnection",
    "RawResource",
    "RegistryEntry",
    "ResolvedConnection",
    "ResourceCategory",
    "WarningKind",
]
