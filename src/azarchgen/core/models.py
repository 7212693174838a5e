"""Data models and enums for azarchgen."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import LayoutError, MalformedInputError


class ResourceCategory(str, Enum):
    """Catalog categories for resource types."""

    HIERARCHY = "hierarchy"
    COMPUTE = "compute"
    NETWORKING = "networking"
    STORAGE = "storage"
    DATABASES = "databases"
    SECURITY = "security"
    INTEGRATION = "integration"
    AI = "ai"
    ANALYTICS = "analytics"
    MONITORING = "monitoring"
    IDENTITY = "identity"
    MIGRATION = "migration"
    IOT = "iot"
    DEVOPS = "devops"
    WEB = "web"
    MANAGEMENT = "management"
    OTHER = "other"


class NodeKind(str, Enum):
    """Grouping levels of the containment tree."""

    REGION = "region"
    SUBSCRIPTION = "subscription"
    RESOURCE_GROUP = "resourceGroup"
    NETWORK = "network"
    SUBNETWORK = "subnetwork"
    AVAILABILITY_ZONE = "availabilityZone"
    ON_PREMISES = "onPremises"
    GLOBAL_RESOURCES = "globalResources"
    RESOURCE = "resource"


class ConnectionStyle(str, Enum):
    """Visual and semantic class of a connection."""

    PLAIN = "plain"
    DASHED = "dashed"
    LONG_HAUL = "long-haul-circuit"
    TUNNEL = "tunnel"
    PEERING = "peering"

    @classmethod
    def parse(cls, value: str | None) -> ConnectionStyle:
        """Map a style tag (including legacy spellings) to a style.

        Unknown or missing tags fall back to PLAIN.
        """
        if not value:
            return cls.PLAIN
        key = value.strip().lower()
        for style in cls:
            if style.value == key:
                return style
        return _STYLE_ALIASES.get(key, cls.PLAIN)


_STYLE_ALIASES = {
    "solid": ConnectionStyle.PLAIN,
    "expressroute": ConnectionStyle.LONG_HAUL,
    "express-route": ConnectionStyle.LONG_HAUL,
    "long-haul": ConnectionStyle.LONG_HAUL,
    "circuit": ConnectionStyle.LONG_HAUL,
    "vpn": ConnectionStyle.TUNNEL,
}


class WarningKind(str, Enum):
    """Recoverable conditions collected during generation."""

    UNKNOWN_RESOURCE_TYPE = "unknown-resource-type"
    UNRESOLVED_CONNECTION_ENDPOINT = "unresolved-connection-endpoint"
    INVALID_CONTAINMENT_HINT = "invalid-containment-hint"


@dataclass
class GenerationWarning:
    """A recoverable problem found while generating a diagram."""

    kind: WarningKind
    message: str


@dataclass(frozen=True)
class Geometry:
    """Position relative to the parent container plus box size."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class Node:
    """A node of the containment tree.

    Children are owned exclusively. ``parent_name`` is only a name used for
    lookups and never an ownership link.
    """

    kind: NodeKind
    name: str
    resource_type: str | None = None
    label: str | None = None
    is_hub: bool = False
    zone: int | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    parent_name: str | None = None
    geometry: Geometry | None = None
    cell_id: str | None = None

    @property
    def display_label(self) -> str:
        """Text shown on the diagram for this node."""
        return self.label if self.label is not None else self.name

    @property
    def is_container(self) -> bool:
        return self.kind != NodeKind.RESOURCE

    def add_child(self, child: Node) -> Node:
        """Take ownership of ``child`` and return it."""
        child.parent_name = self.name
        self.children.append(child)
        return child

    def children_of_kind(self, kind: NodeKind) -> list[Node]:
        return [child for child in self.children if child.kind == kind]

    def set_geometry(self, geometry: Geometry) -> None:
        """Record layout output; geometry can be assigned only once."""
        if self.geometry is not None:
            raise LayoutError(f"Node '{self.name}' has already been positioned")
        self.geometry = geometry

    def walk(self) -> Iterator[Node]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class Connection:
    """A symbolic edge between two named nodes."""

    source: str
    target: str
    label: str = ""
    style: ConnectionStyle = ConnectionStyle.PLAIN
    synthesized: bool = False


@dataclass
class Architecture:
    """Normalized containment tree for one generation run."""

    title: str
    scopes: list[Node] = field(default_factory=list)
    on_premises: list[Node] = field(default_factory=list)
    global_resources: Node | None = None
    connections: list[Connection] = field(default_factory=list)

    def walk(self) -> Iterator[Node]:
        """Yield every node of the document in emission order."""
        for scope in self.scopes:
            yield from scope.walk()
        for site in self.on_premises:
            yield from site.walk()
        if self.global_resources is not None:
            yield from self.global_resources.walk()

    def resources(self) -> list[Node]:
        return [node for node in self.walk() if node.kind == NodeKind.RESOURCE]


@dataclass
class RegistryEntry:
    """Name index entry produced by layout; does not own the node."""

    cell_id: str
    parent_id: str
    node: Node


@dataclass
class ResolvedConnection:
    """A connection whose endpoints were matched to cell ids."""

    connection: Connection
    source_id: str
    target_id: str


@dataclass
class LayoutResult:
    """Side artifacts of a layout pass."""

    registry: dict[str, RegistryEntry]
    page_width: int
    page_height: int


@dataclass
class GenerationResult:
    """Everything produced by one generation run."""

    xml: str
    architecture: Architecture
    warnings: list[GenerationWarning]
    registry: dict[str, RegistryEntry]
    connections: list[ResolvedConnection]
    page_width: int
    page_height: int
    output_path: Path | None = None


class RawResource(BaseModel):
    """A resource entry as emitted by the upstream parser."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    name: str
    count: int = Field(default=1, ge=1)
    contained_in: str | None = Field(default=None, alias="containedIn")
    region: str | None = None
    subscription: str | None = None
    availability_zone: Any = Field(default=None, alias="availabilityZone")
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("count", mode="before")
    @classmethod
    def default_count(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator("properties", mode="before")
    @classmethod
    def default_properties(cls, value: Any) -> Any:
        return {} if value is None else value


class RawConnection(BaseModel):
    """A connection entry as emitted by the upstream parser."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    label: str | None = None
    style: str | None = None
    type: str | None = None

    @property
    def connection_style(self) -> ConnectionStyle:
        return ConnectionStyle.parse(self.style or self.type)


class SubscriptionSpec(BaseModel):
    """A declared subscription boundary."""

    name: str
    regions: list[str] = Field(default_factory=list)

    @field_validator("regions", mode="before")
    @classmethod
    def default_regions(cls, value: Any) -> Any:
        return [] if value is None else value


class ArchitectureRequest(BaseModel):
    """Input record describing the architecture to draw."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    resources: list[RawResource]
    connections: list[RawConnection] = Field(default_factory=list)
    regions: list[str] = Field(default_factory=list)
    has_on_premises: bool = Field(default=False, alias="hasOnPremises")
    subscriptions: list[SubscriptionSpec] = Field(default_factory=list)
    title: str | None = None
    architecture: str | None = None

    @field_validator("connections", "regions", "subscriptions", mode="before")
    @classmethod
    def default_lists(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("has_on_premises", mode="before")
    @classmethod
    def default_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def parse(cls, data: Any) -> ArchitectureRequest:
        """Validate a decoded record or a JSON document.

        Raises:
            MalformedInputError: If the record is not an object or its
                resource list is missing or invalid.
        """
        if isinstance(data, ArchitectureRequest):
            return data
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise MalformedInputError(f"Input is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedInputError(
                f"Input must be a JSON object, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise MalformedInputError(f"Invalid architecture record: {e}") from e


class GenerationConfig(BaseModel):
    """Configuration for diagram generation."""

    title: str = "Azure Architecture"
    default_region: str = "West Europe"
    default_subscription_name: str = "Azure Subscription"
    on_premises_name: str = "On-Premises Datacenter"
    global_peering_label: str = "Global VNet Peering"
    min_page_width: int = 1500
    min_page_height: int = 800
    page_margin: int = 100
