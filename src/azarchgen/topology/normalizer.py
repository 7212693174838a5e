"""Decide the top-level shape of an architecture and build its scopes."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx

from ..catalog.classifier import ResourceClassifier
from ..catalog.resource_catalog import ResourceCatalog
from ..core.context import GenerationContext
from ..core.models import (
    Architecture,
    ArchitectureRequest,
    Connection,
    ConnectionStyle,
    GenerationConfig,
    Node,
    NodeKind,
    RawResource,
    WarningKind,
)
from .hierarchy_builder import HierarchyBuilder, region_code

logger = logging.getLogger(__name__)

GLOBAL_TYPES = frozenset({"frontDoor", "trafficManager", "dns", "privateDns", "cdn"})
ON_PREMISES_TYPES = frozenset({"localNetworkGateway", "onPremises"})


class ArchitectureNormalizer:
    """Builds the full containment tree from a validated request."""

    def __init__(
        self,
        catalog: ResourceCatalog,
        config: Optional[GenerationConfig] = None,
        builder: Optional[HierarchyBuilder] = None,
    ):
        self.catalog = catalog
        self.config = config or GenerationConfig()
        self.builder = builder or HierarchyBuilder(catalog)
        self.classifier: ResourceClassifier = self.builder.classifier

    def normalize(self, request: ArchitectureRequest, context: GenerationContext) -> Architecture:
        """Build scopes, on-premises sites, global resources and connections.

        Args:
            request: Validated input record.
            context: Per-run context collecting warnings.

        Returns:
            The normalized architecture.
        """
        architecture = Architecture(title=request.title or self.config.title)

        cloud, on_premises, global_resources = self._partition(request)
        architecture.scopes = self._build_scopes(request, cloud, context)

        if request.has_on_premises or on_premises:
            site = Node(
                kind=NodeKind.ON_PREMISES,
                name=self.config.on_premises_name,
                resource_type="onPremises",
            )
            for raw, canonical in on_premises:
                for node in self.builder.expand(raw, canonical):
                    node.kind = NodeKind.RESOURCE
                    site.add_child(node)
            architecture.on_premises.append(site)

        if global_resources:
            bucket = Node(kind=NodeKind.GLOBAL_RESOURCES, name="Global Resources")
            for raw, canonical in global_resources:
                for node in self.builder.expand(raw, canonical):
                    bucket.add_child(node)
            architecture.global_resources = bucket

        architecture.connections = [
            Connection(
                source=c.source,
                target=c.target,
                label=c.label or "",
                style=c.connection_style,
            )
            for c in request.connections
        ]
        if len(request.regions) >= 2:
            architecture.connections.extend(
                self._synthesize_peerings(request, cloud, architecture.connections)
            )

        logger.info(
            f"Normalized architecture '{architecture.title}': {len(architecture.scopes)} scopes, "
            f"{len(architecture.on_premises)} on-premises sites, "
            f"{len(architecture.connections)} connections"
        )
        return architecture

    def _partition(
        self, request: ArchitectureRequest
    ) -> Tuple[List[RawResource], List[Tuple[RawResource, str]], List[Tuple[RawResource, str]]]:
        """Split resources into cloud-scoped, on-premises and global ones."""
        cloud = []
        on_premises = []
        global_resources = []
        for raw in request.resources:
            canonical = self.classifier.classify(raw.type)
            hinted_on_premises = (
                raw.contained_in is not None
                and self.classifier.classify(raw.contained_in) == "onPremises"
            )
            if canonical is not None and (
                hinted_on_premises or (request.has_on_premises and canonical in ON_PREMISES_TYPES)
            ):
                on_premises.append((raw, canonical))
            elif canonical in GLOBAL_TYPES:
                global_resources.append((raw, canonical))
            else:
                cloud.append(raw)
        return cloud, on_premises, global_resources

    def _build_scopes(
        self, request: ArchitectureRequest, resources: List[RawResource], context: GenerationContext
    ) -> List[Node]:
        regions = request.regions
        subscriptions = request.subscriptions

        if len(subscriptions) > 1:
            return self._build_subscriptions(request, resources, context)

        if len(subscriptions) == 1:
            spec = subscriptions[0]
            sub_regions = spec.regions or regions or [self.config.default_region]
            return [self._build_subscription(spec.name, sub_regions, resources, context)]

        if len(regions) > 1:
            return self._build_regions(regions, resources, context)

        region = regions[0] if regions else self.config.default_region
        return [
            self._build_subscription(self.config.default_subscription_name, [region], resources, context)
        ]

    def _build_subscriptions(
        self, request: ArchitectureRequest, resources: List[RawResource], context: GenerationContext
    ) -> List[Node]:
        declared = {s.name: s for s in request.subscriptions}
        declared_lower = {s.name.lower(): s.name for s in request.subscriptions}
        buckets: Dict[str, List[RawResource]] = {name: [] for name in declared}
        untagged = []

        for raw in resources:
            if not raw.subscription:
                untagged.append(raw)
                continue
            name = declared_lower.get(raw.subscription.lower())
            if name is None:
                context.warn(
                    WarningKind.INVALID_CONTAINMENT_HINT,
                    f"'{raw.name}' references unknown subscription '{raw.subscription}'; "
                    f"placing it in '{self.config.default_subscription_name}'",
                )
                untagged.append(raw)
            else:
                buckets[name].append(raw)

        scopes = []
        for name, spec in declared.items():
            sub_regions = spec.regions or request.regions or [self.config.default_region]
            scopes.append(self._build_subscription(name, sub_regions, buckets[name], context))

        if untagged:
            default_regions = request.regions or [self.config.default_region]
            scopes.insert(
                0,
                self._build_subscription(
                    self.config.default_subscription_name, default_regions, untagged, context
                ),
            )
        return scopes

    def _build_subscription(
        self,
        name: str,
        regions: Sequence[str],
        resources: List[RawResource],
        context: GenerationContext,
    ) -> Node:
        subscription = Node(kind=NodeKind.SUBSCRIPTION, name=name, resource_type="subscription")
        if len(regions) > 1:
            children = self._build_regions(regions, resources, context)
        else:
            children = self.builder.build(resources, regions[0], context)
        for child in children:
            subscription.add_child(child)
        return subscription

    def _build_regions(
        self, regions: Sequence[str], resources: List[RawResource], context: GenerationContext
    ) -> List[Node]:
        buckets = self._split_by_region(regions, resources, context)
        nodes = []
        for index, region in enumerate(regions):
            primary = index == 0 or "primary" in region.lower()
            node = Node(
                kind=NodeKind.REGION,
                name=region,
                label=f"{region} (Primary)" if primary else region,
                resource_type="region",
                properties={"code": region_code(region), "primary": primary},
            )
            for group in self.builder.build(buckets[region], region, context):
                node.add_child(group)
            nodes.append(node)
        return nodes

    def _split_by_region(
        self, regions: Sequence[str], resources: List[RawResource], context: GenerationContext
    ) -> Dict[str, List[RawResource]]:
        """Route resources to their tagged region; untagged ones go to the primary region."""
        buckets: Dict[str, List[RawResource]] = {region: [] for region in regions}
        for raw in resources:
            region = self._match_region(raw.region, regions)
            if region is None:
                if raw.region:
                    context.warn(
                        WarningKind.INVALID_CONTAINMENT_HINT,
                        f"'{raw.name}' references unknown region '{raw.region}'; "
                        f"placing it in '{regions[0]}'",
                    )
                region = regions[0]
            buckets[region].append(raw)
        return buckets

    @staticmethod
    def _match_region(tag: Optional[str], regions: Sequence[str]) -> Optional[str]:
        if not tag:
            return None
        lowered = tag.strip().lower()
        for region in regions:
            if region.lower() == lowered:
                return region
        return None

    def _synthesize_peerings(
        self,
        request: ArchitectureRequest,
        resources: List[RawResource],
        declared: List[Connection],
    ) -> List[Connection]:
        """Peer every pair of hub networks in different regions that is not yet connected.

        A hub's region is the one it is drawn in: untagged hubs and hubs
        with an unknown region tag belong to the primary region.
        """
        hubs: List[Tuple[str, str]] = []
        for raw in resources:
            if self.classifier.classify(raw.type) != "hubVnet":
                continue
            region = self._match_region(raw.region, request.regions) or request.regions[0]
            for node in self.builder.expand(raw, "hubVnet"):
                hubs.append((node.name, region))

        graph = nx.Graph()
        graph.add_edges_from((c.source, c.target) for c in declared)

        peerings = []
        for i, (first, first_region) in enumerate(hubs):
            for second, second_region in hubs[i + 1 :]:
                if first == second or first_region == second_region:
                    continue
                if graph.has_edge(first, second):
                    continue
                graph.add_edge(first, second)
                peerings.append(
                    Connection(
                        source=first,
                        target=second,
                        label=self.config.global_peering_label,
                        style=ConnectionStyle.PEERING,
                        synthesized=True,
                    )
                )
        if peerings:
            logger.info(f"Synthesized {len(peerings)} hub peering connections")
        return peerings
