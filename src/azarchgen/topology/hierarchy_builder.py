"""Build resource group / network / subnet containment trees for one scope."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..catalog.classifier import ResourceClassifier
from ..catalog.resource_catalog import ResourceCatalog
from ..core.context import GenerationContext
from ..core.models import Node, NodeKind, RawResource, WarningKind

logger = logging.getLogger(__name__)

NETWORK_TYPES = frozenset({"vnet", "hubVnet"})
SUBNET_TYPE = "subnet"

# Subnets every hub network gets when it declares none.
HUB_SUBNETS = (
    ("AzureFirewallSubnet", "10.0.1.0/24"),
    ("GatewaySubnet", "10.0.2.0/24"),
    ("AzureBastionSubnet", "10.0.3.0/24"),
)
BASTION_SUBNET = "AzureBastionSubnet"

PREFERRED_SUBNETS = {
    "firewall": "AzureFirewallSubnet",
    "bastion": "AzureBastionSubnet",
    "vpnGateway": "GatewaySubnet",
}

HUB_GROUP_TYPES = frozenset({"expressRoute", "publicIp", "routeTable", "ddosProtection"})
WORKLOAD_GROUP_TYPES = frozenset({"nsg", "asg"})
SHARED_GROUP_TYPES = frozenset(
    {
        "storageAccount",
        "cosmosDb",
        "sqlServer",
        "sqlDatabase",
        "keyVault",
        "redis",
        "containerRegistry",
        "recoveryVault",
        "openAI",
        "machineLearning",
    }
)

REGION_CODES = {
    "west europe": "weu",
    "north europe": "neu",
    "east us": "eus",
    "east us 2": "eus2",
    "west us": "wus",
    "west us 2": "wus2",
    "central us": "cus",
    "uk south": "uks",
    "uk west": "ukw",
    "germany west central": "gwc",
    "france central": "frc",
    "sweden central": "swc",
    "norway east": "noe",
    "switzerland north": "chn",
    "australia east": "aue",
    "southeast asia": "sea",
    "japan east": "jpe",
}

DEFAULT_ZONES = (1, 2, 3)

_TRAILING_INDEX = re.compile(r"-?\d+$")
_HUB_PREFIX = re.compile(r"^vnet-hub-?", re.IGNORECASE)


def region_code(region: Optional[str]) -> str:
    """Short code for an Azure region name (``West Europe`` -> ``weu``)."""
    if not region:
        return "weu"
    key = region.strip().lower()
    if key in REGION_CODES:
        return REGION_CODES[key]
    return key.replace(" ", "")[:3]


def expanded_names(name: str, count: int) -> List[str]:
    """Sibling names for a resource repeated ``count`` times.

    A trailing numeric suffix is stripped from the base name and a
    zero-padded index appended, e.g. ``vm-web-1`` x3 gives
    ``vm-web-01``, ``vm-web-02``, ``vm-web-03``. A count of 1 keeps the name.
    """
    if count <= 1:
        return [name]
    base = _TRAILING_INDEX.sub("", name)
    return [f"{base}-{index:02d}" for index in range(1, count + 1)]


def _coerce_zone(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _zone_cycle(properties: Dict[str, Any]) -> Optional[List[int]]:
    """Zones to spread repeated copies across, if the resource asks for it."""
    zones = properties.get("availabilityZones")
    if isinstance(zones, (list, tuple)):
        parsed = [z for z in (_coerce_zone(v) for v in zones) if z is not None]
        if parsed:
            return parsed
    if properties.get("zoneRedundant") is True:
        return list(DEFAULT_ZONES)
    return None


@dataclass
class _Pending:
    """A built node waiting for placement, with its containment hint."""

    node: Node
    hint: Optional[str]


class HierarchyBuilder:
    """Turns a flat resource list for one scope into resource groups."""

    def __init__(self, catalog: ResourceCatalog, classifier: Optional[ResourceClassifier] = None):
        self.catalog = catalog
        self.classifier = classifier or ResourceClassifier(catalog)

    def expand(self, raw: RawResource, canonical: str) -> List[Node]:
        """Expand one raw resource into individually named nodes.

        Args:
            raw: Resource record from the input.
            canonical: Its classified catalog type.

        Returns:
            One node per requested copy.
        """
        names = expanded_names(raw.name, raw.count)
        explicit_zone = _coerce_zone(raw.availability_zone)
        if explicit_zone is None:
            explicit_zone = _coerce_zone(raw.properties.get("availabilityZone"))
        cycle = _zone_cycle(raw.properties) if len(names) > 1 else None

        nodes = []
        for index, name in enumerate(names):
            properties = dict(raw.properties)
            zone = explicit_zone
            if zone is None and cycle:
                zone = cycle[index % len(cycle)]
            if zone is not None:
                properties["availabilityZone"] = zone
            if canonical in NETWORK_TYPES:
                kind = NodeKind.NETWORK
            elif canonical == SUBNET_TYPE:
                kind = NodeKind.SUBNETWORK
            else:
                kind = NodeKind.RESOURCE
            nodes.append(
                Node(
                    kind=kind,
                    name=name,
                    resource_type=canonical,
                    is_hub=canonical == "hubVnet",
                    zone=zone,
                    properties=properties,
                )
            )
        return nodes

    def build(
        self,
        raw_resources: Sequence[RawResource],
        scope_label: Optional[str],
        context: GenerationContext,
    ) -> List[Node]:
        """Build the resource groups for one scope.

        Args:
            raw_resources: Resources already filtered to this scope.
            scope_label: Region name of the scope; its short code suffixes
                the resource group names.
            context: Per-run context collecting warnings.

        Returns:
            Resource group nodes in a stable order (hub, workload, shared,
            catch-all).
        """
        networks: List[Node] = []
        subnets: List[_Pending] = []
        others: List[_Pending] = []

        for raw in raw_resources:
            canonical = self.classifier.classify_or_warn(raw.type, raw.name, context)
            if canonical is None:
                continue
            if raw.availability_zone is not None and _coerce_zone(raw.availability_zone) is None:
                context.warn(
                    WarningKind.INVALID_CONTAINMENT_HINT,
                    f"'{raw.name}' has invalid availability zone '{raw.availability_zone}'; "
                    "ignoring it",
                )
            for node in self.expand(raw, canonical):
                if node.kind == NodeKind.NETWORK:
                    networks.append(node)
                elif node.kind == NodeKind.SUBNETWORK:
                    subnets.append(_Pending(node, raw.contained_in))
                else:
                    others.append(_Pending(node, raw.contained_in))

        orphans = self._attach_subnets(networks, subnets, context)
        self._add_hub_subnets(networks)
        group_level = self._place_resources(networks, others, orphans, context)
        self._add_bastions(networks)
        for network in networks:
            for subnet in network.children_of_kind(NodeKind.SUBNETWORK):
                self._group_by_zone(subnet)

        groups = self._partition_groups(networks, group_level + orphans, region_code(scope_label))
        logger.info(
            f"Built {len(groups)} resource groups for scope '{scope_label}' "
            f"({len(networks)} networks, {len(raw_resources)} input resources)"
        )
        return groups

    def _attach_subnets(
        self, networks: List[Node], subnets: List[_Pending], context: GenerationContext
    ) -> List[Node]:
        """Attach subnets to the network named by their hint; return orphans."""
        by_name = {n.name: n for n in networks}
        by_lower = {n.name.lower(): n for n in networks}
        orphans = []

        for pending in subnets:
            subnet = pending.node
            hint = pending.hint
            network = None
            if hint:
                network = by_name.get(hint) or by_lower.get(hint.lower())
            if network is None:
                context.warn(
                    WarningKind.INVALID_CONTAINMENT_HINT,
                    f"Subnet '{subnet.name}' references unknown network '{hint}'; "
                    "placing it at resource group level",
                )
                subnet.kind = NodeKind.RESOURCE
                orphans.append(subnet)
                continue
            existing = {s.name for s in network.children_of_kind(NodeKind.SUBNETWORK)}
            if subnet.name in existing:
                context.warn(
                    WarningKind.INVALID_CONTAINMENT_HINT,
                    f"Duplicate subnet '{subnet.name}' in network '{network.name}' ignored",
                )
                continue
            network.add_child(subnet)
        return orphans

    def _add_hub_subnets(self, networks: List[Node]) -> None:
        for network in networks:
            if not network.is_hub or network.children_of_kind(NodeKind.SUBNETWORK):
                continue
            logger.info(f"Adding standard subnets to hub network '{network.name}'")
            for name, prefix in HUB_SUBNETS:
                network.add_child(
                    Node(
                        kind=NodeKind.SUBNETWORK,
                        name=name,
                        resource_type=SUBNET_TYPE,
                        properties={"addressPrefix": prefix},
                    )
                )

    def _place_resources(
        self,
        networks: List[Node],
        others: List[_Pending],
        orphans: List[Node],
        context: GenerationContext,
    ) -> List[Node]:
        """Put resources into subnets where possible; return group-level ones."""
        subnet_index: Dict[str, Node] = {}
        for network in networks:
            for subnet in network.children_of_kind(NodeKind.SUBNETWORK):
                subnet_index.setdefault(subnet.name, subnet)
        subnet_lower = {name.lower(): s for name, s in reversed(list(subnet_index.items()))}
        network_lower = {n.name.lower(): n for n in reversed(networks)}
        orphan_names = {o.name.lower() for o in orphans}

        group_level = []
        for pending in others:
            node = pending.node
            entry = self.catalog.get(node.resource_type)
            hint = pending.hint
            target = None

            if hint:
                target = subnet_index.get(hint) or subnet_lower.get(hint.lower())
                if target is None and hint.lower() in network_lower and entry is not None:
                    if entry.can_be_contained_by(SUBNET_TYPE):
                        target = self._preferred_subnet(
                            [network_lower[hint.lower()]], node.resource_type
                        )
                elif target is None and hint.lower() not in orphan_names:
                    context.warn(
                        WarningKind.INVALID_CONTAINMENT_HINT,
                        f"'{node.name}' references unknown container '{hint}'",
                    )

            if target is None and entry is not None and entry.subnet_only:
                target = self._preferred_subnet(networks, node.resource_type)

            if target is not None:
                target.add_child(node)
            else:
                group_level.append(node)
        return group_level

    def _preferred_subnet(self, networks: List[Node], resource_type: Optional[str]) -> Optional[Node]:
        """Type-appropriate subnet if one exists, else the first network's first subnet."""
        preferred = PREFERRED_SUBNETS.get(resource_type or "")
        if preferred:
            for network in networks:
                for subnet in network.children_of_kind(NodeKind.SUBNETWORK):
                    if subnet.name == preferred:
                        return subnet
        for network in networks:
            network_subnets = network.children_of_kind(NodeKind.SUBNETWORK)
            if network_subnets:
                return network_subnets[0]
        return None

    def _add_bastions(self, networks: List[Node]) -> None:
        for network in networks:
            if not network.is_hub:
                continue
            for subnet in network.children_of_kind(NodeKind.SUBNETWORK):
                if subnet.name != BASTION_SUBNET or subnet.children:
                    continue
                suffix = _HUB_PREFIX.sub("", network.name) or "main"
                name = f"bas-hub-{suffix}"
                logger.info(f"Adding bastion '{name}' to hub network '{network.name}'")
                subnet.add_child(Node(kind=NodeKind.RESOURCE, name=name, resource_type="bastion"))

    def _group_by_zone(self, subnet: Node) -> None:
        """Replace zone-tagged resources with zone groups when 2+ zones are present."""
        zoned: Dict[int, List[Node]] = {}
        flat = []
        for child in subnet.children:
            if child.kind == NodeKind.RESOURCE and child.zone is not None:
                zoned.setdefault(child.zone, []).append(child)
            else:
                flat.append(child)
        if len(zoned) < 2:
            return

        subnet.children = []
        for zone in sorted(zoned):
            group = subnet.add_child(
                Node(
                    kind=NodeKind.AVAILABILITY_ZONE,
                    name=f"AZ-{zone}-{subnet.name}",
                    label=f"Availability Zone {zone}",
                    resource_type="availabilityZone",
                    zone=zone,
                )
            )
            for resource in zoned[zone]:
                group.add_child(resource)
        for child in flat:
            subnet.add_child(child)

    def _partition_groups(self, networks: List[Node], resources: List[Node], code: str) -> List[Node]:
        hubs = [n for n in networks if n.is_hub]
        spokes = [n for n in networks if not n.is_hub]
        remaining = list(resources)
        groups = []

        def take(types) -> List[Node]:
            taken = [r for r in remaining if r.resource_type in types]
            for r in taken:
                remaining.remove(r)
            return taken

        if hubs:
            groups.append(self._group(f"rg-hub-{code}", hubs + take(HUB_GROUP_TYPES)))
        if spokes:
            groups.append(self._group(f"rg-workload-{code}", spokes + take(WORKLOAD_GROUP_TYPES)))
        shared = take(SHARED_GROUP_TYPES)
        if shared:
            groups.append(self._group(f"rg-shared-{code}", shared))
        if remaining:
            name = f"rg-services-{code}" if groups else f"rg-main-{code}"
            groups.append(self._group(name, remaining))
        if not groups:
            groups.append(self._group(f"rg-main-{code}", []))
        return groups

    def _group(self, name: str, members: List[Node]) -> Node:
        group = Node(kind=NodeKind.RESOURCE_GROUP, name=name, resource_type="resourceGroup")
        for member in members:
            group.add_child(member)
        return group
