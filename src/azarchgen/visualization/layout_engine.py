"""Size and position every node of a normalized architecture."""

import logging
import math
from typing import Dict, List, Optional, Tuple

from ..catalog.resource_catalog import ResourceCatalog
from ..core.context import GenerationContext
from ..core.models import (
    Architecture,
    GenerationConfig,
    Geometry,
    LayoutResult,
    Node,
    NodeKind,
    RegistryEntry,
)

logger = logging.getLogger(__name__)

ROOT_CELL_ID = "1"

Size = Tuple[int, int]


class LayoutEngine:
    """Bottom-up sizing followed by top-down placement.

    Geometry is relative to the parent container, which is what draw.io
    expects for nested cells.
    """

    # Resource grids
    COLUMN_WIDTH = 130
    ROW_HEIGHT = 110
    SUBNET_COLUMNS = 2
    GROUP_COLUMNS = 4

    # Subnets and zone boxes
    SUBNET_PADDING = 15
    SUBNET_HEADER = 45
    SUBNET_MIN = (150, 100)
    ZONE_MIN = (150, 110)
    ZONE_HEADER = 40

    # Networks
    NETWORK_GUTTER = 20
    NETWORK_HEADER = 50
    HUB_MIN_WIDTH = 400
    HUB_MIN_SUBNET_HEIGHT = 100
    SPOKE_MIN = (300, 150)

    # Resource groups
    GROUP_MIN = (300, 200)
    GROUP_NETWORK_GUTTER = 30
    GROUP_NETWORK_TOP = 40
    GROUP_GRID_TOP = 50

    # Regions and subscriptions
    REGION_MIN = (400, 400)
    REGION_GROUP_GUTTER = 40
    SUBSCRIPTION_MIN = (400, 200)
    SUBSCRIPTION_CHILD_X = 70
    SUBSCRIPTION_REGION_GUTTER = 60
    SUBSCRIPTION_GROUP_GUTTER = 40

    # Page
    ORIGIN = (50, 50)
    SCOPE_GUTTER = 80
    ON_PREMISES_WIDTH = 350
    ON_PREMISES_MIN_HEIGHT = 200
    ON_PREMISES_STEP = 400
    ON_PREMISES_ROW = 85
    ON_PREMISES_GAP = 60
    GLOBAL_ORIGIN = (50, 10)
    GLOBAL_STEP = 100

    def __init__(self, catalog: ResourceCatalog, config: Optional[GenerationConfig] = None):
        self.catalog = catalog
        self.config = config or GenerationConfig()

    def layout(self, architecture: Architecture, context: GenerationContext) -> LayoutResult:
        """Assign geometry and cell ids to every node.

        Args:
            architecture: Normalized tree; none of its nodes may be positioned yet.
            context: Per-run context supplying cell ids.

        Returns:
            Name registry and page size.
        """
        run = _LayoutRun(self, context)
        result = run.execute(architecture)
        logger.info(
            f"Laid out {len(result.registry)} named cells on a "
            f"{result.page_width}x{result.page_height} page"
        )
        return result


class _LayoutRun:
    """State of one layout call: size memo and name registry."""

    def __init__(self, engine: LayoutEngine, context: GenerationContext):
        self.engine = engine
        self.catalog = engine.catalog
        self.context = context
        self.sizes: Dict[int, Size] = {}
        self.registry: Dict[str, RegistryEntry] = {}
        self.right = 0
        self.bottom = 0

    def execute(self, architecture: Architecture) -> LayoutResult:
        e = self.engine
        x, y = e.ORIGIN
        cloud_height = 0
        for scope in architecture.scopes:
            width, height = self.size(scope)
            self.place(scope, ROOT_CELL_ID, x, y)
            self._extend(x + width, y + height)
            cloud_height = max(cloud_height, height)
            x += width + e.SCOPE_GUTTER
        cloud_right = self.right

        if architecture.on_premises:
            site_y = e.ORIGIN[1] + cloud_height + e.ON_PREMISES_GAP
            total = len(architecture.on_premises) * e.ON_PREMISES_STEP
            site_x = max(e.ORIGIN[0], e.ORIGIN[0] + (cloud_right - e.ORIGIN[0] - total) // 2)
            for site in architecture.on_premises:
                width, height = self.size(site)
                self.place(site, ROOT_CELL_ID, site_x, site_y)
                self._extend(site_x + width, site_y + height)
                site_x += e.ON_PREMISES_STEP

        if architecture.global_resources is not None:
            gx, gy = e.GLOBAL_ORIGIN
            for index, resource in enumerate(architecture.global_resources.children):
                width, height = self.size(resource)
                rx = gx + index * e.GLOBAL_STEP
                self.place(resource, ROOT_CELL_ID, rx, gy)
                self._extend(rx + width, gy + height)

        config = e.config
        page_width = max(config.min_page_width, self.right + config.page_margin)
        page_height = max(config.min_page_height, self.bottom + config.page_margin)
        return LayoutResult(registry=self.registry, page_width=page_width, page_height=page_height)

    def _extend(self, right: int, bottom: int) -> None:
        self.right = max(self.right, right)
        self.bottom = max(self.bottom, bottom)

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    def size(self, node: Node) -> Size:
        """Memoized size of a node."""
        key = id(node)
        if key not in self.sizes:
            self.sizes[key] = self._compute_size(node)
        return self.sizes[key]

    def _compute_size(self, node: Node) -> Size:
        kind = node.kind
        if kind == NodeKind.RESOURCE:
            return self.catalog.size_of(node.resource_type)
        if kind == NodeKind.AVAILABILITY_ZONE:
            return self._zone_size(len(node.children))
        if kind == NodeKind.SUBNETWORK:
            return self._subnet_size(node)
        if kind == NodeKind.NETWORK:
            return self._network_size(node)
        if kind == NodeKind.RESOURCE_GROUP:
            return self._group_size(node)
        if kind == NodeKind.REGION:
            return self._region_size(node)
        if kind == NodeKind.SUBSCRIPTION:
            return self._subscription_size(node)
        if kind == NodeKind.ON_PREMISES:
            e = self.engine
            return e.ON_PREMISES_WIDTH, max(e.ON_PREMISES_MIN_HEIGHT, len(node.children) * 90 + 80)
        return 0, 0

    def _zone_size(self, count: int) -> Size:
        e = self.engine
        columns = min(count, e.SUBNET_COLUMNS)
        rows = math.ceil(count / e.SUBNET_COLUMNS)
        width = max(e.ZONE_MIN[0], columns * e.COLUMN_WIDTH + 2 * e.SUBNET_PADDING)
        height = max(e.ZONE_MIN[1], rows * e.ROW_HEIGHT + 50)
        return width, height

    def _subnet_parts(self, subnet: Node) -> Tuple[List[Node], List[Node]]:
        zones = subnet.children_of_kind(NodeKind.AVAILABILITY_ZONE)
        flat = [c for c in subnet.children if c.kind != NodeKind.AVAILABILITY_ZONE]
        return zones, flat

    def _subnet_size(self, subnet: Node) -> Size:
        e = self.engine
        zones, flat = self._subnet_parts(subnet)
        count = len(flat)
        width = max(e.SUBNET_MIN[0], min(count, e.SUBNET_COLUMNS) * e.COLUMN_WIDTH + 2 * e.SUBNET_PADDING)
        if not zones:
            rows = math.ceil(max(1, count) / e.SUBNET_COLUMNS)
            return width, max(e.SUBNET_MIN[1], rows * e.ROW_HEIGHT + 50)

        zone_total = e.SUBNET_PADDING
        zone_height = 0
        for zone in zones:
            zone_w, zone_h = self.size(zone)
            zone_total += zone_w + e.SUBNET_PADDING
            zone_height = max(zone_height, zone_h)
        width = max(width, zone_total + e.SUBNET_PADDING)
        flat_height = math.ceil(count / e.SUBNET_COLUMNS) * e.ROW_HEIGHT + 20 if count else 0
        return width, zone_height + flat_height + 60

    def _network_size(self, network: Node) -> Size:
        e = self.engine
        subnets = network.children_of_kind(NodeKind.SUBNETWORK)
        sizes = [self.size(s) for s in subnets]
        if network.is_hub and subnets:
            width = 2 * e.NETWORK_GUTTER + sum(w + e.NETWORK_GUTTER for w, _ in sizes)
            tallest = max([e.HUB_MIN_SUBNET_HEIGHT] + [h for _, h in sizes])
            return max(e.HUB_MIN_WIDTH, width), tallest + 70
        width = max([e.SPOKE_MIN[0]] + [w + 2 * e.NETWORK_GUTTER for w, _ in sizes])
        height = 60 + sum(h + e.NETWORK_GUTTER for _, h in sizes)
        return width, max(e.SPOKE_MIN[1], height)

    def _group_parts(self, group: Node) -> Tuple[List[Node], List[Node]]:
        networks = group.children_of_kind(NodeKind.NETWORK)
        others = [c for c in group.children if c.kind != NodeKind.NETWORK]
        return networks, others

    def _group_size(self, group: Node) -> Size:
        e = self.engine
        networks, others = self._group_parts(group)
        sizes = [self.size(n) for n in networks]
        network_width = max([0] + [w for w, _ in sizes])
        count = len(others)
        grid_width = min(count, e.GROUP_COLUMNS) * e.COLUMN_WIDTH + 40 if count else 0
        width = max(e.GROUP_MIN[0], network_width + grid_width + 80)

        network_height = sum(h + e.GROUP_NETWORK_GUTTER for _, h in sizes) + 60
        grid_height = math.ceil(count / e.GROUP_COLUMNS) * e.ROW_HEIGHT + 50 + 40
        return width, max(e.GROUP_MIN[1], network_height, grid_height)

    def _region_size(self, region: Node) -> Size:
        e = self.engine
        sizes = [self.size(g) for g in region.children]
        width = max([e.REGION_MIN[0]] + [w + 60 for w, _ in sizes])
        height = 80 + sum(h + e.REGION_GROUP_GUTTER for _, h in sizes)
        return width, max(e.REGION_MIN[1], height)

    def _subscription_size(self, subscription: Node) -> Size:
        e = self.engine
        sizes = [self.size(c) for c in subscription.children]
        has_regions = any(c.kind == NodeKind.REGION for c in subscription.children)
        gutter = e.SUBSCRIPTION_REGION_GUTTER if has_regions else e.SUBSCRIPTION_GROUP_GUTTER
        width = 100 + sum(w + gutter for w, _ in sizes)
        height = max([e.SUBSCRIPTION_MIN[1]] + [h + 100 for _, h in sizes])
        return max(e.SUBSCRIPTION_MIN[0], width), height

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place(self, node: Node, parent_id: str, x: int, y: int) -> None:
        """Position ``node`` relative to its parent, then its children."""
        width, height = self.size(node)
        node.set_geometry(Geometry(x=x, y=y, width=width, height=height))
        node.cell_id = self.context.next_id()
        if node.name in self.registry:
            logger.debug(f"Name '{node.name}' is used more than once; later node wins lookups")
        self.registry[node.name] = RegistryEntry(cell_id=node.cell_id, parent_id=parent_id, node=node)

        kind = node.kind
        if kind == NodeKind.REGION:
            self._place_region(node)
        elif kind == NodeKind.SUBSCRIPTION:
            self._place_subscription(node)
        elif kind == NodeKind.RESOURCE_GROUP:
            self._place_group(node)
        elif kind == NodeKind.NETWORK:
            self._place_network(node)
        elif kind == NodeKind.SUBNETWORK:
            self._place_subnet(node)
        elif kind == NodeKind.AVAILABILITY_ZONE:
            self._place_grid(
                node.children,
                node.cell_id,
                self.engine.SUBNET_PADDING,
                self.engine.ZONE_HEADER,
                self.engine.SUBNET_COLUMNS,
            )
        elif kind == NodeKind.ON_PREMISES:
            self._place_on_premises(node)

    def _place_grid(
        self, resources: List[Node], parent_id: str, x: int, y: int, columns: int
    ) -> None:
        e = self.engine
        for index, resource in enumerate(resources):
            row, column = divmod(index, columns)
            self.place(resource, parent_id, x + column * e.COLUMN_WIDTH, y + row * e.ROW_HEIGHT)

    def _place_region(self, region: Node) -> None:
        e = self.engine
        y = 50
        for group in region.children:
            self.place(group, region.cell_id, 30, y)
            y += self.size(group)[1] + e.REGION_GROUP_GUTTER

    def _place_subscription(self, subscription: Node) -> None:
        e = self.engine
        x = e.SUBSCRIPTION_CHILD_X
        for child in subscription.children:
            self.place(child, subscription.cell_id, x, 50)
            gutter = (
                e.SUBSCRIPTION_REGION_GUTTER
                if child.kind == NodeKind.REGION
                else e.SUBSCRIPTION_GROUP_GUTTER
            )
            x += self.size(child)[0] + gutter

    def _place_group(self, group: Node) -> None:
        e = self.engine
        networks, others = self._group_parts(group)
        y = e.GROUP_NETWORK_TOP
        for network in networks:
            self.place(network, group.cell_id, 20, y)
            y += self.size(network)[1] + e.GROUP_NETWORK_GUTTER

        grid_x = max(self.size(n)[0] for n in networks) + 50 if networks else 20
        self._place_grid(others, group.cell_id, grid_x, e.GROUP_GRID_TOP, e.GROUP_COLUMNS)

    def _place_network(self, network: Node) -> None:
        e = self.engine
        x, y = e.NETWORK_GUTTER, e.NETWORK_HEADER
        for subnet in network.children_of_kind(NodeKind.SUBNETWORK):
            self.place(subnet, network.cell_id, x, y)
            width, height = self.size(subnet)
            if network.is_hub:
                x += width + e.NETWORK_GUTTER
            else:
                y += height + e.NETWORK_GUTTER

    def _place_subnet(self, subnet: Node) -> None:
        e = self.engine
        zones, flat = self._subnet_parts(subnet)
        flat_y = e.SUBNET_HEADER
        if zones:
            x = e.SUBNET_PADDING
            zone_height = 0
            for zone in zones:
                self.place(zone, subnet.cell_id, x, e.SUBNET_HEADER)
                width, height = self.size(zone)
                x += width + e.SUBNET_PADDING
                zone_height = max(zone_height, height)
            flat_y = zone_height + 55
        self._place_grid(flat, subnet.cell_id, e.SUBNET_PADDING, flat_y, e.SUBNET_COLUMNS)

    def _place_on_premises(self, site: Node) -> None:
        e = self.engine
        y = 50
        for resource in site.children:
            self.place(resource, site.cell_id, 120, y)
            y += e.ON_PREMISES_ROW
