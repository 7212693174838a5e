"""draw.io (mxGraph XML) document generation."""

import json
import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Set

from .. import __version__
from ..catalog.resource_catalog import ResourceCatalog
from ..core.context import GenerationContext
from ..core.models import (
    Architecture,
    ConnectionStyle,
    LayoutResult,
    Node,
    NodeKind,
    ResolvedConnection,
    WarningKind,
)
from .layout_engine import ROOT_CELL_ID

logger = logging.getLogger(__name__)

_SWIMLANE = "swimlane;whiteSpace=wrap;html=1;"
_WHITESPACE = re.compile(r"\s+")


class DrawIOGenerator:
    """Emits a positioned architecture as a draw.io document."""

    CONTAINER_STYLES = {
        NodeKind.SUBSCRIPTION: _SWIMLANE
        + "fillColor=#fff2cc;strokeColor=#d6b656;rounded=1;fontStyle=1;fontSize=14;",
        NodeKind.RESOURCE_GROUP: _SWIMLANE
        + "fillColor=#f5f5f5;strokeColor=#666666;rounded=1;fontStyle=1;",
        NodeKind.SUBNETWORK: _SWIMLANE
        + "fillColor=#e1d5e7;strokeColor=#9673a6;swimlaneFillColor=#E1D5E7;rounded=1;",
        NodeKind.REGION: _SWIMLANE
        + "fillColor=#ffe6cc;strokeColor=#d79b00;rounded=1;fontStyle=1;fontSize=14;",
        NodeKind.AVAILABILITY_ZONE: _SWIMLANE
        + "fillColor=#f8cecc;strokeColor=#b85450;rounded=1;dashed=1;",
        NodeKind.ON_PREMISES: _SWIMLANE
        + "fillColor=#d0cee2;strokeColor=#56517e;rounded=1;fontStyle=1;",
    }
    SPOKE_NETWORK_STYLE = (
        _SWIMLANE
        + "fillColor=#d5e8d4;strokeColor=#82b366;swimlaneFillColor=#D5E8D4;rounded=1;fontStyle=1;"
    )
    HUB_NETWORK_STYLE = (
        _SWIMLANE
        + "fillColor=#dae8fc;strokeColor=#6c8ebf;swimlaneFillColor=#DAE8FC;rounded=1;fontStyle=1;"
    )

    EDGE_BASE_STYLE = (
        "edgeStyle=orthogonalEdgeStyle;rounded=0;orthogonalLoop=1;jettySize=auto;html=1;"
        "endArrow=classic;endFill=1;fontSize=10;labelBackgroundColor=#FFFFFF;"
    )
    EDGE_STYLES = {
        ConnectionStyle.PLAIN: "",
        ConnectionStyle.DASHED: "dashed=1;",
        ConnectionStyle.LONG_HAUL: "strokeColor=#FF6600;strokeWidth=3;",
        ConnectionStyle.TUNNEL: "strokeColor=#0066CC;strokeWidth=2;dashed=1;",
        ConnectionStyle.PEERING: "strokeColor=#009900;strokeWidth=2;endArrow=none;",
    }

    # Decorative icon placed inside a container: catalog type and box (x, y, w, h).
    # A negative x is measured from the container's right edge.
    CONTAINER_ICONS = {
        NodeKind.SUBSCRIPTION: ("subscription", (10, 30, 44, 71)),
        NodeKind.NETWORK: ("vnet", (-80, 5, 67, 40)),
        NodeKind.ON_PREMISES: ("onPremises", (20, 40, 80, 138)),
    }

    LEAF_STYLE = (
        "aspect=fixed;html=1;points=[];align=center;image;fontSize=11;imageAlign=center;"
        "verticalLabelPosition=bottom;verticalAlign=top;image={icon};"
    )
    ICON_STYLE = "aspect=fixed;html=1;points=[];align=center;image;fontSize=12;image={icon};"

    GRAPH_MODEL_ATTRIBUTES = {
        "dx": "1426",
        "dy": "798",
        "grid": "1",
        "gridSize": "10",
        "guides": "1",
        "tooltips": "1",
        "connect": "1",
        "arrows": "1",
        "fold": "1",
        "page": "1",
        "pageScale": "1",
        "math": "0",
        "shadow": "0",
    }

    def __init__(self, catalog: ResourceCatalog, modified: Optional[str] = None):
        """Initialize the generator.

        Args:
            catalog: Catalog supplying icons for leaf resources.
            modified: Timestamp written to the document header. Defaults to now.
        """
        self.catalog = catalog
        self.modified = modified

    def generate(
        self,
        architecture: Architecture,
        layout: LayoutResult,
        connections: Sequence[ResolvedConnection],
        context: GenerationContext,
    ) -> str:
        """Build the draw.io XML for a positioned architecture.

        Args:
            architecture: Tree with geometry and cell ids assigned.
            layout: Layout side artifacts (page size).
            connections: Resolved connections to draw as edges.
            context: Per-run context for ids and warnings.

        Returns:
            Pretty-printed XML document.
        """
        logger.info(f"Generating draw.io document '{architecture.title}'")

        mxfile = ET.Element(
            "mxfile",
            {
                "host": "app.diagrams.net",
                "modified": self.modified or datetime.now(timezone.utc).isoformat(),
                "agent": "python-azarchgen",
                "version": __version__,
                "type": "device",
            },
        )
        diagram = ET.SubElement(
            mxfile, "diagram", {"id": context.next_id("diagram"), "name": architecture.title}
        )
        model_attributes = dict(self.GRAPH_MODEL_ATTRIBUTES)
        model_attributes["pageWidth"] = str(layout.page_width)
        model_attributes["pageHeight"] = str(layout.page_height)
        model = ET.SubElement(diagram, "mxGraphModel", model_attributes)

        root = ET.SubElement(model, "root")
        ET.SubElement(root, "mxCell", {"id": "0"})
        ET.SubElement(root, "mxCell", {"id": ROOT_CELL_ID, "parent": "0"})

        emitted: Set[str] = {"0", ROOT_CELL_ID}
        for scope in architecture.scopes:
            self._emit(root, scope, ROOT_CELL_ID, emitted, context)
        for site in architecture.on_premises:
            self._emit(root, site, ROOT_CELL_ID, emitted, context)
        if architecture.global_resources is not None:
            for resource in architecture.global_resources.children:
                self._emit(root, resource, ROOT_CELL_ID, emitted, context)

        edge_count = 0
        for resolved in connections:
            if resolved.source_id not in emitted or resolved.target_id not in emitted:
                logger.debug(f"Skipping edge to unemitted cell: {resolved.connection}")
                continue
            self._add_edge(root, resolved, context)
            edge_count += 1

        logger.info(f"Emitted {len(emitted) - 2} cells and {edge_count} edges")
        ET.indent(mxfile, space="  ")
        return ET.tostring(mxfile, encoding="utf-8", xml_declaration=True).decode("utf-8")

    def _emit(
        self, root: ET.Element, node: Node, parent_id: str, emitted: Set[str], context: GenerationContext
    ) -> None:
        """Emit ``node`` and then its subtree (parents always precede children)."""
        if node.geometry is None or node.cell_id is None:
            logger.debug(f"Skipping unpositioned node '{node.name}'")
            return

        if node.kind == NodeKind.RESOURCE:
            if self._add_resource(root, node, parent_id, context):
                emitted.add(node.cell_id)
            return

        self._add_container(root, node, parent_id)
        emitted.add(node.cell_id)
        self._add_container_icon(root, node, context)
        for child in node.children:
            self._emit(root, child, node.cell_id, emitted, context)

    def _container_style(self, node: Node) -> str:
        if node.kind == NodeKind.NETWORK:
            return self.HUB_NETWORK_STYLE if node.is_hub else self.SPOKE_NETWORK_STYLE
        return self.CONTAINER_STYLES.get(node.kind, self.CONTAINER_STYLES[NodeKind.RESOURCE_GROUP])

    def _container_label(self, node: Node) -> str:
        label = node.display_label
        if node.kind == NodeKind.NETWORK:
            address = node.properties.get("addressSpace")
        elif node.kind == NodeKind.SUBNETWORK:
            address = node.properties.get("addressPrefix")
        else:
            address = None
        if address:
            label = f"{label}\n({address})"
        return label

    def _add_container(self, root: ET.Element, node: Node, parent_id: str) -> None:
        cell = ET.SubElement(
            root,
            "mxCell",
            {
                "id": node.cell_id,
                "value": self._container_label(node),
                "style": self._container_style(node),
                "vertex": "1",
                "parent": parent_id,
            },
        )
        self._add_geometry(cell, node.geometry.x, node.geometry.y, node.geometry.width, node.geometry.height)

    def _add_container_icon(self, root: ET.Element, node: Node, context: GenerationContext) -> None:
        icon = self.CONTAINER_ICONS.get(node.kind)
        if icon is None:
            return
        type_id, (x, y, width, height) = icon
        entry = self.catalog.get(type_id)
        if entry is None:
            return
        if x < 0:
            x = node.geometry.width + x
        cell = ET.SubElement(
            root,
            "mxCell",
            {
                "id": context.next_id(),
                "value": "",
                "style": self.ICON_STYLE.format(icon=entry.icon),
                "vertex": "1",
                "parent": node.cell_id,
            },
        )
        self._add_geometry(cell, x, y, width, height)

    def _add_resource(
        self, root: ET.Element, node: Node, parent_id: str, context: GenerationContext
    ) -> bool:
        entry = self.catalog.get(node.resource_type)
        if entry is None:
            context.warn(
                WarningKind.UNKNOWN_RESOURCE_TYPE,
                f"Not drawing '{node.name}': no catalog entry for '{node.resource_type}'",
            )
            return False

        attributes = {"label": node.display_label, "id": node.cell_id}
        attributes.update(self._property_attributes(node.properties))
        obj = ET.SubElement(root, "object", attributes)
        cell = ET.SubElement(
            obj,
            "mxCell",
            {
                "style": self.LEAF_STYLE.format(icon=entry.icon),
                "vertex": "1",
                "parent": parent_id,
            },
        )
        self._add_geometry(cell, node.geometry.x, node.geometry.y, node.geometry.width, node.geometry.height)
        return True

    @staticmethod
    def _property_attributes(properties: Dict[str, Any]) -> Dict[str, str]:
        """Properties as XML attributes with whitespace in keys replaced by ``_``."""
        attributes = {}
        for key, value in properties.items():
            if value is None:
                continue
            name = _WHITESPACE.sub("_", str(key).strip())
            if not name or name in ("label", "id"):
                continue
            if isinstance(value, bool):
                text = str(value).lower()
            elif isinstance(value, (list, tuple)):
                text = ",".join(str(v) for v in value)
            elif isinstance(value, dict):
                text = json.dumps(value, sort_keys=True)
            else:
                text = str(value)
            attributes[name] = text
        return attributes

    def _add_edge(self, root: ET.Element, resolved: ResolvedConnection, context: GenerationContext) -> None:
        connection = resolved.connection
        cell = ET.SubElement(
            root,
            "mxCell",
            {
                "id": context.next_id(),
                "value": connection.label,
                "style": self.EDGE_BASE_STYLE + self.EDGE_STYLES[connection.style],
                "edge": "1",
                "parent": ROOT_CELL_ID,
                "source": resolved.source_id,
                "target": resolved.target_id,
            },
        )
        ET.SubElement(cell, "mxGeometry", {"relative": "1", "as": "geometry"})

    @staticmethod
    def _add_geometry(cell: ET.Element, x: int, y: int, width: int, height: int) -> None:
        ET.SubElement(
            cell,
            "mxGeometry",
            {"x": str(x), "y": str(y), "width": str(width), "height": str(height), "as": "geometry"},
        )
