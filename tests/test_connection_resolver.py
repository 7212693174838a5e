"""Tests for connection endpoint resolution."""

import pytest

from azarchgen.core.models import Connection, Node, NodeKind, RegistryEntry, WarningKind
from azarchgen.visualization import ConnectionResolver


def _registry(*names):
    registry = {}
    for index, name in enumerate(names, start=1):
        node = Node(kind=NodeKind.RESOURCE, name=name)
        registry[name] = RegistryEntry(cell_id=f"cell-{index}", parent_id="1", node=node)
    return registry


@pytest.fixture
def registry():
    return _registry("vnet-hub-weu", "vnet-hub", "On-Premises Datacenter", "er-primary")


@pytest.mark.parametrize(
    "name,expected",
    [
        ("vnet-hub", "cell-2"),
        ("VNET-HUB-WEU", "cell-1"),
        ("vnet-hub-weu", "cell-1"),
        ("On-Premises", "cell-3"),
        ("er", "cell-3"),
        ("primary-er", None),
        ("", None),
    ],
)
def test_find_precedence(registry, name, expected):
    """Test exact, then case-insensitive, then substring matching."""
    entry = ConnectionResolver().find(name, registry)
    if expected is None:
        assert entry is None
    else:
        assert entry.cell_id == expected


def test_find_substring_in_either_direction():
    """Test a longer query can match a shorter registered name."""
    registry = _registry("kv-shared")
    assert ConnectionResolver().find("kv-shared-weu-01", registry).cell_id == "cell-1"


def test_resolve_keeps_order_and_drops_unresolved(registry, context):
    """Test unresolved connections are dropped with a warning."""
    connections = [
        Connection(source="On-Premises", target="er-primary", label="ExpressRoute"),
        Connection(source="vnet-hub-weu", target="vnet-spoke-99"),
        Connection(source="vnet-hub", target="vnet-hub-weu"),
    ]
    resolved = ConnectionResolver().resolve(connections, registry, context)

    assert [(r.source_id, r.target_id) for r in resolved] == [
        ("cell-3", "cell-4"),
        ("cell-2", "cell-1"),
    ]
    assert resolved[0].connection.label == "ExpressRoute"
    (warning,) = context.warnings
    assert warning.kind == WarningKind.UNRESOLVED_CONNECTION_ENDPOINT
    assert "vnet-spoke-99" in warning.message


def test_resolve_empty_registry(context):
    """Test every connection is dropped when nothing was laid out."""
    resolved = ConnectionResolver().resolve([Connection(source="a", target="b")], {}, context)

    assert resolved == []
    assert len(context.warnings) == 1
