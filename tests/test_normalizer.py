"""Tests for the top-level architecture shape."""

from azarchgen.core.models import ConnectionStyle, GenerationConfig, NodeKind, WarningKind


def _names(nodes):
    return [n.name for n in nodes]


def _all_names(architecture):
    return [n.name for n in architecture.walk()]


def test_single_region_single_subscription(normalize):
    """Test the default shape: one subscription holding resource groups."""
    architecture, ctx = normalize(
        {"resources": [{"type": "vm", "name": "vm-web", "count": 3}], "regions": ["West Europe"]}
    )

    assert len(architecture.scopes) == 1
    subscription = architecture.scopes[0]
    assert subscription.kind == NodeKind.SUBSCRIPTION
    assert subscription.name == "Azure Subscription"
    assert _names(subscription.children) == ["rg-main-weu"]
    assert _names(subscription.children[0].children) == ["vm-web-01", "vm-web-02", "vm-web-03"]
    assert architecture.on_premises == []
    assert architecture.global_resources is None
    assert ctx.warnings == []


def test_no_regions_uses_configured_default(normalize):
    """Test the default region drives resource group naming."""
    architecture, _ = normalize(
        {"resources": [{"type": "vm", "name": "vm-1"}]},
        config=GenerationConfig(default_region="North Europe"),
    )
    assert _names(architecture.scopes[0].children) == ["rg-main-neu"]


def test_multiple_regions_without_subscriptions(normalize):
    """Test two regions become top-level region containers."""
    architecture, ctx = normalize(
        {
            "resources": [
                {"type": "vm", "name": "vm-weu"},
                {"type": "vm", "name": "vm-neu", "region": "north europe"},
                {"type": "vm", "name": "vm-lost", "region": "Mars Central"},
            ],
            "regions": ["West Europe", "North Europe"],
        }
    )

    assert [s.kind for s in architecture.scopes] == [NodeKind.REGION, NodeKind.REGION]
    primary, secondary = architecture.scopes
    assert primary.display_label == "West Europe (Primary)"
    assert secondary.display_label == "North Europe"
    assert primary.properties == {"code": "weu", "primary": True}
    assert secondary.properties == {"code": "neu", "primary": False}

    assert _names(primary.children) == ["rg-main-weu"]
    assert _names(primary.children[0].children) == ["vm-weu", "vm-lost"]
    assert _names(secondary.children) == ["rg-main-neu"]
    assert _names(secondary.children[0].children) == ["vm-neu"]
    assert [w.kind for w in ctx.warnings] == [WarningKind.INVALID_CONTAINMENT_HINT]


def test_region_named_primary_is_primary(normalize):
    """Test a region whose name says primary is marked primary."""
    architecture, _ = normalize(
        {"resources": [], "regions": ["East US", "West US (primary DR)"]}
    )
    assert [r.properties["primary"] for r in architecture.scopes] == [True, True]


def test_single_declared_subscription(normalize):
    """Test one declared subscription names the single scope."""
    architecture, _ = normalize(
        {
            "resources": [{"type": "vm", "name": "vm-1"}],
            "subscriptions": [{"name": "Contoso Production"}],
        }
    )
    assert _names(architecture.scopes) == ["Contoso Production"]
    assert _names(architecture.scopes[0].children) == ["rg-main-weu"]


def test_multiple_subscriptions_with_default_first(normalize):
    """Test untagged resources go to a default subscription listed first."""
    architecture, ctx = normalize(
        {
            "resources": [
                {"type": "vm", "name": "vm-prod", "subscription": "Prod"},
                {"type": "vm", "name": "vm-dev", "subscription": "dev"},
                {"type": "vm", "name": "vm-untagged"},
                {"type": "vm", "name": "vm-other", "subscription": "Sandbox"},
            ],
            "subscriptions": [{"name": "Prod"}, {"name": "Dev"}],
        }
    )

    assert _names(architecture.scopes) == ["Azure Subscription", "Prod", "Dev"]
    default, prod, dev = architecture.scopes
    assert _names(default.children[0].children) == ["vm-untagged", "vm-other"]
    assert _names(prod.children[0].children) == ["vm-prod"]
    assert _names(dev.children[0].children) == ["vm-dev"]
    assert len(ctx.warnings_of(WarningKind.INVALID_CONTAINMENT_HINT)) == 1


def test_multiple_subscriptions_without_untagged_resources(normalize):
    """Test no default subscription is added when every resource is tagged."""
    architecture, _ = normalize(
        {
            "resources": [
                {"type": "vm", "name": "vm-prod", "subscription": "Prod"},
                {"type": "vm", "name": "vm-dev", "subscription": "Dev"},
            ],
            "subscriptions": [{"name": "Prod"}, {"name": "Dev"}],
        }
    )
    assert _names(architecture.scopes) == ["Prod", "Dev"]


def test_subscription_spanning_regions(normalize):
    """Test a subscription with several regions contains region containers."""
    architecture, _ = normalize(
        {
            "resources": [
                {"type": "vm", "name": "vm-a", "subscription": "Prod", "region": "East US"},
                {"type": "vm", "name": "vm-b", "subscription": "Prod", "region": "West US"},
                {"type": "vm", "name": "vm-c", "subscription": "Dev"},
            ],
            "subscriptions": [
                {"name": "Prod", "regions": ["East US", "West US"]},
                {"name": "Dev"},
            ],
        }
    )
    prod, dev = architecture.scopes

    assert [c.kind for c in prod.children] == [NodeKind.REGION, NodeKind.REGION]
    assert _names(prod.children[0].children) == ["rg-main-eus"]
    assert _names(prod.children[1].children) == ["rg-main-wus"]
    assert [c.kind for c in dev.children] == [NodeKind.RESOURCE_GROUP]


def test_global_resources_are_kept_outside_scopes(normalize):
    """Test global services are drawn outside the subscription tree."""
    architecture, _ = normalize(
        {
            "resources": [
                {"type": "frontDoor", "name": "afd-global"},
                {"type": "trafficManager", "name": "tm-global"},
                {"type": "vm", "name": "vm-1"},
            ]
        }
    )

    assert architecture.global_resources is not None
    assert architecture.global_resources.kind == NodeKind.GLOBAL_RESOURCES
    assert _names(architecture.global_resources.children) == ["afd-global", "tm-global"]
    scope_names = [n.name for n in architecture.scopes[0].walk()]
    assert "afd-global" not in scope_names
    assert "vm-1" in scope_names


def test_on_premises_site(normalize):
    """Test on-premises resources are grouped into a site below the cloud."""
    architecture, _ = normalize(
        {
            "resources": [
                {"type": "localNetworkGateway", "name": "lgw-dc"},
                {"type": "vm", "name": "vm-dc", "containedIn": "On-Premises"},
                {"type": "vm", "name": "vm-cloud"},
            ],
            "hasOnPremises": True,
        }
    )

    (site,) = architecture.on_premises
    assert site.kind == NodeKind.ON_PREMISES
    assert site.name == "On-Premises Datacenter"
    assert _names(site.children) == ["lgw-dc", "vm-dc"]
    assert all(c.kind == NodeKind.RESOURCE for c in site.children)
    scope_names = [n.name for n in architecture.scopes[0].walk()]
    assert "vm-cloud" in scope_names
    assert "lgw-dc" not in scope_names


def test_on_premises_flag_without_resources(normalize):
    """Test the flag alone produces an empty site."""
    architecture, _ = normalize({"resources": [], "hasOnPremises": True})

    (site,) = architecture.on_premises
    assert site.children == []


def test_local_gateway_stays_in_cloud_without_flag(normalize):
    """Test gateway types only move on-premises when the flag is set."""
    architecture, _ = normalize({"resources": [{"type": "localNetworkGateway", "name": "lgw-1"}]})

    assert architecture.on_premises == []
    assert "lgw-1" in _all_names(architecture)


def test_declared_connections_are_kept(normalize):
    """Test declared connections carry label and style."""
    architecture, _ = normalize(
        {
            "resources": [{"type": "vm", "name": "vm-1"}],
            "connections": [
                {"from": "vm-1", "to": "kv-1", "label": "secrets", "style": "dashed"},
                {"from": "vm-1", "to": "sql-1"},
            ],
        }
    )

    first, second = architecture.connections
    assert (first.source, first.target, first.label, first.style) == (
        "vm-1",
        "kv-1",
        "secrets",
        ConnectionStyle.DASHED,
    )
    assert second.label == ""
    assert second.style == ConnectionStyle.PLAIN
    assert not first.synthesized


def _two_hub_record(connections=None):
    return {
        "resources": [
            {"type": "hubVnet", "name": "vnet-hub-weu", "region": "West Europe"},
            {"type": "hubVnet", "name": "vnet-hub-neu", "region": "North Europe"},
        ],
        "regions": ["West Europe", "North Europe"],
        "connections": connections or [],
    }


def test_hub_peering_is_synthesized(normalize):
    """Test hubs in different regions are peered automatically."""
    architecture, _ = normalize(_two_hub_record())

    (peering,) = architecture.connections
    assert (peering.source, peering.target) == ("vnet-hub-weu", "vnet-hub-neu")
    assert peering.label == "Global VNet Peering"
    assert peering.style == ConnectionStyle.PEERING
    assert peering.synthesized


def test_hub_peering_not_duplicated(normalize):
    """Test a declared hub pair (in either direction) is not peered again."""
    for pair in (("vnet-hub-weu", "vnet-hub-neu"), ("vnet-hub-neu", "vnet-hub-weu")):
        architecture, _ = normalize(_two_hub_record([{"from": pair[0], "to": pair[1]}]))

        assert len(architecture.connections) == 1
        assert not architecture.connections[0].synthesized


def test_no_peering_for_single_region(normalize):
    """Test hubs are not peered when only one region is declared."""
    record = _two_hub_record()
    record["regions"] = ["West Europe"]
    architecture, _ = normalize(record)

    assert architecture.connections == []


def test_no_peering_within_same_region(normalize):
    """Test two hubs in the same region are not peered."""
    record = _two_hub_record()
    record["resources"][1]["region"] = "West Europe"
    architecture, _ = normalize(record)

    assert architecture.connections == []


def test_peering_label_from_config(normalize):
    """Test the peering label is configurable."""
    architecture, _ = normalize(
        _two_hub_record(), config=GenerationConfig(global_peering_label="Peered")
    )
    assert architecture.connections[0].label == "Peered"


def test_three_hubs_are_fully_peered(normalize):
    """Test every cross-region hub pair is peered exactly once."""
    record = _two_hub_record()
    record["regions"].append("East US")
    record["resources"].append({"type": "hubVnet", "name": "vnet-hub-eus", "region": "East US"})
    architecture, _ = normalize(record)

    pairs = {frozenset((c.source, c.target)) for c in architecture.connections}
    assert len(architecture.connections) == 3
    assert pairs == {
        frozenset(("vnet-hub-weu", "vnet-hub-neu")),
        frozenset(("vnet-hub-weu", "vnet-hub-eus")),
        frozenset(("vnet-hub-neu", "vnet-hub-eus")),
    }


def test_untagged_hub_is_not_peered_with_primary_hub(normalize):
    """Test an untagged hub shares the primary region and is not peered there."""
    record = _two_hub_record()
    del record["resources"][1]["region"]
    architecture, _ = normalize(record)

    primary, secondary = architecture.scopes
    assert "vnet-hub-neu" in [n.name for n in primary.walk()]
    assert secondary.children == []
    assert architecture.connections == []


def test_untagged_hub_is_peered_with_secondary_hub(normalize):
    """Test an untagged hub is peered with a hub drawn in another region."""
    record = _two_hub_record()
    del record["resources"][0]["region"]
    architecture, _ = normalize(record)

    (peering,) = architecture.connections
    assert (peering.source, peering.target) == ("vnet-hub-weu", "vnet-hub-neu")
    assert peering.synthesized


def test_unknown_region_hub_counts_as_primary(normalize):
    """Test a hub with an unknown region tag is treated as a primary-region hub."""
    record = _two_hub_record()
    record["resources"][1]["region"] = "Mars Central"
    architecture, ctx = normalize(record)

    assert architecture.connections == []
    assert [w.kind for w in ctx.warnings] == [WarningKind.INVALID_CONTAINMENT_HINT]
