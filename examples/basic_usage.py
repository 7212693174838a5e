#!/usr/bin/env python3
"""Basic usage examples for Python AzArchGen."""

from pathlib import Path

from azarchgen import ArchGen, GenerationConfig


def main():
    """Demonstrate basic ArchGen usage."""

    # Initialize ArchGen (uses the bundled resource catalog)
    gen = ArchGen()

    # Example 1: Diagram from the bundled hub-and-spoke sample
    print("Generating hub-and-spoke diagram...")
    sample = Path(__file__).parent / "hub_spoke.json"
    result = gen.export_diagram(sample.read_text(encoding="utf-8"), "hub-spoke.drawio")
    print(f"  wrote {result.output_path} ({result.page_width}x{result.page_height})")

    # Example 2: Build a record in code; repeated VMs are spread across zones
    print("Generating zone-redundant web tier...")
    record = {
        "resources": [
            {"type": "vnet", "name": "vnet-web", "properties": {"addressSpace": "10.1.0.0/16"}},
            {"type": "subnet", "name": "snet-web", "containedIn": "vnet-web"},
            {
                "type": "vm",
                "name": "vm-web",
                "count": 3,
                "containedIn": "snet-web",
                "properties": {"availabilityZones": [1, 2, 3]},
            },
            {"type": "Key Vault", "name": "kv-web"},
        ],
        "regions": ["West Europe"],
    }
    gen.export_diagram(record, "web-tier.drawio", title="Web Tier")

    # Example 3: Multi-region with custom labels
    print("Generating multi-region diagram...")
    custom = ArchGen(config=GenerationConfig(global_peering_label="Hub peering"))
    result = custom.export_diagram(
        {
            "resources": [
                {"type": "hubVnet", "name": "vnet-hub-weu", "region": "West Europe"},
                {"type": "hubVnet", "name": "vnet-hub-neu", "region": "North Europe"},
            ],
            "regions": ["West Europe", "North Europe"],
        },
        "multi-region.drawio",
    )
    for resolved in result.connections:
        connection = resolved.connection
        print(f"  {connection.source} -> {connection.target} ({connection.label})")

    # Example 4: Inspect warnings instead of failing
    result = gen.generate({"resources": [{"type": "warpDrive", "name": "wd-1"}]})
    for warning in result.warnings:
        print(f"  warning [{warning.kind.value}]: {warning.message}")

    # Example 5: Preview resources before generating a diagram
    print("Previewing resources...")
    for resource in gen.preview_resources(record)[:5]:
        print(f"  - {resource.name} ({resource.resource_type}) in {resource.parent_name}")

    print("All examples completed!")


if __name__ == "__main__":
    main()
