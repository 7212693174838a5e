"""Command-line interface for Python AzArchGen."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .core import ArchGen, ConnectionStyle, GenerationResult, NodeKind, ResourceCategory

# Setup rich console
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Setup logging with rich handler."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--catalog",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Resource catalog JSON file. If not specified, uses the bundled catalog.",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, catalog: str | None) -> None:
    """Python AzArchGen - Azure architecture diagram generator.

    Turn a JSON description of an Azure architecture into an editable
    draw.io diagram with regions, subscriptions, resource groups, VNets,
    subnets and availability zones laid out automatically.

    \b
    Examples:
      python-azarchgen generate architecture.json
      python-azarchgen generate architecture.json -o hub-spoke.drawio
      cat architecture.json | python-azarchgen generate - --title "Landing Zone"
      python-azarchgen list-types --category networking
      python-azarchgen resolve "Azure Kubernetes Service"
    """
    setup_logging(verbose)

    # Store global options in context for commands to use
    ctx.ensure_object(dict)
    ctx.obj["catalog"] = catalog
    ctx.obj["verbose"] = verbose


def _print_summary(result: GenerationResult) -> None:
    table = Table(title="Diagram Summary")
    table.add_column("Level", style="cyan", no_wrap=True)
    table.add_column("Count", style="magenta", justify="right")

    counts: dict[str, int] = {}
    for node in result.architecture.walk():
        counts[node.kind.value] = counts.get(node.kind.value, 0) + 1
    for kind in NodeKind:
        if counts.get(kind.value):
            table.add_row(kind.value, str(counts[kind.value]))
    table.add_row("connections", str(len(result.connections)))
    console.print(table)


def _print_warnings(result: GenerationResult) -> None:
    table = Table(title="Warnings")
    table.add_column("Kind", style="yellow", no_wrap=True)
    table.add_column("Message", style="white")
    for warning in result.warnings:
        table.add_row(warning.kind.value, warning.message)
    console.print(table)


@cli.command()
@click.argument("input_file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--output",
    "-o",
    default="architecture.drawio",
    help="Output file path (default: architecture.drawio)",
)
@click.option("--title", "-t", help="Diagram title. Overrides the title in the input file.")
@click.option("--summary/--no-summary", default=False, help="Print a per-level node count table")
@click.pass_context
def generate(
    ctx: click.Context,
    input_file,
    output: str,
    title: str | None,
    summary: bool,
) -> None:
    """Generate a draw.io diagram from an architecture JSON file.

    INPUT_FILE is the architecture record; use '-' to read from stdin.

    \b
    Examples:
      python-azarchgen generate architecture.json
      python-azarchgen generate architecture.json --output multi-region.drawio
      python-azarchgen generate - --title "Hub and Spoke" < architecture.json
    """
    try:
        verbose_mode = ctx.obj.get("verbose", False)

        if verbose_mode:
            console.print("🔄 Loading resource catalog...", style="blue")
        archgen = ArchGen(catalog_path=ctx.obj.get("catalog"))

        if verbose_mode:
            console.print(f"🎨 Generating diagram from {input_file.name}...", style="green")
        result = archgen.export_diagram(input_file.read(), output, title=title)

        if summary:
            _print_summary(result)
        if result.warnings:
            _print_warnings(result)

        console.print(f"{result.output_path}", style="green")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        if logging.getLogger().level == logging.DEBUG:
            console.print_exception()
        sys.exit(1)


@cli.command("list-types")
@click.option(
    "--category",
    type=click.Choice([c.value for c in ResourceCategory]),
    help="Only list types in this catalog category",
)
@click.pass_context
def list_types(ctx: click.Context, category: str | None) -> None:
    """List resource types known to the catalog.

    \b
    Examples:
      python-azarchgen list-types
      python-azarchgen list-types --category databases
    """
    try:
        archgen = ArchGen(catalog_path=ctx.obj.get("catalog"))
        catalog = archgen.catalog

        entries = catalog.by_category(category) if category else [
            catalog.get(type_id) for type_id in catalog.types()
        ]
        if not entries:
            console.print(f"No resource types found in category '{category}'.", style="yellow")
            return

        table = Table(title="Azure Resource Types")
        table.add_column("Type", style="cyan", no_wrap=True)
        table.add_column("Display Name", style="green")
        table.add_column("Category", style="magenta")
        table.add_column("Size", style="white")

        for entry in entries:
            width, height = entry.size
            table.add_row(entry.type, entry.display_name, entry.category.value, f"{width}x{height}")

        console.print(table)
        if ctx.obj.get("verbose", False):
            console.print(f"\n📊 Total: {len(entries)} resource types", style="blue")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        if logging.getLogger().level == logging.DEBUG:
            console.print_exception()
        sys.exit(1)


@cli.command("resolve")
@click.argument("type_string")
@click.pass_context
def resolve_type(ctx: click.Context, type_string: str) -> None:
    """Show which catalog type a free-text resource type maps to.

    \b
    Examples:
      python-azarchgen resolve aks
      python-azarchgen resolve "Azure SQL Database"
    """
    try:
        archgen = ArchGen(catalog_path=ctx.obj.get("catalog"))
        canonical = archgen.resolve_type(type_string)
        if canonical is None:
            console.print(f"❌ Unknown resource type: {type_string}", style="red")
            sys.exit(1)

        entry = archgen.catalog.get(canonical)
        console.print(f"{type_string} -> {canonical}", style="green")
        console.print(f"  Display name: {entry.display_name}")
        console.print(f"  Icon: {entry.icon}")
        if entry.subnet_only:
            console.print("  Placed inside a subnet", style="blue")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        if logging.getLogger().level == logging.DEBUG:
            console.print_exception()
        sys.exit(1)


@cli.command("info")
def show_info() -> None:
    """Show information about connection styles and container levels."""
    styles_table = Table(title="Connection Styles")
    styles_table.add_column("Style", style="cyan")
    styles_table.add_column("Description", style="green")

    style_descriptions = {
        ConnectionStyle.PLAIN: "Solid arrow (default)",
        ConnectionStyle.DASHED: "Dashed arrow",
        ConnectionStyle.LONG_HAUL: "Thick orange line for ExpressRoute circuits",
        ConnectionStyle.TUNNEL: "Dashed blue line for VPN tunnels",
        ConnectionStyle.PEERING: "Green line without arrowhead for VNet peering",
    }

    for style in ConnectionStyle:
        styles_table.add_row(style.value, style_descriptions.get(style, ""))

    console.print(styles_table)

    levels_table = Table(title="Container Levels")
    levels_table.add_column("Level", style="cyan")
    levels_table.add_column("Description", style="green")

    level_descriptions = {
        NodeKind.REGION: "Azure region, drawn when more than one region is declared",
        NodeKind.SUBSCRIPTION: "Subscription boundary",
        NodeKind.RESOURCE_GROUP: "Hub, workload, shared and services resource groups",
        NodeKind.NETWORK: "Virtual network (hub networks lay subnets out horizontally)",
        NodeKind.SUBNETWORK: "Subnet",
        NodeKind.AVAILABILITY_ZONE: "Availability zone, drawn when a subnet spans two or more zones",
        NodeKind.ON_PREMISES: "On-premises site below the cloud area",
    }

    for kind, description in level_descriptions.items():
        levels_table.add_row(kind.value, description)

    console.print(levels_table)


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
