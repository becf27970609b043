"""
Node Pack CLI - Inspect installed nodes and check credentials.

Provides commands for:
- Listing and describing registered nodes
- Listing credential types
- Testing credential data against the vendor
"""

from __future__ import annotations

import json
import logging
import sys

import click

from node_registry import NodeRegistry
from node_sdk.observability import setup_logging


logger = logging.getLogger("node_sdk.cli")


def build_registry() -> NodeRegistry:
    """Registry populated from every installed node pack."""
    registry = NodeRegistry()
    count = registry.discover_entry_points()
    logger.debug("Loaded %d node packs", count)
    return registry


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool):
    """Node Pack - inspect SaaS connector nodes and credentials."""
    ctx.ensure_object(dict)

    setup_logging(sys.stderr)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif quiet:
        logging.getLogger().setLevel(logging.ERROR)

    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# ==============================================================================
# Node Commands
# ==============================================================================

@cli.group()
def nodes():
    """Inspect registered nodes."""
    pass


@nodes.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def nodes_list(as_json: bool):
    """List all registered nodes."""
    registry = build_registry()
    definitions = sorted(registry.list_nodes(), key=lambda d: d.node_type)

    if as_json:
        click.echo(json.dumps(
            [
                {
                    "type": d.node_type,
                    "display_name": d.display_name,
                    "pack": d.node_pack,
                    "trigger": d.is_trigger,
                }
                for d in definitions
            ],
            indent=2,
        ))
        return

    if not definitions:
        click.echo("No nodes registered.")
        return

    click.echo("Registered nodes:")
    for d in definitions:
        kind = "trigger" if d.is_trigger else "action"
        click.echo(f"  {d.node_type} ({kind}): {d.display_name}")


@nodes.command("describe")
@click.argument("node_type")
def nodes_describe(node_type: str):
    """Show the full definition of a node."""
    registry = build_registry()
    definition = registry.get_node(node_type)

    if definition is None:
        click.echo(f"Error: Unknown node type: {node_type}", err=True)
        sys.exit(1)

    click.echo(definition.model_dump_json(indent=2))


# ==============================================================================
# Credential Commands
# ==============================================================================

@cli.group()
def credentials():
    """Inspect and test credential types."""
    pass


@credentials.command("list")
def credentials_list():
    """List all registered credential types."""
    registry = build_registry()
    definitions = sorted(registry.list_credentials(), key=lambda d: d.name)

    if not definitions:
        click.echo("No credentials registered.")
        return

    click.echo("Credential types:")
    for d in definitions:
        click.echo(f"  {d.name} ({d.auth_type}): {d.display_name}")


@credentials.command("test")
@click.argument("credential_type")
@click.option(
    "--data", "-d",
    required=True,
    help="Credential values as a JSON object"
)
def credentials_test(credential_type: str, data: str):
    """Test credential values against the vendor API."""
    registry = build_registry()
    credential_class = registry.get_credential_class(credential_type)

    if credential_class is None:
        click.echo(f"Error: Unknown credential type: {credential_type}", err=True)
        sys.exit(1)

    try:
        values = json.loads(data)
    except json.JSONDecodeError as e:
        click.echo(f"Error: --data is not valid JSON: {e}", err=True)
        sys.exit(1)

    if not isinstance(values, dict):
        click.echo("Error: --data must be a JSON object", err=True)
        sys.exit(1)

    result = credential_class(values).test()

    status = "✓" if result["success"] else "✗"
    click.echo(f"{status} {result['message']}")

    if not result["success"]:
        sys.exit(1)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
