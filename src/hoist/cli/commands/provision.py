"""Provision command implementation."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ...domain.artifacts import BatchResult, DependencySpec
from ...domain.exceptions import ConfigurationError
from ...manifest import load_manifest, load_pins
from ...provisioning import Provisioner
from ..output.report import display_error, display_summary
from ..state import CLIState


async def provision_specs(
    specs: list[DependencySpec], provisioner: Provisioner
) -> BatchResult:
    """Core provisioning logic with an injected provisioner.

    Failures are reported through the BatchResult rather than raised, so
    every outcome can be displayed.
    """
    async with provisioner:
        return await provisioner.provision(specs, raise_on_failure=False)


def provision(
    ctx: typer.Context,
    manifest: Path = typer.Argument(..., help="JSON manifest of dependencies"),
    pins: Optional[Path] = typer.Option(
        None, "--pins", help="JSON file of pinned coordinate resolutions"
    ),
) -> None:
    """Fetch, verify and relocate every dependency in a manifest.

    Examples:
        hoist provision deps.json
        hoist provision deps.json --pins pins.json
        hoist --allow-unverified provision deps.json
    """
    state: CLIState = ctx.obj

    # Validate inputs early at CLI boundary
    try:
        specs = load_manifest(manifest).specs()
        pre_resolution = load_pins(pins) if pins else None
    except ConfigurationError as e:
        display_error("Invalid input", e)
        raise typer.Exit(code=2)

    provisioner = state.create_provisioner(pre_resolution=pre_resolution)
    try:
        result = asyncio.run(provision_specs(specs, provisioner))
    except Exception as e:
        display_error("Provisioning failed", e)
        raise typer.Exit(code=1)

    display_summary(result)
    if not result.ok:
        raise typer.Exit(code=1)
