"""Locate command implementation."""

import asyncio
from typing import Optional

import typer
from pydantic import ValidationError

from ...domain.coordinates import Coordinate, Repository
from ...domain.exceptions import ConfigurationError, HoistError
from ..output.report import display_error, display_location
from ..state import CLIState


def locate(
    ctx: typer.Context,
    coordinate: str = typer.Argument(..., help="group:artifact:version[:classifier]"),
    repositories: Optional[list[str]] = typer.Option(
        None,
        "--repository",
        "-r",
        help="Repository base URL; repeat to try several in order",
    ),
) -> None:
    """Show where a coordinate would be downloaded from, without downloading.

    Examples:
        hoist locate com.google.code.gson:gson:2.10.1
        hoist locate org.example:lib:1.0-SNAPSHOT -r https://repo.example.org/snapshots/
    """
    state: CLIState = ctx.obj

    try:
        parsed = Coordinate.parse(coordinate)
        repos = [Repository(url=url) for url in repositories or ()]
    except (ConfigurationError, ValidationError) as e:
        display_error("Invalid input", e)
        raise typer.Exit(code=2)

    async def run():
        async with state.create_provisioner() as provisioner:
            return await provisioner.locate(parsed, repos)

    try:
        location = asyncio.run(run())
    except HoistError as e:
        display_error(f"Could not locate {parsed}", e)
        raise typer.Exit(code=1)

    display_location(parsed, location)
