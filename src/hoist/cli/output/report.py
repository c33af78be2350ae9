"""Result display functions for CLI."""

import typer

from ...domain.artifacts import BatchResult, ResolutionOutcome
from ...domain.coordinates import Coordinate, ResolvedLocation


def display_outcome(outcome: ResolutionOutcome) -> None:
    """Display one dependency's outcome."""
    record = outcome.record
    if record is not None:
        notes = []
        if not record.verified:
            notes.append("unverified")
        if record.relocated:
            notes.append("relocated")
        suffix = f" ({', '.join(notes)})" if notes else ""
        typer.secho(
            f"✓ {outcome.coordinate} -> {record.local_path}{suffix}",
            fg=typer.colors.YELLOW if not record.verified else typer.colors.GREEN,
        )
        return

    message = outcome.error.message if outcome.error else "unknown error"
    if outcome.spec.optional:
        typer.secho(f"- {outcome.coordinate} skipped: {message}", fg=typer.colors.YELLOW)
    else:
        typer.secho(f"✗ {outcome.coordinate}: {message}", fg=typer.colors.RED)


def display_summary(result: BatchResult) -> None:
    """Display every outcome followed by a one-line summary."""
    for outcome in result.outcomes:
        display_outcome(outcome)
    color = typer.colors.GREEN if result.ok else typer.colors.RED
    typer.secho(
        f"{len(result.records)}/{len(result.outcomes)} dependencies provisioned",
        fg=color,
    )


def display_location(coordinate: Coordinate, location: ResolvedLocation) -> None:
    """Display where a coordinate resolves to."""
    typer.echo(f"{coordinate}")
    typer.echo(f"  url:      {location.download_url}")
    if location.checksum_url:
        typer.echo(f"  checksum: {location.checksum_url}")
    elif location.expected_checksum:
        typer.echo(f"  checksum: {location.algorithm}:{location.expected_checksum}")
    else:
        typer.secho("  checksum: none published", fg=typer.colors.YELLOW)
    if location.pinned:
        typer.echo("  (pinned)")


def display_error(message: str, error: Exception) -> None:
    """Display error message."""
    typer.secho(f"✗ {message}", fg=typer.colors.RED)
    typer.secho(f"  Error: {error}", fg=typer.colors.RED)
