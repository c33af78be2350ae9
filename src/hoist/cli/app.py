"""CLI application factory."""

from pathlib import Path
from typing import Optional

import typer

from ..app import create_app
from ..config.settings import LogLevel, Settings, VerificationPolicy, settings_from_env
from ..domain.exceptions import ConfigurationError
from .commands.locate import locate
from .commands.provision import provision
from .state import CLIState


def create_cli_app(
    settings: Settings | None = None, state: CLIState | None = None
) -> typer.Typer:
    """Create CLI application with optional settings or state override.

    Args:
        settings: Optional Settings override for testing
        state: Optional fully built CLIState (e.g. with a mocked provisioner)

    Returns:
        Configured Typer application with commands registered
    """
    app = typer.Typer(
        name="hoist",
        help="hoist - fetch, verify and relocate runtime dependencies",
        no_args_is_help=True,
    )

    @app.callback()
    def setup(
        ctx: typer.Context,
        download_dir: Optional[Path] = typer.Option(
            None,
            "--download-dir",
            "-d",
            help="Directory holding staged artifacts and local state",
        ),
        workers: Optional[int] = typer.Option(
            None,
            "--workers",
            "-w",
            help="Number of concurrent resolutions",
            min=1,
        ),
        allow_unverified: bool = typer.Option(
            False,
            "--allow-unverified",
            help="Accept artifacts that have no published checksum",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Enable verbose output (DEBUG logging)",
        ),
    ) -> None:
        """Global options available to all commands."""
        if state is not None:
            ctx.obj = state
            return

        if settings is not None:
            resolved_settings = settings
        else:
            try:
                resolved_settings = settings_from_env(
                    download_dir=download_dir,
                    max_workers=workers,
                    log_level=LogLevel.DEBUG if verbose else None,
                    verification_policy=(
                        VerificationPolicy.PASSTHROUGH if allow_unverified else None
                    ),
                )
            except ConfigurationError as e:
                typer.secho(f"✗ {e}", fg=typer.colors.RED)
                raise typer.Exit(code=2)

        create_app(resolved_settings)
        ctx.obj = CLIState(resolved_settings)

    app.command()(provision)
    app.command()(locate)
    return app
