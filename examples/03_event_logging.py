#!/usr/bin/env python3
"""
03_event_logging.py - Artifact lifecycle debugger

Demonstrates:
- Subscribing handlers to an EventEmitter handed to the Provisioner
- The artifact lifecycle: located -> downloaded -> verified -> resolved
- Optional dependencies that fail without failing the run

Note: Requires internet connection to run
"""

import asyncio
from datetime import datetime
from pathlib import Path

from hoist import Coordinate, DependencySpec, Provisioner, build_settings
from hoist.events import ArtifactEvent, EventEmitter

EVENT_TYPES = (
    "artifact.located",
    "artifact.downloaded",
    "artifact.verified",
    "artifact.verification_failed",
    "artifact.resolved",
    "artifact.failed",
)


def on_artifact_event(event: ArtifactEvent) -> None:
    """Log an artifact event with timestamp."""
    ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    event_type = event.event_type

    detail = ""
    if event_type == "artifact.located":
        detail = event.url + (" (pinned)" if event.pinned else "")
    elif event_type == "artifact.downloaded":
        detail = "reused staged copy" if event.reused else event.path
    elif event_type == "artifact.verified":
        detail = f"{event.algorithm}:{event.digest[:12]}" + (" (cached)" if event.cached else "")
    elif event_type in ("artifact.verification_failed", "artifact.failed"):
        detail = f"error={event.error.exc_type}"

    print(f"[{ts}] {event_type:<29} | {event.coordinate} | {detail}")


async def main() -> None:
    """Provision two dependencies while logging every artifact event."""
    emitter = EventEmitter()
    for event_type in EVENT_TYPES:
        emitter.on(event_type, on_artifact_event)

    specs = [
        DependencySpec(coordinate=Coordinate.parse("com.google.code.gson:gson:2.10.1")),
        DependencySpec(
            coordinate=Coordinate.parse("org.example:does-not-exist:0.0.1"),
            optional=True,
        ),
    ]

    print("-" * 70)
    async with Provisioner(
        build_settings(download_dir=Path("./deps"), max_workers=1), emitter=emitter
    ) as provisioner:
        result = await provisioner.provision(specs)
    print("-" * 70)
    print(f"\n{len(result.records)}/{len(result.outcomes)} dependencies provisioned")


if __name__ == "__main__":
    asyncio.run(main())
