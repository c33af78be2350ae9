#!/usr/bin/env python3
"""
02_relocation.py - Move a dependency into a private namespace

Demonstrates:
- RelocationSet rules rewriting package names inside a jar
- Relocated outputs being reused from the ledger on later runs

Note: Requires internet connection to run
"""
import asyncio
from pathlib import Path

from hoist import (
    Coordinate,
    DependencySpec,
    Provisioner,
    RelocationRule,
    RelocationSet,
    build_settings,
)


async def main() -> None:
    """Relocate gson under myapp.libs.gson."""
    relocations = RelocationSet(
        rules=(RelocationRule(from_prefix="com.google.gson", to_prefix="myapp.libs.gson"),)
    )
    spec = DependencySpec(
        coordinate=Coordinate.parse("com.google.code.gson:gson:2.10.1"),
        relocations=relocations,
    )

    settings = build_settings(download_dir=Path("./deps"), application_name="myapp")
    async with Provisioner(settings) as provisioner:
        record = await provisioner.resolve(spec)

    print(f"Relocated copy: {record.local_path}")
    print(f"Relocation set: {record.relocation_id[:12]}")


if __name__ == "__main__":
    asyncio.run(main())
