#!/usr/bin/env python3
"""
01_basic_provision.py - Simplest possible provisioning run

Demonstrates: Provisioner with default settings resolving from Maven Central
Note: Requires internet connection to run
"""
import asyncio
from pathlib import Path

from hoist import Coordinate, DependencySpec, Provisioner, build_settings


async def main() -> None:
    """Fetch and verify gson into ./deps."""
    print("Starting basic provisioning example...")

    specs = [
        DependencySpec(coordinate=Coordinate.parse("com.google.code.gson:gson:2.10.1"))
    ]

    # Running the example twice reuses the verified artifact without any
    # download or checksum fetch.
    settings = build_settings(download_dir=Path("./deps"))
    async with Provisioner(settings) as provisioner:
        result = await provisioner.provision(specs)

    for record in result.records:
        print(f"{record.coordinate} -> {record.local_path} ({record.algorithm}:{record.checksum})")


if __name__ == "__main__":
    asyncio.run(main())
