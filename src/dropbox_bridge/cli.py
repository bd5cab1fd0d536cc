#!/usr/bin/env python3
"""
Command line entry point for the Dropbox bridge.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any

import aiofiles
import click

from dropbox_bridge import __version__
from dropbox_bridge.config import settings
from dropbox_bridge.logging import configure_logging, get_logger
from dropbox_bridge.storage.base import Diagnostic, StorageException
from dropbox_bridge.storage.config import create_example_config
from dropbox_bridge.storage.factory import create_storage

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="dropbox-bridge")
@click.option("--debug", is_flag=True, default=False, help="Human-readable debug logging")
def cli(debug: bool) -> None:
    """Dropbox bridge CLI - check the account, resolve URLs and manage files."""
    configure_logging(debug=debug or settings.debug)


@cli.command()
def ensure() -> None:
    """Check that the Dropbox account is reachable."""

    async def do_ensure() -> list[Diagnostic]:
        async with create_storage() as storage:
            return await storage.ensure()

    diagnostics = asyncio.run(do_ensure())

    if not diagnostics:
        click.echo("✓ Dropbox storage is healthy")
        return

    for diagnostic in diagnostics:
        click.echo(f"✗ [{diagnostic.severity.name}] {diagnostic.render()}", err=True)
    sys.exit(1)


@cli.command()
@click.argument("path")
def url(path: str) -> None:
    """Print the external URL for a logical PATH (e.g. dropbox://styles/thumbnail/public/a.jpg)."""

    async def do_url() -> str:
        async with create_storage() as storage:
            return await storage.get_external_url(path)

    try:
        external_url = asyncio.run(do_url())
    except StorageException as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(external_url)


@cli.command()
@click.argument("local_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("key")
@click.option("--content-type", default=None, help="MIME type recorded in the logs")
def upload(local_file: Path, key: str, content_type: str | None) -> None:
    """Upload LOCAL_FILE to KEY."""

    async def do_upload() -> str:
        async with aiofiles.open(local_file, "rb") as f:
            content = await f.read()
        async with create_storage() as storage:
            return await storage.upload(key, content, content_type)

    try:
        remote = asyncio.run(do_upload())
    except StorageException as e:
        logger.error("Upload failed", key=key, error=str(e))
        click.echo(f"✗ Upload failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Uploaded {local_file} to {remote}")


@cli.command("ls")
@click.argument("key", default="")
@click.option("--recursive", "-r", is_flag=True, default=False, help="List subfolders too")
def list_files(key: str, recursive: bool) -> None:
    """List the files below KEY."""

    async def do_list() -> list[dict[str, Any]]:
        async with create_storage() as storage:
            return await storage.list_contents(key, recursive=recursive)

    try:
        entries = asyncio.run(do_list())
    except StorageException as e:
        logger.error("Listing failed", key=key, error=str(e))
        click.echo(f"✗ Listing failed: {e}", err=True)
        sys.exit(1)

    for entry in entries:
        marker = "/" if entry["type"] == "dir" else ""
        size = entry.get("size")
        click.echo(f"{entry['path']}{marker}" + (f"\t{size}" if size is not None else ""))


@cli.command("example-config")
def example_config() -> None:
    """Print an example YAML configuration."""
    click.echo(create_example_config())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
