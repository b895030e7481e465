"""Command-line interface for Hedera.

This module defines the CLI commands using Click framework.
It provides commands for creating new projects and posts, building sites,
and running the development server.

Commands:
- new: Scaffold a new Hedera project.
- newpost: Create a new dated post.
- build: Build the site into the destination directory.
- serve: Run the development server with incremental rebuilds.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import load_config
from .errors import BuildError, ConfigError
from .scaffold import DEFAULT_POST_NAME, generate_scaffold, new_post


@click.group()
@click.version_option(version=__version__, prog_name="hedera")
@click.option("-v", "--verbose", is_flag=True, help="Log every rendered file")
def cli(verbose: bool):
    """Hedera static site generator."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
    )


@cli.command()
@click.argument("path")
def new(path: str):
    """Scaffold a new Hedera project."""
    target = Path(path).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(f"Refusing to initialize into non-empty directory: {target}")
    generate_scaffold(target)
    click.echo(f"New Hedera site created at {target}")


@cli.command()
@click.argument("name", default=DEFAULT_POST_NAME)
def newpost(name: str):
    """Create a new post named YYYY-MM-DD-NAME.md."""
    project_root = Path.cwd()
    config = _load(project_root)
    try:
        path = new_post(config.posts, name)
    except FileExistsError as exc:
        raise click.ClickException(f"File already exists: {exc.filename}") from None
    click.echo(f"Created {_display_path(path, project_root)}")


@cli.command()
@click.option("-s", "--source", help="Source directory (overrides _config.yml)")
@click.option("-d", "--destination", help="Destination directory (overrides _config.yml)")
def build(source: str | None, destination: str | None):
    """Build the site into the destination directory."""
    project_root = Path.cwd()
    config = _load(project_root, source, destination)
    from .build import build_site

    try:
        result = build_site(config)
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(
            click.style(f"  File: {_display_path(exc.source_path, project_root)}", fg="yellow"),
            err=True,
        )
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(
        f"Built {len(result.pages)} pages and {len(result.posts)} posts into {result.output_dir}"
    )


@cli.command()
@click.option("-s", "--source", help="Source directory (overrides _config.yml)")
@click.option("-d", "--destination", help="Destination directory (overrides _config.yml)")
def serve(source: str | None, destination: str | None):
    """Run dev server with incremental rebuilds."""
    project_root = Path.cwd()
    config = _load(project_root, source, destination)
    from .server import DevServer

    # Always show the listening address and rebuilds
    logging.getLogger("hedera").setLevel(logging.INFO)
    server = DevServer(config)
    try:
        server.start()
    except BuildError as exc:
        raise click.ClickException(str(exc)) from None


def _load(project_root: Path, source: str | None = None, destination: str | None = None):
    try:
        return load_config(project_root, source, destination)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None


def _display_path(path: Path, project_root: Path) -> str:
    try:
        return str(Path(path).relative_to(project_root.resolve()))
    except ValueError:
        return str(path)


def main():
    """Entry point for the CLI application."""
    cli()
