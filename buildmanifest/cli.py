"""CLI entry point: build-manifest.

Subcommands:
    build-manifest build-info project.json   # merge dependencies into build-info.json
    build-manifest tree project.json         # write <project>_bdio.json
    build-manifest run project.json          # both

``project.json`` is the resolved-configuration export written by the
build plugin (see :mod:`buildmanifest.collaborator`).
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from buildmanifest.collaborator import ProjectModel, load_project_model
from buildmanifest.core.config import RunConfig, load_config
from buildmanifest.core.logging import setup_logging
from buildmanifest.exceptions import BuildManifestError


def _run_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every subcommand."""
    options = [
        click.argument("project_file", type=click.Path(exists=True, dir_okay=False)),
        click.option("-o", "--output-dir", default=None, help="Output directory (default: build/BlackDuck)"),
        click.option("--build-id", default=None, help="Build correlation id (env: BUILDMANIFEST_BUILD_ID)"),
        click.option("--include-scopes", default=None, help="Comma-separated scopes to include"),
        click.option("--exclude-scopes", default=None, help="Comma-separated scopes to exclude"),
        click.option(
            "--exclude-module",
            "excluded_modules",
            multiple=True,
            help="Module name or group:name to leave out of the tree (repeatable)",
        ),
        click.option("--project-name", default=None, help="Name of the tree root (default: project name)"),
        click.option("--version-name", default=None, help="Version of the tree root (default: project version)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _prepare(project_file: str, **kwargs: Any) -> tuple[ProjectModel, RunConfig]:
    try:
        project = load_project_model(Path(project_file))
    except BuildManifestError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return project, load_config(**kwargs)


def _config_kwargs(
    output_dir: str | None,
    build_id: str | None,
    include_scopes: str | None,
    exclude_scopes: str | None,
    excluded_modules: tuple[str, ...],
    project_name: str | None,
    version_name: str | None,
) -> dict[str, Any]:
    return {
        "output_dir": output_dir,
        "build_id": build_id,
        "included_scopes": include_scopes,
        "excluded_scopes": exclude_scopes,
        "excluded_modules": excluded_modules,
        "project_name": project_name,
        "version_name": version_name,
    }


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Build manifest: resolved dependency graph to build-info and tree files."""
    setup_logging(verbose)


@main.command("build-info")
@_run_options
def build_info(project_file: str, **options: Any) -> None:
    """Merge the project's dependencies into build-info.json."""
    from buildmanifest.pipeline import gather_build_info

    project, config = _prepare(project_file, **_config_kwargs(**options))
    try:
        manifest, path = gather_build_info(project, config)
    except BuildManifestError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Build info written to {path}")
    click.echo(f"  Build ID: {manifest.build_id or '(none)'}")
    click.echo(f"  Dependencies: {len(manifest.dependencies)}")


@main.command("tree")
@_run_options
def tree(project_file: str, **options: Any) -> None:
    """Write the project's dependency tree."""
    from buildmanifest.pipeline import create_dependency_tree

    project, config = _prepare(project_file, **_config_kwargs(**options))
    try:
        root, path = create_dependency_tree(project, config)
    except BuildManifestError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Dependency tree written to {path}")
    click.echo(f"  Nodes: {sum(1 for _ in root.iter_nodes()) - 1}")


@main.command("run")
@_run_options
def run(project_file: str, **options: Any) -> None:
    """Write both build-info.json and the dependency tree."""
    from buildmanifest.pipeline import run as run_pipeline

    project, config = _prepare(project_file, **_config_kwargs(**options))
    try:
        result = run_pipeline(project, config)
    except BuildManifestError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Build info written to {result.manifest_path}")
    click.echo(f"  Build ID: {result.manifest.build_id or '(none)'}")
    click.echo(f"  Dependencies: {len(result.manifest.dependencies)}")
    click.echo(f"Dependency tree written to {result.tree_path}")


if __name__ == "__main__":
    main()
