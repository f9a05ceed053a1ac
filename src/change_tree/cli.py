"""CLI for change-tree."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from . import CT_DIR, __version__
from .config import (
    ChangeTreeConfig,
    builder_from_config,
    get_config_path,
    load_config,
    save_config,
)
from .errors import ChangeTreeError
from .git_source import GitChangeSource, records_from_name_status
from .models import ChangeFileRecord
from .render import render_text, render_tree
from .tree import BuildStats

console = Console()
error_console = Console(stderr=True)

OUTPUT_FORMATS = ["tree", "text", "json"]


def get_project_root() -> Path:
    """Get the project root directory (current working directory)."""
    return Path.cwd()


def fail(error: Exception) -> None:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {escape(str(error))}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="ctree")
def main() -> None:
    """change-tree - Show version-control changes as a folder tree."""
    pass


@main.command()
@click.argument("repo", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="tree",
    help="Output format",
)
@click.option(
    "--keep-root/--drop-root",
    default=None,
    help="Show files changed at the repository root (default: from config)",
)
@click.option(
    "--untracked/--no-untracked",
    default=None,
    help="Include untracked files (default: from config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show build statistics")
def show(
    repo: Path | None,
    output_format: str,
    keep_root: bool | None,
    untracked: bool | None,
    verbose: bool,
) -> None:
    """Show the changes in a git working copy."""
    try:
        source = GitChangeSource(repo or get_project_root())
        config = load_config(source.working_dir)
        if untracked is not None:
            config.include_untracked = untracked
        source.include_untracked = config.include_untracked
        changes = source.get_changes()
    except ChangeTreeError as e:
        fail(e)

    _emit(changes, config, keep_root, output_format, verbose, source.working_dir.name)


@main.command()
@click.argument("changes_file", type=click.File("r"), default="-")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="tree",
    help="Output format",
)
@click.option(
    "--keep-root/--drop-root",
    default=None,
    help="Show files changed at the repository root (default: from config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show build statistics")
def parse(changes_file, output_format: str, keep_root: bool | None, verbose: bool) -> None:
    """Build a tree from `git diff --name-status` output (FILE or stdin)."""
    try:
        config = load_config(get_project_root())
    except ChangeTreeError as e:
        fail(e)

    changes = records_from_name_status(changes_file.read())
    _emit(changes, config, keep_root, output_format, verbose, ".")


@main.command()
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool) -> None:
    """Write a default configuration in the current project."""
    project_root = get_project_root()
    config_path = get_config_path(project_root)

    if config_path.exists() and not force:
        error_console.print(
            f"[yellow]Warning:[/yellow] {CT_DIR}/ already exists. Use --force to reinitialize."
        )
        sys.exit(1)

    save_config(ChangeTreeConfig(), project_root)

    console.print(
        Panel(
            f"[green]Initialized change-tree[/green]\n\n"
            f"Config file: [dim]{config_path}[/dim]\n\n"
            f"Run [bold]ctree show[/bold] to display working-copy changes.",
            title="ctree init",
        )
    )


def _emit(
    changes: list[ChangeFileRecord],
    config: ChangeTreeConfig,
    keep_root: bool | None,
    output_format: str,
    verbose: bool,
    root_label: str,
) -> None:
    """Build the tree for ``changes`` and print it in the requested format."""
    if keep_root is not None:
        config.keep_root_changes = keep_root

    try:
        root, stats = builder_from_config(config).build_with_stats(changes)
    except ChangeTreeError as e:
        fail(e)

    if output_format == "json":
        click.echo(json.dumps(root.to_dict(), indent=2))
    elif root.is_empty:
        console.print("[dim]No changes.[/dim]")
    elif output_format == "text":
        click.echo(render_text(root))
    else:
        console.print(render_tree(root, root_label=root_label))

    if verbose:
        _print_stats(stats)


def _print_stats(stats: BuildStats) -> None:
    error_console.print(
        f"[dim]Tree build: {stats.records_seen} records, "
        f"{stats.records_assigned} assigned, "
        f"{stats.records_excluded} excluded, "
        f"{stats.folders_created} folders[/dim]"
    )


if __name__ == "__main__":
    main()
