"""slnbuilder CLI - Generate a Visual Studio solution for one project."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from slnbuilder.config import GenerationConfig, GenerationResult
from slnbuilder.dotnet.solution import read_solution
from slnbuilder.errors import SlnBuilderError
from slnbuilder.pipeline import run_pipeline

logger = logging.getLogger(__name__)


def _configure_logging(console: Console, verbose: bool, quiet: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group()
def cli() -> None:
    """slnbuilder - Build a minimal solution from a project's references."""
    pass


def _run_with_progress(config: GenerationConfig, console: Console) -> GenerationResult:
    """Run the pipeline with Rich progress display."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Initialising...", total=None)

        def on_phase(name, label):
            progress.update(task, description=label)

        result = run_pipeline(config, progress_callback=on_phase)

    stats = result.stats
    metadata = result.metadata
    timings = metadata.get("phase_timings", {})

    table = Table(title=f"Solution: {Path(metadata['solution_path']).name}", show_edge=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Indexed assemblies", str(stats.get("indexed_assemblies", 0)))
    table.add_row("Referenced projects", str(stats.get("solution_projects", 0)))
    table.add_row("Written projects", str(stats.get("written_projects", 0)))
    table.add_row("Filtered projects", str(stats.get("filtered_projects", 0)))
    table.add_row("Configurations", str(stats.get("configurations", 0)))

    kinds = stats.get("kinds", {})
    if kinds:
        table.add_row("Kinds", ", ".join(f"{k}: {v}" for k, v in sorted(kinds.items())))

    duration = metadata.get("generation_duration_ms", 0)
    table.add_row("Duration", f"{duration:.1f}ms")

    console.print(table)

    if config.verbose and timings:
        timing_table = Table(title="Phase Timings", show_edge=False)
        timing_table.add_column("Phase", style="bold")
        timing_table.add_column("Time (ms)", justify="right")
        for phase, seconds in timings.items():
            timing_table.add_row(phase, f"{seconds * 1000:.1f}")
        console.print(timing_table)

    return result


@cli.command("generate")
@click.argument("root_project", type=click.Path(exists=True, dir_okay=False))
@click.option("-s", "--search-path", "search_paths", multiple=True,
              type=click.Path(exists=True, file_okay=False),
              help="Directory to scan for source projects (repeatable)")
@click.option("-o", "--output", "solution_path", default=None, help="Output .sln file path")
@click.option("-f", "--target-frameworks", default=GenerationConfig.target_frameworks,
              show_default=True, help="Frameworks whose native projects are included")
@click.option("--exclude", multiple=True, help="Additional path substrings to skip while scanning")
@click.option("--workers", default=1, type=int, help="Threads used to parse project files")
@click.option("--manifest", "manifest_path", default=None, help="Write a JSON summary to this path")
@click.option("--verbose", is_flag=True, help="Show debug logging and per-phase timings")
@click.option("--quiet", is_flag=True, help="Suppress all output except errors")
def generate_cmd(
    root_project: str,
    search_paths: tuple[str, ...],
    solution_path: str | None,
    target_frameworks: str,
    exclude: tuple[str, ...],
    workers: int,
    manifest_path: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Generate a solution containing ROOT_PROJECT and every project it references."""
    console = Console(stderr=True)
    _configure_logging(console, verbose, quiet)

    config = GenerationConfig(
        root_project=str(Path(root_project).resolve()),
        search_paths=list(search_paths),
        solution_path=solution_path,
        target_frameworks=target_frameworks,
        exclude_patterns=list(exclude),
        workers=workers,
        manifest_path=manifest_path,
        verbose=verbose,
        quiet=quiet,
    )

    try:
        if quiet:
            result = run_pipeline(config)
        else:
            result = _run_with_progress(config, console)
    except SlnBuilderError as e:
        logger.error(f"Solution generation failed: {e}")
        raise SystemExit(1)

    if not quiet:
        console.print(f"[green]Solution written to:[/green] {result.metadata['solution_path']}")


@cli.command("inspect")
@click.argument("solution", type=click.Path(exists=True, dir_okay=False))
def inspect_cmd(solution: str) -> None:
    """List the projects declared in SOLUTION."""
    sln = read_solution(solution)
    console = Console()

    table = Table(title=Path(solution).name, show_edge=False)
    table.add_column("Project", style="bold")
    table.add_column("Path")
    table.add_column("GUID")
    for project in sln.projects:
        table.add_row(project.name, project.path, project.project_guid)
    console.print(table)
    console.print(
        f"{len(sln.projects)} projects, {len(sln.folders)} folders, "
        f"{len(sln.configurations)} configurations"
    )


if __name__ == "__main__":
    cli()
