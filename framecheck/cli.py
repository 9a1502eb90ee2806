"""CLI entry point for reviewing and managing screenshot test artifacts."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from framecheck.codec import png
from framecheck.comparator.comparator import compare
from framecheck.errors import CorruptData, DimensionMismatch, UnsupportedFormat
from framecheck.models.config import ScreenshotConfig
from framecheck.store.artifact_store import FsArtifactStore

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "framecheck.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config: str) -> ScreenshotConfig:
    """Load the config file, falling back to defaults when it does not exist."""
    try:
        return ScreenshotConfig.load(config)
    except FileNotFoundError:
        logger.debug("No config at %s, using defaults", config)
        return ScreenshotConfig()
    except ValueError as e:
        console.print(f"[red]Invalid config {config}: {e}[/red]")
        sys.exit(1)


def _store(cfg: ScreenshotConfig) -> FsArtifactStore:
    return FsArtifactStore(Path(cfg.references_dir), Path(cfg.output_dir))


def _mark(present: bool) -> str:
    return "[green]yes[/green]" if present else "[dim]-[/dim]"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Pixel-exact screenshot regression testing"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def init(config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = ScreenshotConfig()
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print(f"  References: [blue]{cfg.references_dir}/<test id>.png[/blue]")
    console.print(f"  Output:     [blue]{cfg.output_dir}/<test id>/[/blue]")


@cli.command("compare")
@click.argument("reference", type=click.Path(exists=True, dir_okay=False))
@click.argument("actual", type=click.Path(exists=True, dir_okay=False))
@click.option("--diff", "diff_path", default=None, help="Write the diff image to this path")
@click.option("--tolerance", "-t", default=0, type=click.IntRange(0, 255),
              help="Maximum per-channel difference still considered a match")
def compare_cmd(reference: str, actual: str, diff_path: str | None, tolerance: int) -> None:
    """Compare two image files pixel by pixel."""
    try:
        ref_buffer = png.decode(Path(reference).read_bytes())
        act_buffer = png.decode(Path(actual).read_bytes())
    except (UnsupportedFormat, CorruptData) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    try:
        result = compare(ref_buffer, act_buffer, tolerance)
    except DimensionMismatch as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if diff_path:
        path = Path(diff_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(png.encode(result.diff_buffer))
        except OSError as e:
            console.print(f"[red]Could not write diff image {path}: {e}[/red]")
            sys.exit(1)
        console.print(f"  Diff image: [blue]{path}[/blue]")

    summary = (
        f"{result.differing_pixel_count}/{result.total_pixels} pixels differ "
        f"({result.diff_ratio:.2%}, tolerance {tolerance})"
    )
    if result.matches:
        console.print(f"[green]Match:[/green] {summary}")
        return
    console.print(f"[red]Mismatch:[/red] {summary}")
    sys.exit(1)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def status(config: str) -> None:
    """List test cases with artifacts in the output directory."""
    cfg = _load_config(config)
    store = _store(cfg)
    test_ids = store.list_test_ids()
    if not test_ids:
        console.print(f"[yellow]No screenshot artifacts in {cfg.output_dir}[/yellow]")
        return

    table = Table(title="Screenshot Artifacts")
    table.add_column("Test", style="bold")
    table.add_column("Reference")
    table.add_column("Actual")
    table.add_column("Diff")
    table.add_column("Expected")
    for test_id in test_ids:
        table.add_row(
            test_id,
            _mark(store.reference_exists(test_id)),
            _mark(store.actual_path(test_id).is_file()),
            _mark(store.diff_path(test_id).is_file()),
            _mark(store.expected_path(test_id).is_file()),
        )
    console.print(table)


@cli.command()
@click.argument("test_id")
@click.option("--yes", "-y", is_flag=True, help="Overwrite an existing reference without asking")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def accept(test_id: str, yes: bool, config: str) -> None:
    """Promote the last actual screenshot of TEST_ID to its reference image."""
    cfg = _load_config(config)
    store = _store(cfg)
    try:
        if store.reference_exists(test_id) and not yes:
            if not click.confirm(f"Reference for {test_id} already exists. Overwrite?"):
                return
        dest = store.promote_actual(test_id)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    console.print(f"[green]Accepted[/green] {test_id} -> [blue]{dest}[/blue]")


if __name__ == "__main__":
    cli()
