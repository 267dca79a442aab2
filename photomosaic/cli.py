"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from photomosaic.color_utils import Metric
from photomosaic.config import MosaicConfig
from photomosaic.errors import MosaicError
from photomosaic.pipeline import build_mosaic

app = typer.Typer(
    name="photomosaic",
    help="Rebuild an image out of a library of thumbnail pictures.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
        force=True,
    )


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


@app.command()
def main(
    image: Path = typer.Argument(..., help="The target image"),
    thumbs: str = typer.Option(
        _DEFAULTS.thumbs, "--thumbs", "-t", help="Glob for thumbnail files ('**' recurses)",
    ),
    thumbsize: int = typer.Option(
        _DEFAULTS.thumbsize, "--thumbsize", "-T", help="Size of the thumbnail grid in pixels",
    ),
    sample_res: int = typer.Option(
        _DEFAULTS.sample_res, "--sampleres", "-s", help="Sampling resolution of thumbnails",
    ),
    dpr: int = typer.Option(
        _DEFAULTS.dpr, "--dpr", "-d",
        help="Resolution multiplier for the final image (multiplies output size!)",
    ),
    algorithm: Metric = typer.Option(
        _DEFAULTS.metric, "--algorithm", "-a",
        help="'rgb' (fast) or 'lab' (slower, more accurate)",
    ),
    workers: int | None = typer.Option(
        _DEFAULTS.workers, "--workers", "-w", help="Match worker threads (default: auto)",
    ),
    cache: Path = typer.Option(
        _DEFAULTS.cache_path, "--cache", help="Signature cache file",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output-dir", "-o", help="Folder for the result",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Build a photomosaic of IMAGE from the thumbnails matched by --thumbs."""
    _setup_logging(verbose)

    cfg = MosaicConfig(
        thumbs=thumbs,
        thumbsize=thumbsize,
        sample_res=sample_res,
        dpr=dpr,
        metric=algorithm,
        workers=workers,
        cache_path=cache,
        output_dir=output_dir,
    )

    console.print(Panel.fit(
        f"[bold]PHOTOMOSAIC[/bold]\n"
        f"Target: {image}  |  Thumbs: {cfg.thumbs}\n"
        f"Thumb size: {cfg.thumbsize}  |  Sample res: {cfg.sample_res}  |  DPR: {cfg.dpr}\n"
        f"Algorithm: {cfg.metric.value}",
        border_style="cyan",
    ))

    progress = Progress(
        TextColumn("[cyan]Matching"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = None

    def _advance(done: int, total: int) -> None:
        nonlocal task_id
        if task_id is None:
            progress.start()
            task_id = progress.add_task("match", total=total)
        progress.update(task_id, completed=done)

    try:
        summary = build_mosaic(image, cfg, progress=_advance)
    except MosaicError as exc:
        progress.stop()
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(exc.exit_code) from exc
    progress.stop()

    cw, ch = summary.canvas_size
    console.print(Panel.fit(
        f"[bold green]DONE[/bold green] - saved to [bold]{summary.output_path}[/bold]\n"
        f"[dim]{cw}x{ch} px  chunks={summary.chunks}  "
        f"tiles used={summary.unique_tiles}/{summary.thumbnails}  "
        f"time={summary.elapsed:.1f}s[/dim]",
        border_style="green",
    ))


if __name__ == "__main__":
    app()
