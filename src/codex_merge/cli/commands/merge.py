from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from codex_merge.cli.utils import build_pipeline, stats_table, timed
from codex_merge.core.exceptions import MergeError

console = Console()


def merge_command(
    primary: Optional[Path] = typer.Option(
        None, "--primary", "-p", help="Primary-language corpus directory"
    ),
    secondary: Optional[Path] = typer.Option(
        None, "--secondary", "-s", help="Secondary-language corpus directory"
    ),
    out: Optional[Path] = typer.Option(
        None, "--out", "-o", help="Output directory"
    ),
    kind: Optional[List[str]] = typer.Option(
        None, "--kind", "-k", help="Restrict the run to these content kinds"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, readable=True, help="Alternate YAML config"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Merge both corpora and write every collection and report.
    """
    try:
        pipeline = build_pipeline(
            config_file=config_file,
            primary=primary,
            secondary=secondary,
            out=out,
            kinds=kind,
            verbose=verbose,
        )
        stats = timed("Merged corpora", pipeline.run, verbose=verbose)
    except (MergeError, ValueError) as exc:
        console.print(f"[red]Merge failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(stats_table("Merge Summary", stats))
    anomalies = pipeline.ctx.anomalies
    if len(anomalies):
        console.print(f"[yellow]{len(anomalies)} anomalies recorded[/yellow] (see logs.json)")
    console.print(f"Output written to {pipeline.ctx.output_dir}")
