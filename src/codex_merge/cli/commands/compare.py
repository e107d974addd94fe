from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from codex_merge.cli.utils import build_pipeline, counts_table
from codex_merge.core.exceptions import MergeError

console = Console()


def compare_command(
    primary: Optional[Path] = typer.Option(
        None, "--primary", "-p", help="Primary-language corpus directory"
    ),
    secondary: Optional[Path] = typer.Option(
        None, "--secondary", "-s", help="Secondary-language corpus directory"
    ),
    kind: Optional[List[str]] = typer.Option(
        None, "--kind", "-k", help="Restrict the comparison to these content kinds"
    ),
    workbook: Optional[Path] = typer.Option(
        None, "--workbook", "-w", help="Also write the comparison workbook (.xlsx)"
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
    Show which records are matched or missing in either corpus.
    """
    try:
        pipeline = build_pipeline(
            config_file=config_file,
            primary=primary,
            secondary=secondary,
            kinds=kind,
            verbose=verbose,
        )
        counts = pipeline.compare_only()
    except (MergeError, ValueError) as exc:
        console.print(f"[red]Comparison failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(counts_table("Corpus Comparison", counts))

    if workbook:
        pipeline.ctx.comparator.write_workbook(workbook)
        console.print(f"Workbook written to {workbook}")
