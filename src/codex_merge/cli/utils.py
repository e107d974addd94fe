from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from codex_merge.config import get_config, load_config
from codex_merge.core.context import RunContext
from codex_merge.core.pipeline import Pipeline
from codex_merge.logger import get_logger, set_debug

console = Console()
log = get_logger("cli")


def build_pipeline(
    *,
    config_file: Optional[Path] = None,
    primary: Optional[Path] = None,
    secondary: Optional[Path] = None,
    out: Optional[Path] = None,
    kinds: Optional[list] = None,
    verbose: bool = False,
) -> Pipeline:
    cfg = load_config(config_file) if config_file else get_config()
    if verbose:
        cfg.debug = True
        set_debug(True)

    ctx = RunContext.from_config(
        cfg,
        log,
        primary_dir=primary.resolve() if primary else None,
        secondary_dir=secondary.resolve() if secondary else None,
        output_dir=out.resolve() if out else None,
    )
    return Pipeline(ctx, kinds=kinds or None)


def timed(label: str, fn, *, verbose: bool = False):
    t0 = time.perf_counter()
    result = fn()
    if verbose:
        console.log(f"{label} in {time.perf_counter() - t0:.2f}s")
    return result


def counts_table(title: str, counts: Dict[str, Dict[str, int]]) -> Table:
    table = Table(title=title)
    table.add_column("Kind", style="bold")
    table.add_column("Matched", justify="right")
    table.add_column("Need primary", justify="right")
    table.add_column("Need secondary", justify="right")
    for kind, row in counts.items():
        table.add_row(
            kind,
            str(row.get("matched", 0)),
            str(row.get("needPrimary", 0)),
            str(row.get("needSecondary", 0)),
        )
    return table


def stats_table(title: str, stats: Dict[str, Any]) -> Table:
    table = Table(title=title)
    table.add_column("Output", style="bold")
    table.add_column("Count", justify="right")
    for key, value in stats.items():
        table.add_row(key, str(value))
    return table
