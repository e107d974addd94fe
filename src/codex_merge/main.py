"""
Main entry for codex-merge.

This module is intentionally thin:
- argument parsing
- configuration setup
- pipeline orchestration

No merge logic lives here.
"""

from __future__ import annotations

import argparse

from codex_merge.config import get_config
from codex_merge.logger import get_logger, set_debug

from codex_merge.core.context import RunContext
from codex_merge.core.pipeline import Pipeline

log = get_logger("main")


# ---------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------
def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="codex-merge: bilingual game-content merge"
    )
    parser.add_argument(
        "-p",
        "--primary",
        default=None,
        help="Primary-language corpus directory (defaults to config paths.primary_dir)",
    )
    parser.add_argument(
        "-s",
        "--secondary",
        default=None,
        help="Secondary-language corpus directory (defaults to config paths.secondary_dir)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output directory (defaults to config paths.output_dir)",
    )
    parser.add_argument(
        "-k",
        "--kind",
        action="append",
        default=None,
        help="Content kind to merge; repeat for several (defaults to all)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )
    return parser


# ---------------------------------------------------------
# Pipeline Runner
# ---------------------------------------------------------
def run(
    primary_dir: str | None,
    secondary_dir: str | None,
    output_dir: str | None,
    debug_flag: bool,
    kinds: list[str] | None = None,
) -> dict:
    """
    Prepare context and execute the merge pipeline.
    """

    cfg = get_config()
    cfg.debug = bool(debug_flag) or bool(cfg.debug)
    if cfg.debug:
        set_debug(True)

    ctx = RunContext.from_config(
        cfg,
        log,
        primary_dir=primary_dir,
        secondary_dir=secondary_dir,
        output_dir=output_dir,
    )
    log.info(f"Merging {ctx.primary_dir} with {ctx.secondary_dir}")

    pipeline = Pipeline(ctx, kinds=kinds)
    stats = pipeline.run()

    log.info(f"Main pipeline complete. Output: {ctx.output_dir}")
    return stats


# ---------------------------------------------------------
# Program Entry Point
# ---------------------------------------------------------
def main() -> None:
    ap = build_arg_parser()
    args = ap.parse_args()

    try:
        run(
            primary_dir=args.primary,
            secondary_dir=args.secondary,
            output_dir=args.output,
            debug_flag=args.debug,
            kinds=args.kind,
        )
    except Exception as exc:
        log.exception(f"Unhandled exception in main: {exc}")
        raise


if __name__ == "__main__":
    main()
