from __future__ import annotations

import typer
from rich.console import Console

from codex_merge.cli.commands.compare import compare_command
from codex_merge.cli.commands.merge import merge_command

app = typer.Typer(
    name="codex-merge",
    help="Merge bilingual game-content corpora into one localized dataset",
    add_completion=False,
)

console = Console()

app.command("merge")(merge_command)
app.command("compare")(compare_command)


def main():
    app()


if __name__ == "__main__":
    main()
