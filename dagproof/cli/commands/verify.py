"""``dagproof verify``: validate a proof file without any block store."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dagproof.cli.commands.blocks import parse_cid
from dagproof.core.errors import ChainBrokenError, InvalidProofError
from dagproof.core.proof import Proof

console = Console()


def verify_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Proof JSON file."),
    expect_root: str = typer.Option(
        None, "--expect-root", help="Fail unless the proof claims this root."
    ),
) -> None:
    """Re-derive every identifier in a proof and check the chain."""
    try:
        proof = Proof.from_json(file.read_bytes())
        identifiers = proof.verified_identifiers()
    except (ChainBrokenError, InvalidProofError) as exc:
        console.print(
            Panel(str(exc), title="[bold]Proof INVALID[/bold]", border_style="red")
        )
        raise typer.Exit(code=1)

    if expect_root is not None and proof.root() != parse_cid(expect_root):
        console.print(
            Panel(
                f"Proof claims root {proof.root()}",
                title="[bold]Unexpected root[/bold]",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("#", justify="right", width=4)
    table.add_column("Identifier")
    table.add_column("Bytes", justify="right")
    for index, (cid, data) in enumerate(zip(identifiers, proof.nodes())):
        table.add_row(str(index), str(cid), f"{len(data):,}")

    console.print(
        Panel(
            table,
            title="[bold]Proof valid[/bold]",
            subtitle=f"[green]target {identifiers[-1].short}[/green]",
            border_style="green",
        )
    )
