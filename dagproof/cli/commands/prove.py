"""``dagproof prove``: generate an inclusion proof from the local store."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from dagproof.cli.commands.blocks import parse_cid
from dagproof.config import config
from dagproof.core.block_store import FileBlockStore
from dagproof.core.codecs import DagJsonCodec
from dagproof.core.errors import DagProofError
from dagproof.core.generator import ProofGenerator
from dagproof.core.walker import Target

console = Console(stderr=True)


def prove_cmd(
    root: str = typer.Argument(..., help="Root identifier to prove from."),
    target_cid: str = typer.Option(None, "--target-cid", help="Identifier of the target block."),
    target_json: str = typer.Option(
        None, "--target-json", help="Target value as dag-json text."
    ),
    out: Path = typer.Option(None, "--out", "-o", help="Write the proof here instead of stdout."),
    store_path: Path = typer.Option(config.store_path, "--store", help="Block store directory."),
) -> None:
    """Find a path from ROOT to the target and emit the proof as JSON."""
    if (target_cid is None) == (target_json is None):
        raise typer.BadParameter("Pass exactly one of --target-cid or --target-json.")

    root_cid = parse_cid(root)
    if target_cid is not None:
        target = Target.by_identifier(parse_cid(target_cid))
    else:
        try:
            target = Target.by_value(DagJsonCodec().decode(target_json.encode("utf-8")))
        except DagProofError as exc:
            raise typer.BadParameter(f"--target-json: {exc}") from exc

    generator = ProofGenerator(FileBlockStore(store_path))
    try:
        proof = generator.generate_proof_to_cid(target, root_cid)
    except DagProofError as exc:
        console.print(f"[red]Proof generation failed:[/red] {exc}")
        raise typer.Exit(code=1)

    text = proof.to_json(indent=2)
    if out is None:
        typer.echo(text)
    else:
        out.write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]Wrote {len(proof)}-node proof to {out}[/green]")
