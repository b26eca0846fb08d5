"""``dagproof put`` and ``dagproof show``: write and inspect blocks."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dagproof.config import config
from dagproof.core.block_store import FileBlockStore
from dagproof.core.codecs import DAG_CBOR, DAG_JSON, RAW, DagJsonCodec, default_codecs
from dagproof.core.errors import DagProofError
from dagproof.core.links import extract_links
from dagproof.models.identifier import ContentIdentifier

console = Console()


def parse_cid(text: str) -> ContentIdentifier:
    """Typer parser for identifier arguments."""
    try:
        return ContentIdentifier.parse(text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def put_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to store."),
    raw: bool = typer.Option(False, "--raw", help="Store the bytes as an opaque raw block."),
    cbor: bool = typer.Option(False, "--cbor", help="Store the JSON document as dag-cbor."),
    hash_algorithm: str = typer.Option(
        None, "--hash", help="Hash algorithm (default from DAGPROOF_DEFAULT_HASH_ALGORITHM)."
    ),
    store_path: Path = typer.Option(config.store_path, "--store", help="Block store directory."),
) -> None:
    """Store a file as one block and print its identifier.

    JSON files are canonicalised as dag-json (or dag-cbor with ``--cbor``);
    ``{"/": "<cid>"}`` maps become links, which is how DAGs are assembled
    from the command line.
    """
    if raw and cbor:
        raise typer.BadParameter("--raw and --cbor are mutually exclusive.")
    store = FileBlockStore(store_path)
    data = file.read_bytes()
    try:
        if raw:
            cid = store.put(data, hash_algorithm=hash_algorithm, codec=RAW)
        else:
            tag = DAG_CBOR if cbor else DAG_JSON
            canonical = default_codecs.encode(DagJsonCodec().decode(data), tag)
            cid = store.put(canonical, hash_algorithm=hash_algorithm, codec=tag)
    except (DagProofError, ValueError) as exc:
        console.print(f"[red]Cannot store {file}:[/red] {exc}")
        raise typer.Exit(code=1)
    typer.echo(str(cid))


def show_cmd(
    cid: str = typer.Argument(..., help="Identifier of the block to show."),
    store_path: Path = typer.Option(config.store_path, "--store", help="Block store directory."),
) -> None:
    """Print a decoded block and the links it contains."""
    identifier = parse_cid(cid)
    store = FileBlockStore(store_path)
    try:
        data = store.get(identifier)
        if identifier.codec == RAW:
            links = []
            console.print(f"[dim]raw block, {len(data):,} bytes[/dim]")
            console.print(data[:64].hex())
        else:
            value = default_codecs.decode(data, identifier.codec)
            links = extract_links(value)
            console.print_json(DagJsonCodec().encode(value).decode("utf-8"))
    except DagProofError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if links:
        table = Table(title="Links", show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right")
        table.add_column("Identifier")
        for index, link in enumerate(links):
            table.add_row(str(index), str(link))
        console.print(table)
