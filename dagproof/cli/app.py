"""Main Typer application: imports and registers all CLI commands.

Entry point: ``dagproof`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer

from dagproof.cli.commands.blocks import put_cmd, show_cmd
from dagproof.cli.commands.prove import prove_cmd
from dagproof.cli.commands.verify import verify_cmd
from dagproof.config import config

app = typer.Typer(
    name="dagproof",
    help="dagproof: inclusion proofs for content-addressed DAGs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _configure(
    log_level: str = typer.Option(config.log_level, "--log-level", help="Logging level."),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="put", help="Store a file as a block.")(put_cmd)
app.command(name="show", help="Show a decoded block and its links.")(show_cmd)
app.command(name="prove", help="Generate an inclusion proof.")(prove_cmd)
app.command(name="verify", help="Validate a proof file.")(verify_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
