"""dagproof CLI: Typer application with Rich output."""
