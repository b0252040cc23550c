"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="issue-notify",
    help="issue-notify - send issue notifications after an analysis",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .db import db_import as _db_import  # noqa: F401, E402
from .send import send as _send  # noqa: F401, E402


def main() -> None:
    app()
