"""db-import CLI command: seed users, rules and subscriptions."""

import sqlite3
from pathlib import Path

import typer

from ..exceptions import IssueNotifyError
from ..logging_config import setup_logging
from . import app
from ._common import DEFAULT_DB_PATH, console


@app.command(name="db-import")
def db_import(
    data_file: Path = typer.Argument(
        ...,
        help="JSON file with users, rules and subscriptions",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    db_path: Path = typer.Option(
        DEFAULT_DB_PATH,
        "--db",
        help="Notification database (created if missing)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Load users, rules and subscriptions into the notification database.

    Existing users and rules are updated in place.

    [bold cyan]Examples:[/bold cyan]

      issue-notify db-import seed.json

      issue-notify db-import seed.json --db /tmp/notify.db
    """
    setup_logging(verbose=verbose)

    from ..storage.database import NotifyDB
    from ..storage.writer import import_data, load_seed_file

    try:
        data = load_seed_file(data_file)
        with NotifyDB(db_path).open_session() as session:
            summary = import_data(session, data)
    except (IssueNotifyError, sqlite3.Error, KeyError, TypeError) as e:
        console.print(f"[red]Import failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(
        f"[green]Imported[/green] {summary.users} users, {summary.rules} rules, "
        f"{summary.subscriptions} subscriptions into [bold]{db_path}[/bold]"
    )
