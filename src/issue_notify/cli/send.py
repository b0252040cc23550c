"""send CLI command: run the notification pipeline over an analysis' output."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import IssueNotifyError
from ..logging_config import setup_logging
from . import app
from ._common import DEFAULT_DB_PATH, console, resolve_config


@app.command()
def send(
    report_file: Path = typer.Argument(
        ...,
        help="Analysis report (JSON): project tree, branch, analysis date",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    issues_file: Path = typer.Argument(
        ...,
        help="Issue dump (JSON lines), one issue per line",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    db_path: Path = typer.Option(
        DEFAULT_DB_PATH,
        "--db",
        help="Notification database with users, rules and subscriptions (see db-import)",
    ),
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size",
        help="Changed issues per change-notification batch",
        min=1,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output counters in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Errors only"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        hidden=True,
    ),
) -> None:
    """
    Send the notifications for a finished analysis.

    [bold cyan]Examples:[/bold cyan]

      issue-notify send report.json issues.jsonl

      issue-notify send report.json issues.jsonl --db notify.db --json
    """
    from ..components.tree import TreeRootHolder
    from ..notifications.service import SubscriptionNotificationService
    from ..pipeline import SendIssueNotificationsStep, StepContext
    from ..storage import (
        JsonLinesIssueCache,
        NotifyDB,
        SqliteRuleRepository,
        SqliteUserStore,
        load_analysis_report,
    )

    try:
        settings = resolve_config(config, batch_size=batch_size, verbose=verbose, quiet=quiet)
        setup_logging(
            verbose=settings.verbosity == "verbose",
            quiet=settings.verbosity == "quiet",
            log_file=settings.log_file,
        )

        report = load_analysis_report(report_file)
        db = NotifyDB(db_path, create=False)
        service = SubscriptionNotificationService(db)
        step = SendIssueNotificationsStep(
            issue_cache=JsonLinesIssueCache(issues_file),
            rules=SqliteRuleRepository(db),
            tree_root_holder=TreeRootHolder(report.root),
            service=service,
            metadata=report.metadata,
            sessions=db,
            user_store=SqliteUserStore(),
            config=settings,
        )
        context = StepContext()
        step.execute(context)
    except IssueNotifyError as e:
        console.print(f"[red]Notification run failed:[/red] {e}")
        raise typer.Exit(1)

    stats = context.statistics.as_dict()
    if json_output:
        print(json.dumps({"statistics": stats, "deliveries": len(service.outbox)}, indent=2))
        return

    if not stats:
        console.print(
            f"[yellow]Notifications are disabled on {report.metadata.branch.type.value} branches.[/yellow]"
        )
        return

    table = Table(title=step.description)
    table.add_column("Statistic", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in stats.items():
        table.add_row(name, str(value))
    console.print(table)
