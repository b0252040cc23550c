"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import NotifyConfig, load_config

console = Console()

DEFAULT_DB_PATH = Path(".issue-notify") / "notify.db"


def resolve_config(
    config: Optional[Path] = None,
    batch_size: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> NotifyConfig:
    """Build settings from CLI options."""
    overrides = {}
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)
