"""Shared utilities — console output and logging setup.

Handlers and commands should import from here, not duplicate these functions.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

from rich.console import Console

# ---------------------------------------------------------------------------
# Console singletons
# ---------------------------------------------------------------------------
console = Console()
err_console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def print_step(msg: str) -> None:
    console.print(f"[bold cyan]▶ {msg}[/bold cyan]")


def print_info(msg: str) -> None:
    console.print(f"[blue]ℹ {msg}[/blue]")


def print_success(msg: str) -> None:
    console.print(f"[bold green]✔ {msg}[/bold green]")


def print_warning(msg: str) -> None:
    err_console.print(f"[bold yellow]⚠ {msg}[/bold yellow]")


def print_error(msg: str) -> None:
    err_console.print(f"[bold red]✖ {msg}[/bold red]")


def print_detail(msg: str) -> None:
    console.print(f"  {msg}")


def die(msg: str, code: int = 1) -> NoReturn:
    print_error(msg)
    sys.exit(code)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def init_logging(debug: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the ``ocictl`` logger for one command invocation.

    A file handler is attached when *log_file* is given and a stderr handler
    when *debug* is set; with neither, log records are discarded.
    """
    logger = logging.getLogger("ocictl")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if debug or log_file else logging.WARNING)
    logger.propagate = False

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(fh)
    if debug:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(sh)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger
