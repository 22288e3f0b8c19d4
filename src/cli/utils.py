"""Shared CLI utilities."""

import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from rich.console import Console
from rich.markup import escape

from journal import Journal, JournalError, store_session

err_console = Console(stderr=True)
logger = structlog.get_logger()


@contextmanager
def open_journal(ctx_obj: dict, read_only: bool = False) -> Iterator[Journal]:
    """Open the configured store for one command and close it on every exit path."""
    config = ctx_obj["config"]
    db_path = ctx_obj["db_path"]
    with store_session(
        db_path, read_only=read_only, timeout=config.store.busy_timeout
    ) as store:
        logger.debug("store_ready", store=repr(store))
        yield Journal(store)


def fail(err: JournalError) -> None:
    """Print a journal error and exit non-zero."""
    logger.debug("command_failed", error=str(err), error_type=type(err).__name__)
    err_console.print(f"[red]Error:[/] {escape(str(err))}", highlight=False, soft_wrap=True)
    sys.exit(1)
