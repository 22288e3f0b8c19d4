"""CLI entry point for jrnl."""

from pathlib import Path

import click
import structlog

from cli.commands import get, put
from cli.config import get_db_path, load_config
from cli.logging_config import setup_logging
from cli.utils import fail
from journal import JournalError

logger = structlog.get_logger()


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="JRNL_DB",
    help="Journal database file (default: ~/.jrnl.db)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: ./jrnl.yaml, ~/.jrnl/config.yaml, ~/.config/jrnl/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, db_path: Path, config_path: Path):
    """jrnl - append-only personal journal."""
    try:
        config = load_config(config_path)
        if verbose:
            config.logging.level = "DEBUG"
        setup_logging(json_mode=config.logging.json_mode, level=config.logging.level)
        resolved = get_db_path(config, db_path)
    except JournalError as e:
        fail(e)
        return

    logger.debug("cli_started", db=str(resolved), command=ctx.invoked_subcommand)
    ctx.obj = {"config": config, "db_path": resolved}


cli.add_command(put)
cli.add_command(get)


if __name__ == "__main__":
    cli()
