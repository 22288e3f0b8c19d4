"""Journal CLI commands: put and get."""

import json
from datetime import datetime
from typing import Optional

import click
import structlog

from cli.timespec import day_bounds, parse_instant, resolve_day
from cli.utils import err_console, fail, open_journal
from journal import Entry, GetOptions, JournalError
from shared_types import OutputFormat

logger = structlog.get_logger()


def build_get_options(
    when: str,
    after: Optional[str] = None,
    before: Optional[str] = None,
    now: Optional[datetime] = None,
) -> GetOptions:
    """Turn `get` arguments into query bounds.

    A time expression selects its whole local day; explicit ``--after`` /
    ``--before`` instants replace the matching bound.
    """
    after_dt = before_dt = None
    if when:
        day = resolve_day(when, now=now)
        after_dt, before_dt = day_bounds(day)
        logger.debug("time_resolved", expression=when, day=day.isoformat())
    if after:
        after_dt = parse_instant(after)
    if before:
        before_dt = parse_instant(before)
    return GetOptions(before=before_dt, after=after_dt)


def render_entry(entry: Entry, fmt: OutputFormat) -> str:
    if fmt == OutputFormat.JSON:
        return json.dumps(entry.to_dict(), ensure_ascii=False)
    return str(entry)


@click.command("put")
@click.pass_obj
def put(obj: dict):
    """Append standard input as a new journal entry."""
    with click.open_file("-") as stdin:
        content = stdin.read()
    if not content.strip():
        err_console.print("[yellow]warning:[/] empty journal input, nothing to store")
        return

    try:
        with open_journal(obj) as j:
            entry_id = j.add_entry(content)
    except JournalError as e:
        fail(e)
        return

    err_console.print(f"[green]Stored:[/] {entry_id}", highlight=False)


@click.command("get")
@click.argument("when", nargs=-1)
@click.option("--after", help="Only entries created at or after this ISO-8601 instant")
@click.option("--before", help="Only entries created before this ISO-8601 instant")
@click.option("--sort/--no-sort", default=None, help="Order entries by creation time")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Output format",
)
@click.pass_obj
def get(obj: dict, when: tuple[str, ...], after: str, before: str, sort: bool, fmt: str):
    """Print entries, optionally limited to a day such as "yesterday" or "last monday"."""
    output_cfg = obj["config"].output
    sort = output_cfg.sort if sort is None else sort
    fmt = OutputFormat(fmt) if fmt else output_cfg.format

    try:
        options = build_get_options(" ".join(when), after=after, before=before)
        with open_journal(obj, read_only=True) as j:
            entries = j.get(options)
    except JournalError as e:
        fail(e)
        return

    if sort:
        entries = sorted(entries, key=lambda e: (e.created_at, e.id))
    for entry in entries:
        click.echo(render_entry(entry, fmt))
