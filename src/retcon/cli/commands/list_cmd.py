import json
from dataclasses import asdict

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from retcon.cli.dates import format_timestamp
from retcon.cli.render import exit_on_error
from retcon.core.context import RetconContext
from retcon.output import machine_output, user_output


@click.command("list")
@click.option("--no-fetch", is_flag=True, help="Do not fetch the upstream remote first")
@click.option("--json", "as_json", is_flag=True, help="Print commits as JSON on stdout")
@click.pass_obj
def list_cmd(ctx: RetconContext, no_fetch: bool, as_json: bool) -> None:
    """List unpushed commits on the current branch, newest first."""
    engine = ctx.engine
    with exit_on_error():
        repo = engine.open_repository(ctx.cwd)
        result = engine.scan(repo, fetch=False if no_fetch else None)

    if as_json:
        payload = {
            "current_branch": result.current_branch,
            "upstream_branch": result.upstream_branch,
            "has_upstream": result.has_upstream,
            "commits": [asdict(commit) for commit in result.commits],
        }
        machine_output(json.dumps(payload, indent=2))
        return

    if result.has_upstream:
        user_output(f"Unpushed commits on {result.current_branch} (vs {result.upstream_branch}):")
    else:
        user_output(
            f"Commits on {result.current_branch} "
            + click.style("(no upstream; pushed commits are still protected)", dim=True)
        )

    if not result.commits:
        user_output("  Nothing to edit.")
        return

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Commit", style="yellow", no_wrap=True)
    table.add_column("Author date", no_wrap=True)
    table.add_column("Author", style="cyan", no_wrap=True)
    table.add_column("Subject")
    for commit in result.commits:
        table.add_row(
            commit.short_hash,
            format_timestamp(commit.author_timestamp),
            escape(commit.author_name),
            escape(commit.subject),
        )

    # Output table to stderr (consistent with user_output convention)
    console = Console(stderr=True, width=200)
    console.print(table)
