from pathlib import Path

import click

from retcon.cli.plan import load_plan
from retcon.cli.render import exit_on_error, exit_with_error, render_events
from retcon.core.context import RetconContext
from retcon.output import user_output


@click.command("bulk")
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--allow-dirty",
    is_flag=True,
    help="Proceed with uncommitted changes (rebases stash and reapply them)",
)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def bulk_cmd(ctx: RetconContext, plan_file: Path, allow_dirty: bool, yes: bool) -> None:
    """Apply the edits listed in PLAN_FILE under a single backup branch.

    PLAN_FILE is a JSON list of {"commit", "message", "author_date",
    "commit_date"} objects. Edits run oldest author date first.
    """
    try:
        requests = load_plan(plan_file)
    except ValueError as e:
        exit_with_error(str(e))

    engine = ctx.engine
    with exit_on_error():
        repo = engine.open_repository(ctx.cwd)
        user_output(f"Plan {plan_file.name}: {len(requests)} edit(s)")
        if not yes and not click.confirm("Rewrite history?", default=True, err=True):
            user_output("Bulk edit cancelled.")
            return

        outcome = render_events(engine.bulk_edit(repo, requests, allow_dirty=allow_dirty))

    user_output(click.style("✓", fg="green") + f" Applied {len(outcome.applied)} edit(s)")
    user_output(f"  Undo with: retcon restore {outcome.backup.branch_name}")
