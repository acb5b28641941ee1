import click

from retcon.cli.dates import date_option_callback, format_timestamp
from retcon.cli.render import exit_on_error, exit_with_error, render_events
from retcon.core.context import RetconContext
from retcon.core.types import EditRequest
from retcon.output import user_output


@click.command("edit")
@click.argument("revision")
@click.option("-m", "--message", help="New full commit message")
@click.option(
    "--author-date",
    callback=date_option_callback,
    help="New author date: ISO 8601 (local time unless an offset is given) or @<epoch>",
)
@click.option(
    "--commit-date",
    callback=date_option_callback,
    help="New commit date, same forms as --author-date",
)
@click.option(
    "--allow-dirty",
    is_flag=True,
    help="Proceed with uncommitted changes (rebases stash and reapply them)",
)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def edit_cmd(
    ctx: RetconContext,
    revision: str,
    message: str | None,
    author_date: int | None,
    commit_date: int | None,
    allow_dirty: bool,
    yes: bool,
) -> None:
    """Edit the message and/or dates of one unpushed commit.

    REVISION is a commit hash or any revision git understands (HEAD~2).
    A backup branch is created first; undo with `retcon restore <backup>`.
    """
    request = EditRequest(
        commit_hash=revision,
        new_message=message,
        new_author_timestamp=author_date,
        new_commit_timestamp=commit_date,
    )
    if request.is_noop:
        exit_with_error("Nothing to change: pass -m, --author-date or --commit-date")

    engine = ctx.engine
    with exit_on_error():
        repo = engine.open_repository(ctx.cwd)

        user_output(f"Editing {revision}:")
        if message is not None:
            user_output(f"  message     -> {message.splitlines()[0] if message.strip() else ''}")
        if author_date is not None:
            user_output(f"  author date -> {format_timestamp(author_date)}")
        if commit_date is not None:
            user_output(f"  commit date -> {format_timestamp(commit_date)}")

        if not yes and not click.confirm("Rewrite history?", default=True, err=True):
            user_output("Edit cancelled.")
            return

        outcome = render_events(engine.edit(repo, request, allow_dirty=allow_dirty))

    new_head = outcome.scan.commits[0].short_hash if outcome.scan.commits else "-"
    user_output(click.style("✓", fg="green") + f" Done. HEAD is now {new_head}")
    user_output(f"  Undo with: retcon restore {outcome.backup.branch_name}")
