import click

from retcon.cli.render import exit_on_error
from retcon.core.context import RetconContext
from retcon.output import user_output


@click.command("restore")
@click.argument("branch")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def restore_cmd(ctx: RetconContext, branch: str, yes: bool) -> None:
    """Reset the current branch to backup BRANCH.

    This runs `git reset --hard`, discarding uncommitted changes.
    """
    engine = ctx.engine
    with exit_on_error():
        repo = engine.open_repository(ctx.cwd)
        confirmed = yes or click.confirm(
            f"Reset the current branch to {branch}? Uncommitted changes will be lost",
            default=False,
            err=True,
        )
        if not confirmed:
            user_output("Restore cancelled.")
            return
        restored = engine.restore(repo, branch, confirmed=True)

    user_output(click.style("✓", fg="green") + f" Restored to {branch} ({restored[:7]})")
