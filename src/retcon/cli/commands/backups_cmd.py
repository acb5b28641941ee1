import click

from retcon.cli.render import exit_on_error
from retcon.core.context import RetconContext
from retcon.output import machine_output, user_output


@click.command("backups")
@click.pass_obj
def backups_cmd(ctx: RetconContext) -> None:
    """List backup branches of the current branch, newest first.

    Backups are never deleted automatically. Remove one with
    `git branch -D <name>` once it is no longer needed.
    """
    engine = ctx.engine
    with exit_on_error():
        repo = engine.open_repository(ctx.cwd)
        backups = engine.list_backups(repo)

    if not backups:
        user_output("No backup branches.")
        return
    for name in backups:
        machine_output(name)
