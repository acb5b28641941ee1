import logging

import click

from retcon.cli.commands.backups_cmd import backups_cmd
from retcon.cli.commands.bulk_cmd import bulk_cmd
from retcon.cli.commands.edit_cmd import edit_cmd
from retcon.cli.commands.list_cmd import list_cmd
from retcon.cli.commands.restore_cmd import restore_cmd
from retcon.cli.render import exit_with_error
from retcon.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="retcon")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Edit messages and dates of unpushed commits, with a backup branch for undo."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context()
        except ValueError as e:
            exit_with_error(f"Invalid configuration: {e}")


cli.add_command(list_cmd)
cli.add_command(edit_cmd)
cli.add_command(bulk_cmd)
cli.add_command(restore_cmd)
cli.add_command(backups_cmd)


def main() -> None:
    """CLI entry point used by the `retcon` console script."""
    cli()
