"""Reset command implementation."""

import click

from ..runtime import run_with_soundboard


@click.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx: click.Context, yes: bool):
    """Reset all pads and the sequence. This cannot be undone."""
    if not yes:
        click.confirm("Reset all pads and sequence? This cannot be undone.", abort=True)

    async def action(board):
        board.reset_all()
        click.echo("All pads and the sequence were reset.")

    run_with_soundboard(ctx, action, load=False)
