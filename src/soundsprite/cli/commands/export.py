"""Export command implementation."""

from pathlib import Path
from typing import Optional

import click

from ..runtime import PAD, run_with_soundboard


@click.command()
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path), required=False)
@click.option("--pad", "-p", "pad", type=PAD, default=None, help="Export only this pad")
@click.pass_context
def export(ctx: click.Context, directory: Optional[Path], pad: Optional[int]):
    """Save recordings as audio files in DIRECTORY (default: config export_dir)."""

    async def action(board):
        if pad is not None:
            path = board.export_pad(pad, directory)
            click.echo(f"Exported {path}")
            return

        written, collector = board.export_all(directory)
        for path in written:
            click.echo(f"Exported {path}")
        if not written and not collector.has_errors:
            click.echo("No recorded pads to export.")
        if collector.has_errors:
            click.echo(collector.get_summary(), err=True)

    run_with_soundboard(ctx, action)
