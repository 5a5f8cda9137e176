"""Record command implementation."""

import asyncio
import sys
from typing import Optional

import click

from ..runtime import PAD, run_with_soundboard


@click.command()
@click.argument("pad", type=PAD)
@click.option("--seconds", "-s", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Stop after this many seconds (default: wait for a key press)")
@click.option("--name", "-n", default=None, help='Pad name (default: "Sample <key>")')
@click.option("--monitor/--no-monitor", default=None,
              help="Hear the microphone while recording (default: from config)")
@click.pass_context
def record(ctx: click.Context, pad: int, seconds: Optional[float], name: Optional[str],
           monitor: Optional[bool]):
    """Record the microphone into PAD."""
    if seconds is None and not sys.stdin.isatty():
        raise click.UsageError("--seconds is required when not running in a terminal")

    async def action(board):
        await board.start_recording(pad, monitor=monitor, name=name)
        if seconds is not None:
            click.echo(f"Recording into pad {pad} for {seconds:g}s...")
            await asyncio.sleep(seconds)
        else:
            await asyncio.to_thread(click.pause, "Recording... press any key to stop")

        committed = await board.stop_recording()
        if committed is None:
            # Stopped by the configured length limit
            committed = board.pad_store.get(pad)
        duration = committed.buffer.duration if committed.buffer is not None else 0.0
        click.echo(f"Saved '{committed.name}' ({duration:.2f}s) to pad {pad}")

    run_with_soundboard(ctx, action)
