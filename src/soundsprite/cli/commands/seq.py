"""Sequencer command implementations."""

import asyncio

import click

from soundsprite.models import NUM_STEPS, PAD_KEYS

from ..runtime import PAD, run_with_soundboard


@click.group(name="seq")
def seq_group():
    """Edit and play the 4-step sequencer."""
    pass


def _render_grid(grid: list[list[bool]], bpm: int) -> None:
    click.echo(f"Tempo: {bpm} bpm\n")
    click.echo("       " + " ".join(str(step) for step in range(NUM_STEPS)))
    for index, row in enumerate(grid):
        cells = " ".join("x" if on else "." for on in row)
        click.echo(f"[{index}] {PAD_KEYS[index]}  {cells}")


@seq_group.command(name="show")
@click.pass_context
def show(ctx: click.Context):
    """Show the grid and tempo."""

    async def action(board):
        _render_grid(board.sequencer.grid, board.sequencer.bpm)

    run_with_soundboard(ctx, action)


@seq_group.command(name="toggle")
@click.argument("pad", type=PAD)
@click.argument("step", type=int)
@click.pass_context
def toggle(ctx: click.Context, pad: int, step: int):
    """Switch PAD on or off at STEP (0-3)."""

    async def action(board):
        value = board.sequencer.toggle(pad, step)
        click.echo(f"Pad {pad} step {step}: {'on' if value else 'off'}")

    run_with_soundboard(ctx, action)


@seq_group.command(name="tempo")
@click.argument("bpm", type=int)
@click.pass_context
def tempo(ctx: click.Context, bpm: int):
    """Set the tempo in BPM (clamped to 30-300)."""

    async def action(board):
        value = board.sequencer.set_tempo(bpm)
        click.echo(f"Tempo set to {value} bpm")

    run_with_soundboard(ctx, action)


@seq_group.command(name="clear")
@click.pass_context
def clear(ctx: click.Context):
    """Turn every step off."""

    async def action(board):
        board.sequencer.clear_grid()
        click.echo("Grid cleared")

    run_with_soundboard(ctx, action)


@seq_group.command(name="play")
@click.option("--loops", "-l", type=click.IntRange(min=1), default=1, help="Times to play the loop")
@click.pass_context
def play(ctx: click.Context, loops: int):
    """Play the loop LOOPS times."""

    async def action(board):
        sequencer = board.sequencer
        click.echo(f"Playing {loops} loop(s) at {sequencer.bpm} bpm")
        sequencer.start()
        try:
            await asyncio.sleep(loops * NUM_STEPS * sequencer.interval)
        finally:
            sequencer.stop()

    run_with_soundboard(ctx, action)
