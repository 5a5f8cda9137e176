"""Pad command implementations."""

import asyncio

import click

from soundsprite.models import PAD_KEYS

from ..runtime import PAD, run_with_soundboard


@click.group(name="pads")
def pads_group():
    """Show, play and edit pads."""
    pass


@pads_group.command(name="list")
@click.pass_context
def list_pads(ctx: click.Context):
    """List all pads with their volume and recording."""

    async def action(board):
        for index, pad in enumerate(board.pad_store.pads):
            if pad.is_playable:
                status = f"{pad.buffer.duration:.2f}s"
            elif pad.has_recording:
                status = "unreadable recording"
            else:
                status = "-"
            click.echo(
                f"[{index}] {PAD_KEYS[index]}  {pad.name:<20} {pad.volume_percent:>3}%  {status}"
            )

    run_with_soundboard(ctx, action)


@pads_group.command(name="play")
@click.argument("pad", type=PAD)
@click.pass_context
def play(ctx: click.Context, pad: int):
    """Play PAD (index 0-8 or key) at its volume."""

    async def action(board):
        voice = board.trigger(pad)
        if voice is None:
            click.echo(f"Pad {pad} has no audio.")
            return
        click.echo(f"Playing pad {pad} ({board.pad_store.get(pad).name})")
        # Let the voice finish before the device is closed
        await asyncio.sleep(voice.audio_data.duration + 0.1)

    run_with_soundboard(ctx, action)


@pads_group.command(name="name")
@click.argument("pad", type=PAD)
@click.argument("name")
@click.pass_context
def rename(ctx: click.Context, pad: int, name: str):
    """Rename PAD (a blank name resets it to "Empty")."""

    async def action(board):
        updated = board.pad_store.set_name(pad, name)
        click.echo(f"Pad {pad} renamed to '{updated.name}'")

    run_with_soundboard(ctx, action)


@pads_group.command(name="volume")
@click.argument("pad", type=PAD)
@click.argument("percent", type=float)
@click.pass_context
def volume(ctx: click.Context, pad: int, percent: float):
    """Set PAD volume in percent (100 = unchanged)."""

    async def action(board):
        updated = board.pad_store.set_volume(pad, percent)
        click.echo(f"Pad {pad} volume set to {updated.volume_percent}%")

    run_with_soundboard(ctx, action)


@pads_group.command(name="clear")
@click.argument("pad", type=PAD)
@click.pass_context
def clear(ctx: click.Context, pad: int):
    """Remove PAD's recording, name and volume."""

    async def action(board):
        board.pad_store.clear(pad)
        click.echo(f"Pad {pad} cleared")

    run_with_soundboard(ctx, action)
