"""Helpers shared by the CLI commands: pad arguments, soundboard lifecycle, error display."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click

from soundsprite.core.application import Soundboard
from soundsprite.exceptions import SoundSpriteError, format_error_for_display
from soundsprite.models import NUM_PADS, AppConfig, index_for_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PadParam(click.ParamType):
    """A pad given as its index (0-8) or its keyboard key (A S D F G H J K L)."""

    name = "pad"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> int:
        if isinstance(value, int):
            index = value
        elif str(value).isdigit():
            index = int(value)
        else:
            key_index = index_for_key(str(value)) if len(str(value)) == 1 else None
            if key_index is None:
                self.fail(f"{value!r} is not a pad index (0-{NUM_PADS - 1}) or pad key", param, ctx)
            index = key_index

        if not 0 <= index < NUM_PADS:
            self.fail(f"pad index {index} out of range (0-{NUM_PADS - 1})", param, ctx)
        return index


PAD = PadParam()


def get_config(ctx: click.Context) -> AppConfig:
    return ctx.obj["config"]


def echo_error(error: Exception, log_path: Optional[Path] = None) -> None:
    """Show an error banner with its recovery hint."""
    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)

    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)
    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)


def run_with_soundboard(
    ctx: click.Context,
    action: Callable[[Soundboard], Awaitable[T]],
    load: bool = True,
) -> T:
    """
    Build a soundboard, restore the saved state, run `action`, and shut down.

    SoundSpriteErrors (and IndexError from bad pad/step numbers) are shown
    as an error banner and exit with status 1.
    """
    obj = ctx.obj

    async def _run() -> T:
        board = Soundboard(
            config=obj["config"],
            capture_factory=obj.get("capture_factory"),
            device_factory=obj.get("device_factory"),
        )
        try:
            if load:
                failures = await board.load()
                if failures is not None and failures.has_errors:
                    click.echo(
                        f"Warning: {failures.error_count} pad(s) could not be restored "
                        f"and will be silent.",
                        err=True,
                    )
            return await action(board)
        finally:
            board.close()

    try:
        return asyncio.run(_run())
    except (SoundSpriteError, IndexError) as e:
        logger.exception("Command failed")
        echo_error(e, obj.get("log_path"))
        sys.exit(1)
