"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from soundsprite import __version__
from soundsprite.exceptions import ConfigurationError
from soundsprite.models import AppConfig

from .commands import audio_group, export, pads_group, record, reset, seq_group
from .runtime import echo_error

logger = logging.getLogger(__name__)


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Where log output goes for the given flags."""
    if log_file:
        return log_file
    if debug:
        # Debug mode: log to current directory
        return Path.cwd() / "soundsprite-debug.log"
    return Path.home() / ".soundsprite" / "logs" / "soundsprite.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file
    """
    # Determine log level based on flags
    if debug:
        level = logging.DEBUG
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Override with explicit log level if provided
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Create rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="soundsprite")
@click.option(
    '--config',
    'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.soundsprite/config.json)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./soundsprite-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    config_path: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    SoundSprite - a 9-pad soundboard with a microphone recorder and a 4-step sequencer.

    Pads are addressed by index (0-8) or by keyboard key (A S D F G H J K L).
    Every change is saved automatically and restored on the next run.

    \b
    Examples:
      # Record 2 seconds into pad A
      soundsprite record A --seconds 2

      # Play it back at half volume
      soundsprite pads volume A 50
      soundsprite pads play A

      # Put pad A on beats 1 and 3 and loop twice at 120 bpm
      soundsprite seq toggle A 0
      soundsprite seq toggle A 2
      soundsprite seq tempo 120
      soundsprite seq play --loops 2

      # Save every recording to a folder
      soundsprite export ./my-samples

      # List audio devices
      soundsprite audio list
    """
    ctx.ensure_object(dict)
    log_path = setup_logging(verbose, debug, log_file, log_level)
    ctx.obj.setdefault("log_path", log_path)

    if "config" in ctx.obj:
        return

    try:
        ctx.obj["config"] = AppConfig.load_or_default(config_path)
    except ConfigurationError as e:
        logger.exception("Invalid configuration")
        echo_error(e, log_path)
        sys.exit(1)


# Register commands
cli.add_command(audio_group)
cli.add_command(pads_group)
cli.add_command(record)
cli.add_command(seq_group)
cli.add_command(export)
cli.add_command(reset)

if __name__ == "__main__":
    cli()
