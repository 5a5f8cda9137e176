"""Write pad recordings out as standalone audio files."""

import logging
from pathlib import Path

from ..audio.codec import extension_for_mime, from_data_url
from ..exceptions import ErrorCollector, NoSampleError, collect_errors
from ..models import Pad
from ..utils import safe_filename

logger = logging.getLogger(__name__)


def export_filename(pad: Pad, index: int, mime: str) -> str:
    """File name for a pad's recording: its display name plus the MIME extension."""
    return f"{safe_filename(pad.name, f'pad{index}')}.{extension_for_mime(mime)}"


def export_pad(pad: Pad, index: int, directory: Path) -> Path:
    """
    Write one pad's recording into `directory`.

    Returns:
        Path of the written file

    Raises:
        NoSampleError: If the pad has no committed recording
        ValueError: If the stored encoding is not a valid data URL
        OSError: If the file cannot be written
    """
    if not pad.encoded_sample:
        raise NoSampleError(index)

    mime, raw = from_data_url(pad.encoded_sample)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(pad, index, mime)
    path.write_bytes(raw)

    logger.info(f"Exported pad {index} to {path}")
    return path


def export_all(pads: list[Pad], directory: Path) -> tuple[list[Path], ErrorCollector]:
    """
    Write every recorded pad into `directory`; pads without a recording are skipped.

    Pads that share a display name get their index appended so no file
    overwrites another.

    Returns:
        Tuple of (written paths, collector with any per-pad failures)
    """
    collector = collect_errors("export pads")
    written: list[Path] = []
    used_names: set[str] = set()

    for index, pad in enumerate(pads):
        if not pad.encoded_sample:
            continue

        with collector.try_operation(f"pad {index} ('{pad.name}')"):
            mime, _ = from_data_url(pad.encoded_sample)
            if export_filename(pad, index, mime) in used_names:
                pad = pad.model_copy(update={"name": f"{pad.name} {index}"})
            path = export_pad(pad, index, directory)
            used_names.add(path.name)
            written.append(path)

    if collector.has_errors:
        logger.warning(collector.get_summary())
    return written, collector
