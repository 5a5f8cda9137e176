"""Persisted snapshot of pads, sequencer grid and tempo.

The JSON shape is fixed for backward compatibility with existing saves:
``{"pads": [{"name", "volume", "dataURL"}], "seq": [[bool] * 4] * 9, "bpm": int}``.
Older or partial records are normalized on load rather than rejected.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .layout import (
    DEFAULT_BPM,
    DEFAULT_PAD_NAME,
    DEFAULT_VOLUME,
    NUM_PADS,
    NUM_STEPS,
    clamp_bpm,
    empty_grid,
)
from .pad import Pad


class PadRecord(BaseModel):
    """Serializable projection of a pad (no decoded audio)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default=DEFAULT_PAD_NAME, description="Display name")
    volume: float = Field(default=DEFAULT_VOLUME, ge=0.0, description="Playback gain")
    data_url: str | None = Field(
        default=None, alias="dataURL", description="Base64 data URL of the recording"
    )

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> Any:
        """Blank or missing names fall back to the empty pad name."""
        return v or DEFAULT_PAD_NAME

    @field_validator("volume", mode="before")
    @classmethod
    def default_volume(cls, v: Any) -> Any:
        return DEFAULT_VOLUME if v is None else v

    @classmethod
    def from_pad(cls, pad: Pad) -> "PadRecord":
        """Project a pad, dropping its decoded buffer."""
        return cls(name=pad.name, volume=pad.volume, data_url=pad.encoded_sample)


class Snapshot(BaseModel):
    """Everything that survives a restart."""

    pads: list[PadRecord] = Field(
        default_factory=lambda: [PadRecord() for _ in range(NUM_PADS)],
        description="One record per pad",
    )
    seq: list[list[bool]] = Field(default_factory=empty_grid, description="Pad x step grid")
    bpm: int = Field(default=DEFAULT_BPM, description="Sequencer tempo")

    @field_validator("pads", mode="before")
    @classmethod
    def default_pads(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("pads")
    @classmethod
    def pad_to_bank_size(cls, v: list[PadRecord]) -> list[PadRecord]:
        """Short records get default pads; extra entries are dropped."""
        return v[:NUM_PADS] + [PadRecord() for _ in range(NUM_PADS - len(v))]

    @field_validator("seq", mode="before")
    @classmethod
    def default_seq(cls, v: Any) -> Any:
        return empty_grid() if v is None else v

    @field_validator("seq")
    @classmethod
    def normalize_grid(cls, v: list[list[bool]]) -> list[list[bool]]:
        """Force the grid to exactly pads x steps, filling gaps with off."""
        return normalize_grid(v)

    @field_validator("bpm", mode="before")
    @classmethod
    def default_bpm(cls, v: Any) -> Any:
        # Zero and missing both mean "never set"
        if not v:
            return DEFAULT_BPM
        if isinstance(v, float):
            return round(v)
        return v

    @field_validator("bpm")
    @classmethod
    def clamp_tempo(cls, v: int) -> int:
        return clamp_bpm(v)


def normalize_grid(grid: list[list[bool]]) -> list[list[bool]]:
    """Pad or truncate a grid to NUM_PADS rows of NUM_STEPS booleans."""
    rows = [list(row[:NUM_STEPS]) + [False] * (NUM_STEPS - len(row)) for row in grid[:NUM_PADS]]
    rows += [[False] * NUM_STEPS for _ in range(NUM_PADS - len(rows))]
    return rows
