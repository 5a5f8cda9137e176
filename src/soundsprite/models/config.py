"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from soundsprite.utils.persistence import PydanticPersistence

from .layout import DEFAULT_BPM, MAX_BPM, MIN_BPM

DEFAULT_HOME = Path.home() / ".soundsprite"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Paths
    storage_path: Path = Field(
        default_factory=lambda: DEFAULT_HOME / "storage.json",
        description="Durable key-value store holding the saved soundboard",
    )
    export_dir: Path = Field(
        default_factory=lambda: Path.home() / "Music" / "soundsprite",
        description="Default directory for exported samples",
    )

    # Audio output
    sample_rate: int = Field(default=44100, gt=0, description="Engine sample rate in Hz")
    buffer_size: int = Field(default=512, gt=0, description="Output buffer size in frames")
    output_channels: int = Field(default=2, ge=1, le=2, description="Output channels (1=mono, 2=stereo)")
    output_device: int | None = Field(
        default=None, description="Output device ID (None = system default)"
    )

    # Recording
    input_device: int | None = Field(
        default=None, description="Microphone device ID (None = system default)"
    )
    input_channels: int = Field(default=1, ge=1, le=2, description="Channels to capture")
    monitor: bool = Field(default=False, description="Play the microphone while recording")
    max_record_seconds: float | None = Field(
        default=None, gt=0, description="Stop recordings automatically after this long (None = never)"
    )

    # Playback
    pulse_duration: float = Field(
        default=0.22, ge=0.0, description="How long a triggered pad stays highlighted (seconds)"
    )
    default_bpm: int = Field(default=DEFAULT_BPM, ge=MIN_BPM, le=MAX_BPM, description="Tempo used before anything is saved")

    # Session settings
    auto_save: bool = Field(default=True, description="Save after every change")

    @field_serializer("storage_path", "export_dir")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string."""
        return str(path)

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.soundsprite/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return PydanticPersistence.load_json_or_default(path or DEFAULT_CONFIG_PATH, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        PydanticPersistence.save_json(self, path or DEFAULT_CONFIG_PATH)
