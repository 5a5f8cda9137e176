"""Smoke tests for CLI commands.

Runs commands through Click's CliRunner against a fake output device,
a fake microphone and a temporary storage file.
"""

import json

import pytest
from click.testing import CliRunner

from soundsprite.cli.main import cli
from soundsprite.exceptions import MicrophonePermissionError
from soundsprite.persistence import STORAGE_KEY, KeyValueStore

from conftest import FakeOutputDevice


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, config, capture_factory, temp_dir):
    """Invoke the CLI with fakes injected through the context object."""

    def _invoke(*args, input=None):
        obj = {
            "config": config,
            "capture_factory": capture_factory,
            "device_factory": FakeOutputDevice,
        }
        return runner.invoke(
            cli,
            ["--log-file", str(temp_dir / "cli.log"), *args],
            obj=obj,
            input=input,
        )

    return _invoke


def saved(config) -> dict:
    return json.loads(KeyValueStore(config.storage_path).get(STORAGE_KEY))


@pytest.mark.integration
class TestCLIHelp:
    """Test that all commands have working help text."""

    def test_main_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "9-pad soundboard" in result.output

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    @pytest.mark.parametrize("command", [
        ["audio"], ["pads"], ["record"], ["seq"], ["export"], ["reset"], ["seq", "play"],
    ])
    def test_command_help(self, invoke, command):
        result = invoke(*command, "--help")
        assert result.exit_code == 0


@pytest.mark.integration
class TestPadCommands:
    """Test pad editing through the CLI."""

    def test_list_empty(self, invoke):
        result = invoke("pads", "list")
        assert result.exit_code == 0
        assert "[0] A  Empty" in result.output
        assert "[8] L" in result.output

    def test_rename_by_key(self, invoke, config):
        result = invoke("pads", "name", "d", "Clap")
        assert result.exit_code == 0
        assert saved(config)["pads"][2]["name"] == "Clap"

    def test_volume_percent(self, invoke, config):
        result = invoke("pads", "volume", "0", "50")
        assert result.exit_code == 0
        assert "50%" in result.output
        assert saved(config)["pads"][0]["volume"] == 0.5

    def test_invalid_pad(self, invoke):
        result = invoke("pads", "play", "9")
        assert result.exit_code == 2
        assert "out of range" in result.output

    def test_play_empty_pad(self, invoke):
        result = invoke("pads", "play", "A")
        assert result.exit_code == 0
        assert "has no audio" in result.output


@pytest.mark.integration
class TestRecordCommand:
    """Test recording through the CLI."""

    def test_record_then_list_and_play(self, invoke, config):
        result = invoke("record", "A", "--seconds", "0.01", "--name", "Kick")
        assert result.exit_code == 0, result.output
        assert "Saved 'Kick'" in result.output
        assert saved(config)["pads"][0]["dataURL"].startswith("data:audio/flac;base64,")

        listing = invoke("pads", "list")
        assert "Kick" in listing.output
        assert "0.10s" in listing.output

        played = invoke("pads", "play", "A")
        assert played.exit_code == 0
        assert "Playing pad 0 (Kick)" in played.output

    def test_record_requires_seconds_without_terminal(self, invoke):
        result = invoke("record", "A")
        assert result.exit_code == 2
        assert "--seconds" in result.output

    def test_microphone_denied(self, invoke, capture_factory):
        capture_factory.open_error = MicrophonePermissionError("denied")
        result = invoke("record", "A", "-s", "0.01")
        assert result.exit_code == 1
        assert "ERROR:" in result.output


@pytest.mark.integration
class TestSequencerCommands:
    """Test grid editing through the CLI."""

    def test_toggle_and_show(self, invoke, config):
        assert invoke("seq", "toggle", "S", "2").exit_code == 0
        assert saved(config)["seq"][1] == [False, False, True, False]

        result = invoke("seq", "show")
        assert "[1] S  . . x ." in result.output
        assert "Tempo: 100 bpm" in result.output

    def test_toggle_invalid_step(self, invoke):
        result = invoke("seq", "toggle", "0", "4")
        assert result.exit_code == 1
        assert "ERROR:" in result.output

    def test_tempo_is_clamped(self, invoke, config):
        result = invoke("seq", "tempo", "1000")
        assert "Tempo set to 300 bpm" in result.output
        assert saved(config)["bpm"] == 300

    def test_clear(self, invoke, config):
        invoke("seq", "toggle", "0", "0")
        assert invoke("seq", "clear").exit_code == 0
        assert not any(saved(config)["seq"][0])

    def test_play(self, invoke):
        invoke("seq", "tempo", "300")
        result = invoke("seq", "play", "--loops", "1")
        assert result.exit_code == 0
        assert "Playing 1 loop(s) at 300 bpm" in result.output


@pytest.mark.integration
class TestExportAndReset:
    """Test bulk commands."""

    def test_export_nothing(self, invoke, temp_dir):
        result = invoke("export", str(temp_dir / "out"))
        assert result.exit_code == 0
        assert "No recorded pads" in result.output

    def test_export_single_pad_without_recording(self, invoke):
        result = invoke("export", "--pad", "A")
        assert result.exit_code == 1
        assert "No sample to download" in result.output

    def test_export_recording(self, invoke, temp_dir):
        invoke("record", "A", "-s", "0.01", "-n", "Kick")
        result = invoke("export", str(temp_dir / "out"))
        assert result.exit_code == 0
        assert (temp_dir / "out" / "Kick.flac").exists()

    def test_reset_requires_confirmation(self, invoke, config):
        invoke("pads", "name", "0", "Kick")
        result = invoke("reset", input="n\n")
        assert result.exit_code == 1
        assert saved(config)["pads"][0]["name"] == "Kick"

    def test_reset(self, invoke, config):
        invoke("pads", "name", "0", "Kick")
        result = invoke("reset", "--yes")
        assert result.exit_code == 0
        assert KeyValueStore(config.storage_path).get(STORAGE_KEY) is None
