"""Audio command implementations."""

import click


@click.group(name="audio")
def audio_group():
    """Audio device commands."""
    pass


@audio_group.command(name="list")
@click.option("--inputs/--no-inputs", default=True, help="Also list microphones (default: yes)")
def list_audio(inputs: bool):
    """List available audio output and input devices."""
    # sounddevice needs PortAudio; only load it when devices are queried
    import sounddevice as sd

    from soundsprite.audio.device import AudioDevice

    default_input, default_output = sd.default.device

    def _show(devices: list[tuple[int, str, str]], default_id: int) -> None:
        if not devices:
            click.echo("  (none found)")
        for device_id, name, host_api in devices:
            marker = "  [Default]" if device_id == default_id else ""
            click.echo(f"  [{device_id}] {name} ({host_api}){marker}")

    click.echo("Output devices:")
    _show(AudioDevice.list_output_devices(), default_output)

    if inputs:
        click.echo("\nInput devices:")
        _show(AudioDevice.list_input_devices(), default_input)
