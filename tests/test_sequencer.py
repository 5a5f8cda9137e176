"""Tests for the step sequencer: grid editing, tempo and transport timing."""

import asyncio
import time
from unittest.mock import Mock

import pytest

from soundsprite.core.sequencer import Sequencer, step_interval
from soundsprite.protocols import SequencerEvent, SequencerObserver


class StepRecorder:
    """Observer that timestamps STEP events."""

    def __init__(self):
        self.steps: list[tuple[int, list[int], float]] = []

    def on_sequencer_event(self, event, **kwargs):
        if event == SequencerEvent.STEP:
            self.steps.append((kwargs["step"], kwargs["pads"], time.perf_counter()))


@pytest.fixture
def mock_engine():
    return Mock()


@pytest.fixture
def loaded_store(pad_store, audio_data):
    """Pads 0 and 1 have audio; the rest are empty."""
    pad_store.commit(0, audio_data, "data:x;base64,", "Kick")
    pad_store.commit(1, audio_data, "data:x;base64,", "Snare")
    pad_store.set_volume(1, 50)
    return pad_store


@pytest.fixture
def sequencer(mock_engine, loaded_store):
    return Sequencer(mock_engine, loaded_store)


async def wait_for_steps(recorder: StepRecorder, count: int, timeout: float = 5.0) -> None:
    deadline = time.perf_counter() + timeout
    while len(recorder.steps) < count and time.perf_counter() < deadline:
        await asyncio.sleep(0.005)


@pytest.mark.unit
class TestGridEditing:
    """Test grid and tempo edits."""

    def test_defaults(self, sequencer):
        assert sequencer.bpm == 100
        assert sequencer.current_step == 0
        assert not sequencer.is_playing
        assert sequencer.grid == [[False] * 4 for _ in range(9)]

    def test_toggle_flips_cell(self, sequencer):
        assert sequencer.toggle(2, 3) is True
        assert sequencer.grid[2][3]
        assert sequencer.toggle(2, 3) is False
        assert not sequencer.grid[2][3]

    def test_grid_is_a_copy(self, sequencer):
        grid = sequencer.grid
        grid[0][0] = True
        assert not sequencer.grid[0][0]

    @pytest.mark.parametrize("pad,step", [(-1, 0), (9, 0), (0, -1), (0, 4), (True, 0), (0, False), (1.0, 0)])
    def test_invalid_cell_raises_index_error(self, sequencer, pad, step):
        with pytest.raises(IndexError):
            sequencer.toggle(pad, step)

    @pytest.mark.parametrize("bpm,expected", [(120, 120), (10, 30), (1000, 300), (99.6, 100), ("140", 140)])
    def test_set_tempo_clamps(self, sequencer, bpm, expected):
        assert sequencer.set_tempo(bpm) == expected
        assert sequencer.bpm == expected

    @pytest.mark.parametrize("bpm", ["fast", None, float("nan")])
    def test_set_tempo_rejects_non_numbers(self, sequencer, bpm):
        with pytest.raises(ValueError):
            sequencer.set_tempo(bpm)
        assert sequencer.bpm == 100

    def test_step_interval(self):
        assert step_interval(120) == pytest.approx(0.5)
        assert step_interval(100) == pytest.approx(0.6)

    def test_clear_grid_keeps_tempo(self, sequencer):
        sequencer.toggle(0, 0)
        sequencer.set_tempo(150)

        sequencer.clear_grid()

        assert not any(any(row) for row in sequencer.grid)
        assert sequencer.bpm == 150

    def test_restore_normalizes_shape(self, sequencer):
        sequencer.restore([[True], [False, False, True, False, True]], 0)

        grid = sequencer.grid
        assert len(grid) == 9
        assert grid[0] == [True, False, False, False]
        assert grid[1] == [False, False, True, False]
        assert sequencer.bpm == 100

    def test_reset(self, sequencer):
        sequencer.toggle(4, 1)
        sequencer.set_tempo(200)

        sequencer.reset()

        assert not any(any(row) for row in sequencer.grid)
        assert sequencer.bpm == 100

    def test_edit_events(self, sequencer):
        observer = Mock(spec=SequencerObserver)
        sequencer.register_observer(observer)

        sequencer.toggle(1, 2)
        sequencer.set_tempo(90)
        sequencer.clear_grid()

        events = [c.args[0] for c in observer.on_sequencer_event.call_args_list]
        assert events == [SequencerEvent.CELL_TOGGLED, SequencerEvent.TEMPO_CHANGED, SequencerEvent.GRID_CLEARED]
        assert observer.on_sequencer_event.call_args_list[0].kwargs == {"pad": 1, "step": 2, "value": True}


@pytest.mark.unit
class TestTransport:
    """Test start/stop and ticking."""

    @pytest.mark.asyncio
    async def test_start_plays_step_zero_immediately(self, sequencer, mock_engine, audio_data):
        sequencer.toggle(0, 0)

        sequencer.start()

        mock_engine.play.assert_called_once_with(audio_data, 1.0, 0)
        assert sequencer.is_playing
        assert sequencer.current_step == 1
        sequencer.stop()

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, sequencer, mock_engine):
        sequencer.toggle(0, 0)
        sequencer.start()
        task = sequencer._task

        sequencer.start()

        assert sequencer._task is task
        assert mock_engine.play.call_count == 1
        sequencer.stop()

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, sequencer):
        observer = Mock(spec=SequencerObserver)
        sequencer.register_observer(observer)

        sequencer.stop()
        observer.on_sequencer_event.assert_not_called()

        sequencer.start()
        sequencer.stop()
        sequencer.stop()

        events = [c.args[0] for c in observer.on_sequencer_event.call_args_list]
        assert events.count(SequencerEvent.STOPPED) == 1
        assert not sequencer.is_playing

    @pytest.mark.asyncio
    async def test_pads_without_audio_are_skipped(self, sequencer, mock_engine):
        sequencer.toggle(7, 0)

        sequencer.start()

        mock_engine.play.assert_not_called()
        sequencer.stop()

    @pytest.mark.asyncio
    async def test_playback_error_does_not_stop_loop(self, sequencer, mock_engine):
        sequencer.set_tempo(300)
        sequencer.toggle(0, 0)
        sequencer.toggle(1, 0)
        mock_engine.play.side_effect = [RuntimeError("device gone"), None]
        steps = StepRecorder()
        sequencer.register_observer(steps)

        sequencer.start()
        await wait_for_steps(steps, 2)

        assert steps.steps[0][1] == [1]
        assert sequencer.is_playing
        sequencer.stop()

    @pytest.mark.asyncio
    async def test_steps_cycle_with_tempo_interval(self, sequencer):
        sequencer.set_tempo(300)
        steps = StepRecorder()
        sequencer.register_observer(steps)

        sequencer.start()
        await wait_for_steps(steps, 6)
        sequencer.stop()

        assert [s[0] for s in steps.steps[:6]] == [0, 1, 2, 3, 0, 1]
        gaps = [b[2] - a[2] for a, b in zip(steps.steps, steps.steps[1:6])]
        for gap in gaps:
            assert gap == pytest.approx(0.2, abs=0.08)

    @pytest.mark.asyncio
    async def test_no_ticks_after_stop(self, sequencer):
        sequencer.set_tempo(300)
        steps = StepRecorder()
        sequencer.register_observer(steps)

        sequencer.start()
        sequencer.stop()
        count = len(steps.steps)
        await asyncio.sleep(0.5)

        assert len(steps.steps) == count == 1

    @pytest.mark.asyncio
    async def test_tempo_change_restarts_single_task(self, sequencer):
        sequencer.start()
        old_task = sequencer._task
        steps = StepRecorder()
        sequencer.register_observer(steps)

        sequencer.set_tempo(300)
        await asyncio.sleep(0)

        assert old_task.cancelled() or old_task.cancelling()
        assert sequencer._task is not old_task
        # Restart fires step 0 again
        assert steps.steps[0][0] == 0
        assert sequencer.current_step == 1

        await wait_for_steps(steps, 3)
        assert [s[0] for s in steps.steps[:3]] == [0, 1, 2]
        sequencer.stop()

    @pytest.mark.asyncio
    async def test_clear_grid_while_playing(self, sequencer, mock_engine):
        sequencer.set_tempo(300)
        for step in range(4):
            sequencer.toggle(0, step)
        steps = StepRecorder()
        sequencer.register_observer(steps)

        sequencer.start()
        sequencer.clear_grid()
        await wait_for_steps(steps, 3)

        assert sequencer.is_playing
        assert mock_engine.play.call_count == 1
        assert all(pads == [] for _, pads, _ in steps.steps[1:])
        sequencer.stop()


@pytest.mark.integration
class TestGridScenario:
    """Pad 0 on step 0 and pad 1 on step 2 at 120 bpm."""

    @pytest.mark.asyncio
    async def test_grid_at_120_bpm(self, sequencer, mock_engine, audio_data):
        sequencer.toggle(0, 0)
        sequencer.toggle(1, 2)
        sequencer.set_tempo(120)
        steps = StepRecorder()
        sequencer.register_observer(steps)

        sequencer.start()
        await wait_for_steps(steps, 3)
        sequencer.stop()

        assert steps.steps[0][:2] == (0, [0])
        assert steps.steps[1][:2] == (1, [])
        assert steps.steps[2][:2] == (2, [1])
        assert steps.steps[1][2] - steps.steps[0][2] == pytest.approx(0.5, abs=0.1)

        calls = mock_engine.play.call_args_list
        assert calls[0].args == (audio_data, 1.0, 0)
        assert calls[1].args == (audio_data, 0.5, 1)
