"""Tests for golsim.simulation."""

import sys
from datetime import timedelta

import numpy as np
import pytest

from golsim.config import SimulationConfig
from golsim.model import GameOfLife, TensorGameOfLife
from golsim.recorder import RecordingError, VideoRecorder
from golsim.render import frame_bytes, render_frame
from golsim.simulation import Simulation, create_game, create_recorder

CELL = 10


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSink:
    def __init__(self, fps=10, fail_on=None, fail_finalize=False, on_finalize=None):
        self.fps = fps
        self.frames = []
        self.fail_on = fail_on
        self.fail_finalize = fail_finalize
        self.on_finalize = on_finalize
        self.finalized = 0
        self.aborted = 0

    def submit(self, frame):
        if self.fail_on is not None and len(self.frames) == self.fail_on:
            raise RecordingError("pipe closed")
        self.frames.append(frame)

    def elapsed(self):
        return timedelta(seconds=len(self.frames) / self.fps)

    def finalize(self):
        self.finalized += 1
        if self.on_finalize is not None:
            self.on_finalize()
        if self.fail_finalize:
            raise RecordingError("encoder exited with status 1")

    def abort(self):
        self.aborted += 1


def blinker_game():
    start = np.zeros((5, 5))
    start[2, 1:4] = 1
    return GameOfLife.from_array(start, cell_size=CELL)


def make_simulation(sink=None, **overrides):
    options = dict(width=50, height=50, cell_size=CELL, step_interval_ms=250)
    options.update(overrides)
    config = SimulationConfig(**options)
    clock = FakeClock()
    return Simulation(blinker_game(), config, sink=sink, clock=clock), clock


class TestTick:
    def test_no_step_before_interval(self) -> None:
        sim, clock = make_simulation()
        clock.advance(0.125)
        decision = sim.tick()
        assert not decision.step
        assert sim.generation == 0

    def test_steps_once_interval_elapsed(self) -> None:
        sim, clock = make_simulation()
        before = sim.frame.copy()
        clock.advance(0.25)
        assert sim.tick().step
        assert sim.generation == 1
        assert not np.array_equal(sim.frame, before)

    def test_interval_restarts_after_step(self) -> None:
        sim, clock = make_simulation()
        clock.advance(0.25)
        sim.tick()
        clock.advance(0.125)
        assert not sim.tick().step

    def test_zero_interval_steps_every_tick(self) -> None:
        sim, clock = make_simulation(step_interval_ms=0)
        for _ in range(3):
            assert sim.tick().step
        assert sim.generation == 3

    def test_paused_does_not_step(self) -> None:
        sim, clock = make_simulation()
        sim.toggle_pause()
        clock.advance(1.0)
        assert not sim.tick().step
        sim.toggle_pause()
        assert sim.tick().step

    def test_not_recording_emits_nothing(self) -> None:
        sim, clock = make_simulation()
        clock.advance(0.25)
        assert not sim.tick().emit_frame


class TestRecording:
    def test_every_frame_recorded(self) -> None:
        sink = FakeSink()
        sim, clock = make_simulation(sink=sink)
        for _ in range(4):
            clock.advance(0.125)
            sim.tick()
        assert len(sink.frames) == 4
        assert all(len(f) == 50 * 50 * 3 for f in sink.frames)

    def test_still_frames_only_on_steps(self) -> None:
        sink = FakeSink()
        sim, clock = make_simulation(sink=sink, still_frames=True)
        for _ in range(4):
            clock.advance(0.125)
            sim.tick()
        assert len(sink.frames) == 2
        assert sim.generation == 2

    def test_frame_shows_completed_step(self) -> None:
        sink = FakeSink()
        sim, clock = make_simulation(sink=sink)
        clock.advance(0.25)
        sim.tick()
        expected = frame_bytes(render_frame(sim.game.get_grid(), CELL, 50, 50))
        assert sink.frames[-1] == expected
        assert sim.game.get_grid()[1:4, 2].tolist() == [1.0, 1.0, 1.0]

    def test_stops_at_target_length(self) -> None:
        sink = FakeSink(fps=4)
        sim, clock = make_simulation(sink=sink, record_seconds=0.75)
        for _ in range(6):
            clock.advance(0.125)
            sim.tick()
        assert len(sink.frames) == 3
        assert sim.finished
        sim.finish()
        assert sink.finalized == 1
        assert not sim.recording

    def test_sink_failure_disables_recording(self) -> None:
        sink = FakeSink(fail_on=1)
        sim, clock = make_simulation(sink=sink)
        for _ in range(4):
            clock.advance(0.25)
            sim.tick()
        assert not sim.recording
        assert isinstance(sim.recording_error, RecordingError)
        assert sink.aborted == 1
        assert sim.generation == 4
        assert not sim.finished

    def test_abort_takes_priority(self) -> None:
        sink = FakeSink()
        sim, clock = make_simulation(sink=sink)
        sim.tick()
        sim.abort()
        sim.finish()
        assert sink.aborted == 1
        assert sink.finalized == 0
        assert sim.finished

    def test_finish_surfaces_encoder_failure(self) -> None:
        sink = FakeSink(fail_finalize=True)
        sim, clock = make_simulation(sink=sink)
        sim.tick()
        with pytest.raises(RecordingError):
            sim.finish()
        assert not sim.recording

    def test_abort_reaches_sink_while_finalizing(self) -> None:
        sink = FakeSink()
        sim, clock = make_simulation(sink=sink)
        sim.tick()
        sink.on_finalize = sim.abort
        sim.finish()
        assert sink.aborted == 1
        assert sim.aborted
        assert not sim.recording

    def test_interrupted_finish_aborts_sink(self) -> None:
        def interrupt():
            raise KeyboardInterrupt

        sink = FakeSink(on_finalize=interrupt)
        sim, clock = make_simulation(sink=sink)
        sim.tick()
        with pytest.raises(KeyboardInterrupt):
            sim.finish()
        assert sink.aborted == 1
        assert sim.aborted
        assert not sim.recording

    def test_status_text(self) -> None:
        sim, clock = make_simulation(sink=FakeSink())
        sim.toggle_pause()
        text = sim.status_text()
        assert "Generation: 0" in text
        assert "Live cells: 3" in text
        assert "REC" in text
        assert "Paused" in text


class TestFactories:
    def test_lattice_engine(self) -> None:
        config = SimulationConfig(width=100, height=60, cell_size=CELL, random_seed=0)
        game = create_game(config)
        assert isinstance(game, GameOfLife)
        assert (game.rows, game.cols) == (6, 10)

    def test_tensor_engine(self) -> None:
        config = SimulationConfig(width=100, height=60, cell_size=CELL, engine='tensor', device='cpu')
        game = create_game(config)
        assert isinstance(game, TensorGameOfLife)
        assert (game.rows, game.cols) == (6, 10)

    def test_no_recorder_unless_recording(self) -> None:
        assert create_recorder(SimulationConfig()) is None

    def test_recorder_end_to_end(self, tmp_path) -> None:
        out = tmp_path / "out.raw"
        config = SimulationConfig(width=50, height=50, cell_size=CELL, step_interval_ms=0,
                                  record=True, saving_type='disk', output=str(out),
                                  frames_dir=str(tmp_path / "frames"))
        copy = [sys.executable, "-c",
                "import sys\nwith open(sys.argv[1], 'wb') as f:\n    f.write(sys.stdin.buffer.read())\n",
                str(out)]
        recorder = create_recorder(config, command=copy)
        assert isinstance(recorder, VideoRecorder)

        sim = Simulation(blinker_game(), config, sink=recorder, clock=FakeClock())
        sim.tick()
        sim.tick()
        sim.finish()
        assert out.stat().st_size == 2 * 50 * 50 * 3
        assert not (tmp_path / "frames").exists()

    def test_interrupted_encode_leaves_nothing_behind(self, tmp_path, monkeypatch) -> None:
        config = SimulationConfig(width=50, height=50, cell_size=CELL, step_interval_ms=0,
                                  record=True, saving_type='disk', output=str(tmp_path / "out.mp4"),
                                  frames_dir=str(tmp_path / "frames"))
        slow = [sys.executable, "-c", "import sys, time; sys.stdin.buffer.read(); time.sleep(30)"]
        recorder = create_recorder(config, command=slow)
        sim = Simulation(blinker_game(), config, sink=recorder, clock=FakeClock())
        sim.tick()
        sim.tick()

        replay = recorder.store.frames

        def interrupted_replay():
            frames = replay()
            yield next(frames)
            raise KeyboardInterrupt

        monkeypatch.setattr(recorder.store, "frames", interrupted_replay)
        with pytest.raises(KeyboardInterrupt):
            sim.finish()

        assert recorder.process.poll() is not None
        assert not (tmp_path / "frames").exists()
        assert sim.aborted
        assert not sim.recording


class TestAbort:
    def test_not_aborted_by_default(self) -> None:
        sim, clock = make_simulation(sink=FakeSink())
        sim.finish()
        assert not sim.aborted

    def test_abort_is_recorded(self) -> None:
        sim, clock = make_simulation()
        sim.abort()
        assert sim.aborted
        assert sim.finished
