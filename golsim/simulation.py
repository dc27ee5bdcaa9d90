import logging
import time

from .model import GameOfLife, TensorGameOfLife
from .recorder import RecordingError, VideoRecorder
from .render import frame_bytes, render_frame
from .timing import FrameCounters, TickDecision, decide_tick, truncate, update_frame_timing

logger = logging.getLogger(__name__)


def create_game(config):
    if config.engine == 'tensor':
        return TensorGameOfLife.create(
            config.rows, config.cols,
            initial_density=config.initial_density,
            random_seed=config.random_seed,
            device=config.device,
        )
    return GameOfLife.create(
        config.width, config.height,
        cell_size=config.cell_size,
        initial_density=config.initial_density,
        random_seed=config.random_seed,
        workers=config.workers,
    )


def create_recorder(config, command=None):
    if not config.record:
        return None
    return VideoRecorder(
        config.saving_type,
        config.output,
        config.width,
        config.height,
        config.record_fps,
        folder=config.frames_dir,
        command=command,
    )


class Simulation:
    """Drives one game: steps it on schedule, renders it and feeds the recorder.

    `tick()` is called once per displayed frame by the host loop. The sink is
    optional; if it fails mid-run the recording is dropped and the
    simulation carries on without it.
    """

    def __init__(self, game, config, sink=None, clock=time.monotonic):
        self.game = game
        self.config = config
        self.sink = sink
        self.clock = clock
        self.paused = False
        self.finished = False
        self.recording_error = None
        self.aborted = False

        now = clock()
        self.counters = FrameCounters.start(now)
        self.last_step = now
        self.frame = self._render()

    @property
    def recording(self):
        return self.sink is not None

    @property
    def generation(self):
        return self.game.generation

    def _render(self):
        return render_frame(self.game.get_grid(), self.config.cell_size,
                            self.config.width, self.config.height)

    def toggle_pause(self):
        self.paused = not self.paused
        return self.paused

    def tick(self):
        if self.finished:
            return TickDecision(step=False, emit_frame=False)

        now = self.clock()
        update_frame_timing(self.counters, now)
        step_due = now - self.last_step >= self.config.step_interval
        decision = decide_tick(step_due, self.recording, self.config.still_frames, self.paused)

        if decision.step:
            self.last_step = now
            self.game.step()
            self.frame = self._render()

        if decision.emit_frame:
            try:
                self.sink.submit(frame_bytes(self.frame))
            except RecordingError as e:
                self._drop_recording(e)
            else:
                self._check_target_length()

        return decision

    def _check_target_length(self):
        target = self.config.record_seconds
        if target is not None and self.sink.elapsed().total_seconds() >= target:
            logger.info("Reached target recording length of %.2fs", target)
            self.finished = True

    def _drop_recording(self, error):
        logger.error("Recording failed, continuing without it: %s", error)
        self.recording_error = error
        sink, self.sink = self.sink, None
        sink.abort()

    def finish(self):
        """Stop the run and encode whatever was recorded."""
        self.finished = True
        sink = self.sink
        if sink is None:
            return
        # The sink stays reachable so abort() can still kill the encoder
        try:
            sink.finalize()
        except KeyboardInterrupt:
            self.abort()
            raise
        finally:
            self.sink = None

    def abort(self):
        """Stop the run without waiting for the encoder."""
        self.finished = True
        self.aborted = True
        sink, self.sink = self.sink, None
        if sink is not None:
            logger.warning("Recording aborted")
            sink.abort()

    def status_text(self):
        lines = [
            f"FPS: {truncate(self.counters.fps, 2)}",
            f"Maximum FPS: {truncate(self.counters.max_fps, 2)}",
            f"Minimum FPS: {truncate(self.counters.min_fps, 2)}",
            f"Generation: {self.generation}",
            f"Live cells: {self.game.live_count()}",
        ]
        if self.recording:
            lines.append(f"REC {truncate(self.sink.elapsed().total_seconds(), 1)}s")
        if self.paused:
            lines.append("Paused (SPACE)")
        return "\n".join(lines)
