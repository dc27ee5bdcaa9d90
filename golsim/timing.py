from dataclasses import dataclass

from .constants import FPS_WINDOW, MIN_FPS_WINDOW


@dataclass
class FrameCounters:
    """FPS bookkeeping for the display loop, updated once per drawn frame."""
    fps: float = 0.0
    max_fps: float = 0.0
    min_fps: float = 0.0          # the value shown on screen
    pending_min_fps: float = 0.0  # lowest fps seen in the current window
    frame_count: int = 0
    frame_started: float = 0.0
    min_started: float = 0.0

    @classmethod
    def start(cls, now):
        return cls(frame_started=now, min_started=now)


def update_frame_timing(counters, now):
    counters.frame_count += 1

    elapsed = now - counters.frame_started
    if elapsed >= FPS_WINDOW:
        counters.fps = counters.frame_count / elapsed
        counters.frame_count = 0
        counters.frame_started = now
        if counters.fps > counters.max_fps:
            counters.max_fps = counters.fps
        elif counters.fps < counters.pending_min_fps:
            counters.pending_min_fps = counters.fps

    if now - counters.min_started >= MIN_FPS_WINDOW:
        counters.min_fps = counters.pending_min_fps
        counters.pending_min_fps = counters.fps
        counters.min_started = now

    return counters


def truncate(value, precision):
    """Drop (not round) everything past `precision` decimal digits."""
    factor = 10 ** precision
    return int(value * factor) / factor


@dataclass(frozen=True)
class TickDecision:
    step: bool
    emit_frame: bool


def decide_tick(step_due, recording, still_frames=False, paused=False):
    """Decide what one display tick does.

    A generation is stepped only when the simulation is running and its
    interval has elapsed. While recording, every displayed frame is emitted,
    unless still-frame output is on, in which case only frames that show a
    new generation are.
    """
    step = step_due and not paused
    if not recording:
        return TickDecision(step=step, emit_frame=False)
    if still_frames:
        return TickDecision(step=step, emit_frame=step)
    return TickDecision(step=step, emit_frame=True)
