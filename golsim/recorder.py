"""Buffer rendered frames and hand them to an external video encoder.

Frames are raw RGB24 buffers. They are kept either in memory or as numbered
files on disk until the recording is finalized, then replayed in submission
order into the encoder's stdin.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from datetime import timedelta
from enum import Enum
from pathlib import Path

from .constants import DEFAULT_FRAMES_DIR, ENCODER_EXECUTABLE

logger = logging.getLogger(__name__)


class RecordingError(RuntimeError):
    """The recording could not be buffered, encoded or cleaned up."""


class SavingType(Enum):
    DISK = 'disk'
    MEMORY = 'memory'


class FrameStore(ABC):
    """Ordered storage for frames waiting to be encoded."""

    @abstractmethod
    def save_frame(self, frame):
        pass

    @abstractmethod
    def frames(self):
        """Yield stored frames in the order they were saved."""

    @abstractmethod
    def cleanup(self):
        pass

    @abstractmethod
    def __len__(self):
        pass


class MemoryFrameStore(FrameStore):
    def __init__(self):
        self._frames = []

    def save_frame(self, frame):
        self._frames.append(frame)

    def frames(self):
        yield from self._frames

    def cleanup(self):
        self._frames.clear()

    def __len__(self):
        return len(self._frames)


class DiskFrameStore(FrameStore):
    """One `<index>.frame` file per frame in a scratch directory.

    The directory is recreated empty on construction. Replay reads and then
    deletes each file in ascending index order.
    """

    def __init__(self, folder=DEFAULT_FRAMES_DIR):
        self.folder = Path(folder)
        self.count = 0
        try:
            if self.folder.exists():
                shutil.rmtree(self.folder)
            self.folder.mkdir(parents=True)
        except OSError as e:
            raise RecordingError(f"Could not prepare frame directory {self.folder}: {e}") from e

    def save_frame(self, frame):
        path = self.folder / f"{self.count}.frame"
        try:
            path.write_bytes(frame)
        except OSError as e:
            raise RecordingError(f"Could not write {path}: {e}") from e
        self.count += 1

    def frame_paths(self):
        # Numeric, not lexical: 10.frame comes after 9.frame
        return sorted(self.folder.glob('*.frame'), key=lambda p: int(p.stem))

    def frames(self):
        for path in self.frame_paths():
            try:
                data = path.read_bytes()
                path.unlink()
            except OSError as e:
                raise RecordingError(f"Could not replay {path}: {e}") from e
            yield data

    def cleanup(self):
        try:
            if self.folder.exists():
                shutil.rmtree(self.folder)
        except OSError as e:
            raise RecordingError(f"Could not remove frame directory {self.folder}: {e}") from e

    def __len__(self):
        return self.count


def make_frame_store(saving_type, folder=DEFAULT_FRAMES_DIR):
    saving_type = SavingType(saving_type)
    if saving_type is SavingType.DISK:
        return DiskFrameStore(folder)
    return MemoryFrameStore()


def encoder_command(width, height, fps, out, executable=ENCODER_EXECUTABLE):
    """Command line for an encoder reading raw RGB24 frames from stdin."""
    return [
        executable,
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", f"{fps}",
        "-i", "pipe:0",
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-preset", "veryslow",
        "-y",
        str(out),
    ]


class VideoRecorder:
    """Frame sink for one recording.

    Args:
        saving_type: SavingType (or its value) choosing memory or disk buffering
        out: Output video path
        width, height: Frame size in pixels
        fps: Frame rate the video is encoded at
        folder: Scratch directory for disk buffering
        command: Encoder command line, defaults to `encoder_command(...)`
    """

    def __init__(self, saving_type, out, width, height, fps, folder=DEFAULT_FRAMES_DIR, command=None):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.saving_type = SavingType(saving_type)
        self.out = str(out)
        self.width = width
        self.height = height
        self.fps = fps
        self.command = command if command is not None else encoder_command(width, height, fps, self.out)
        self.store = make_frame_store(self.saving_type, folder)
        self.frame_count = 0
        self.process = None
        self.closed = False
        logger.info("Buffering frames with %s", self.saving_type.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.abort()
        return False

    @property
    def frame_size(self):
        return self.width * self.height * 3

    def submit(self, frame):
        if self.closed:
            raise RecordingError("Recorder is already closed")
        frame = bytes(frame)
        if len(frame) != self.frame_size:
            raise ValueError(f"Expected {self.frame_size} bytes per frame, got {len(frame)}")
        self.store.save_frame(frame)
        self.frame_count += 1

    def elapsed(self):
        return timedelta(seconds=self.frame_count / self.fps)

    def finalize(self):
        """Encode every stored frame and wait for the encoder to exit."""
        if self.closed:
            return
        self.closed = True
        logger.info("Encoding %d frames to %s", self.frame_count, self.out)

        try:
            self.process = subprocess.Popen(self.command, stdin=subprocess.PIPE)
        except OSError as e:
            self._discard()
            raise RecordingError(f"Failed to start encoder {self.command[0]!r}: {e}") from e

        try:
            try:
                for frame in self.store.frames():
                    self.process.stdin.write(frame)
                self.process.stdin.close()
            except (OSError, RecordingError) as e:
                self.abort()
                raise RecordingError(f"Failed to feed frames to the encoder: {e}") from e
            returncode = self.process.wait()
        except KeyboardInterrupt:
            logger.warning("Interrupted while encoding")
            self.abort()
            raise

        if returncode != 0:
            self._discard()
            raise RecordingError(f"Encoder exited with status {returncode}")

        self.store.cleanup()
        logger.info("Done, wrote %s (%.2fs)", self.out, self.elapsed().total_seconds())

    def abort(self):
        """Stop without draining: kill the encoder and drop buffered frames."""
        self.closed = True
        if self.process is not None and self.process.poll() is None:
            logger.warning("Killing encoder process %d", self.process.pid)
            self.process.kill()
            self.process.wait()
        if self.process is not None and self.process.stdin is not None and not self.process.stdin.closed:
            try:
                self.process.stdin.close()
            except BrokenPipeError:
                logger.debug("Encoder stdin already broken")
        self._discard()

    def _discard(self):
        try:
            self.store.cleanup()
        except RecordingError as e:
            logger.warning("%s", e)
