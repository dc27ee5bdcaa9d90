"""Run configuration shared by the command line, the settings dialog and the driver."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from .constants import (DEFAULT_WIDTH, DEFAULT_HEIGHT, DEFAULT_CELL_SIZE,
                        DEFAULT_STEP_INTERVAL, DEFAULT_INITIAL_DENSITY, DEFAULT_ENGINE,
                        ENGINES, DEFAULT_RECORD_FPS, DEFAULT_OUTPUT, DEFAULT_FRAMES_DIR,
                        DEFAULT_SAVING_TYPE, SAVING_TYPES, RECORD_ENV_VAR)


class ConfigError(ValueError):
    """Raised when a configuration cannot describe a valid simulation."""


@dataclass(frozen=True)
class SimulationConfig:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    cell_size: int = DEFAULT_CELL_SIZE
    step_interval_ms: int = DEFAULT_STEP_INTERVAL
    initial_density: float = DEFAULT_INITIAL_DENSITY
    random_seed: int | None = None
    engine: str = DEFAULT_ENGINE
    device: str = 'cpu'
    workers: int | None = None

    record: bool = False
    saving_type: str = DEFAULT_SAVING_TYPE
    still_frames: bool = False
    record_seconds: float | None = None
    record_fps: int = DEFAULT_RECORD_FPS
    output: str = DEFAULT_OUTPUT
    frames_dir: str = DEFAULT_FRAMES_DIR

    @property
    def rows(self):
        return self.height // self.cell_size

    @property
    def cols(self):
        return self.width // self.cell_size

    @property
    def step_interval(self):
        """Seconds between generations."""
        return self.step_interval_ms / 1000.0

    def validate(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigError("width and height must be positive")
        if self.cell_size <= 0:
            raise ConfigError("cell size must be positive")
        if self.width % self.cell_size or self.height % self.cell_size:
            raise ConfigError(
                f"cell size {self.cell_size} does not evenly divide {self.width}x{self.height}")
        if self.step_interval_ms < 0:
            raise ConfigError("step interval cannot be negative")
        if not 0.0 <= self.initial_density <= 1.0:
            raise ConfigError("initial density must be between 0 and 1")
        if self.engine not in ENGINES:
            raise ConfigError(f"unknown engine {self.engine!r}, expected one of {ENGINES}")
        if self.workers is not None and self.workers < 1:
            raise ConfigError("workers must be at least 1")
        if self.saving_type not in SAVING_TYPES:
            raise ConfigError(f"unknown saving type {self.saving_type!r}, expected one of {SAVING_TYPES}")
        if self.record_fps <= 0:
            raise ConfigError("recording fps must be positive")
        if self.record_seconds is not None and self.record_seconds <= 0:
            raise ConfigError("target recording length must be positive")
        return self

    def with_env(self, environ=None):
        """Turn recording on when GOL_RECORD is present in the environment."""
        environ = os.environ if environ is None else environ
        if RECORD_ENV_VAR in environ and not self.record:
            return replace(self, record=True)
        return self
