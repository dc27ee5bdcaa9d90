"""
Conway's Game of Life on a bounded lattice, with optional video recording
"""

from .model import LifeState, Cell, GameOfLife, TensorGameOfLife
from .recorder import VideoRecorder, RecordingError, SavingType
from .config import SimulationConfig, ConfigError
from .simulation import Simulation, create_game, create_recorder

__version__ = "0.1.0"
