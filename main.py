import argparse
import logging
import sys

import torch
from PyQt5.QtWidgets import QApplication, QDialog

from golsim.config import ConfigError, SimulationConfig
from golsim.recorder import RecordingError
from golsim.settings import SettingsDialog
from golsim.simulation import Simulation, create_game, create_recorder
from golsim.view import animate_game
from golsim.constants import (DEFAULT_WIDTH, DEFAULT_HEIGHT, DEFAULT_CELL_SIZE, DEFAULT_STEP_INTERVAL,
                              DEFAULT_INITIAL_DENSITY, DEFAULT_ENGINE, ENGINES, DEFAULT_RECORD_FPS,
                              DEFAULT_OUTPUT, DEFAULT_FRAMES_DIR, DEFAULT_SAVING_TYPE, SAVING_TYPES)

logger = logging.getLogger("golsim")


def print_cuda_info():
    """Print information about CUDA configuration."""
    print("\n=== CUDA Configuration ===")
    print(f"PyTorch version: {torch.__version__}")
    print(f"CUDA available: {torch.cuda.is_available()}")
    print(f"CUDA version: {torch.version.cuda if torch.cuda.is_available() else 'N/A'}")
    print(f"GPU device count: {torch.cuda.device_count() if torch.cuda.is_available() else 0}")
    if torch.cuda.is_available():
        print(f"GPU device name: {torch.cuda.get_device_name(0)}")
    print("========================\n")


def build_parser():
    parser = argparse.ArgumentParser(description="Conway's Game of Life with optional video recording")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Simulation width in pixels")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Simulation height in pixels")
    parser.add_argument("--cell_size", type=int, default=DEFAULT_CELL_SIZE, help="Side of one cell in pixels")
    parser.add_argument("--interval", type=int, default=DEFAULT_STEP_INTERVAL,
                        help="Milliseconds between generations (0 steps every frame)")
    parser.add_argument("--density", type=float, default=DEFAULT_INITIAL_DENSITY,
                        help="Initial density of live cells (0 to 1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the initial grid")
    parser.add_argument("--engine", type=str, default=DEFAULT_ENGINE, choices=ENGINES,
                        help="'lattice' cell map or 'tensor' torch engine")
    parser.add_argument("--device", type=str, default='cuda' if torch.cuda.is_available() else 'cpu',
                        choices=['cuda', 'cpu'], help="Computation device for the tensor engine")
    parser.add_argument("--workers", type=int, default=None,
                        help="Worker threads for the lattice engine step")
    parser.add_argument("--record", action='store_true',
                        help="Record the run to a video (also enabled by GOL_RECORD)")
    parser.add_argument("--saving_type", type=str, default=DEFAULT_SAVING_TYPE, choices=SAVING_TYPES,
                        help="Buffer recorded frames in memory or on disk")
    parser.add_argument("--still_frames", action='store_true',
                        help="Only record frames that show a new generation")
    parser.add_argument("--record_seconds", type=float, default=None,
                        help="Stop after this many seconds of video")
    parser.add_argument("--fps", type=int, default=DEFAULT_RECORD_FPS, help="Frame rate of the recorded video")
    parser.add_argument("--output", type=str, default=DEFAULT_OUTPUT, help="Output video file")
    parser.add_argument("--frames_dir", type=str, default=DEFAULT_FRAMES_DIR,
                        help="Scratch directory for disk-buffered frames")
    parser.add_argument("--no_gui", action='store_true',
                        help="Run simulation directly with command-line args, skipping the settings dialog")
    parser.add_argument("--log_level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
    return parser


def config_from_args(args):
    return SimulationConfig(
        width=args.width,
        height=args.height,
        cell_size=args.cell_size,
        step_interval_ms=args.interval,
        initial_density=args.density,
        random_seed=args.seed,
        engine=args.engine,
        device=args.device,
        workers=args.workers,
        record=args.record,
        saving_type=args.saving_type,
        still_frames=args.still_frames,
        record_seconds=args.record_seconds,
        record_fps=args.fps,
        output=args.output,
        frames_dir=args.frames_dir,
    ).with_env()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')

    config = config_from_args(args)

    # Create Qt application
    app = QApplication([])

    if not args.no_gui:
        # Show settings dialog, initializing with args
        settings = SettingsDialog()
        settings.load_config(config)
        if settings.exec_() != QDialog.Accepted:
            return 0
        config = settings.to_config()

    try:
        config.validate()
    except ConfigError as e:
        parser.error(str(e))

    if config.engine == 'tensor':
        print_cuda_info()
        if config.device == 'cuda' and not torch.cuda.is_available():
            print("Warning: CUDA requested but not available, falling back to CPU.")

    print("\n--- Running with Settings --- ")
    print(f"Size: {config.width}x{config.height}, Cell: {config.cell_size}px, "
          f"Density: {config.initial_density:.2f}, Interval: {config.step_interval_ms}ms")
    print(f"Engine: {config.engine}, Device: {config.device}, Workers: {config.workers or 1}")
    if config.record:
        print(f"Recording to {config.output} at {config.record_fps} fps, buffering in {config.saving_type}"
              f"{', still frames' if config.still_frames else ''}")
    print("-----------------------------\n")

    game = create_game(config)

    try:
        recorder = create_recorder(config)
    except RecordingError as e:
        logger.error("Could not start recording, running without it: %s", e)
        recorder = None

    simulation = Simulation(game, config, sink=recorder)

    try:
        animate_game(simulation, config)
    except RecordingError as e:
        if simulation.aborted:
            return 130
        logger.error("Recording failed: %s", e)
        return 1
    except KeyboardInterrupt:
        return 130

    if simulation.aborted:
        return 130
    if simulation.recording_error is not None:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
