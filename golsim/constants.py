# Default simulation parameters
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_CELL_SIZE = 10
DEFAULT_STEP_INTERVAL = 250  # ms between generations
DEFAULT_INITIAL_DENSITY = 0.25  # alive:dead weighted 5:15
DEFAULT_ENGINE = 'lattice'
ENGINES = ('lattice', 'tensor')

# Recording settings
DEFAULT_RECORD_FPS = 60
DEFAULT_OUTPUT = 'out.mp4'
DEFAULT_FRAMES_DIR = 'frames'
DEFAULT_SAVING_TYPE = 'memory'
SAVING_TYPES = ('memory', 'disk')
RECORD_ENV_VAR = 'GOL_RECORD'
ENCODER_EXECUTABLE = 'ffmpeg'

# Visualization settings
PANEL_WIDTH = 150   # room for the FPS text
PANEL_MARGIN = 10
DRAW_INTERVAL = 1 / 60  # seconds between display ticks

# FPS bookkeeping windows (seconds)
FPS_WINDOW = 1.0
MIN_FPS_WINDOW = 3.0

# Colors (RGB24)
ALIVE_COLOR = (255, 255, 255)
DEAD_COLOR = (128, 128, 128)
GRID_LINE_COLOR = (0, 0, 0)
BACKGROUND_COLOR = 'black'
TEXT_COLOR = 'white'
