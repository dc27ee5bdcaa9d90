import numpy as np

from .constants import ALIVE_COLOR, DEAD_COLOR, GRID_LINE_COLOR


def render_frame(grid, cell_size, width=None, height=None):
    """
    Rasterize a cell grid into an RGB24 image.

    Args:
        grid: 2D array of 0/1 cell states indexed [row, col]
        cell_size: Side of one cell in pixels
        width, height: Frame size in pixels, defaults to the grid's extent

    Returns:
        uint8 array of shape (height, width, 3). Dead cells are grey, live
        cells white, with a black line on every cell boundary.
    """
    grid = np.asarray(grid)
    rows, cols = grid.shape
    width = cols * cell_size if width is None else width
    height = rows * cell_size if height is None else height

    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[...] = DEAD_COLOR

    alive = np.repeat(np.repeat(grid > 0, cell_size, axis=0), cell_size, axis=1)
    alive = alive[:height, :width]
    frame[:alive.shape[0], :alive.shape[1]][alive] = ALIVE_COLOR

    # Grid lines
    frame[::cell_size, :] = GRID_LINE_COLOR
    frame[:, ::cell_size] = GRID_LINE_COLOR
    return frame


def frame_bytes(frame):
    """Row-major interleaved RGB bytes, the layout the encoder reads."""
    return np.ascontiguousarray(frame, dtype=np.uint8).tobytes()
