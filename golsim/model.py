import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

import numpy as np
import torch

from .constants import DEFAULT_CELL_SIZE, DEFAULT_INITIAL_DENSITY

logger = logging.getLogger(__name__)


class LifeState(Enum):
    ALIVE = 1
    DEAD = 0

    @classmethod
    def random(cls, density=DEFAULT_INITIAL_DENSITY, rng=None):
        """Draw ALIVE with probability `density`."""
        if rng is None:
            rng = np.random.default_rng()
        return cls.ALIVE if rng.random() < density else cls.DEAD


@dataclass
class Cell:
    x: int
    y: int
    state: LifeState = LifeState.DEAD

    @property
    def position(self):
        return (self.x, self.y)

    @property
    def alive(self):
        return self.state is LifeState.ALIVE


def next_state(state, alive_neighbors):
    """Conway's rule: a live cell survives on 2 or 3, a dead one is born on 3."""
    if state is LifeState.ALIVE:
        return LifeState.ALIVE if alive_neighbors in (2, 3) else LifeState.DEAD
    return LifeState.ALIVE if alive_neighbors == 3 else LifeState.DEAD


class GameOfLife:
    """Game of Life over a bounded lattice of cells keyed by pixel position.

    Cells sit at multiples of `cell_size` in both axes. The edges do not
    wrap: a corner cell only ever sees its 3 existing neighbours.

    Each step is synchronous. Every next state is computed from the grid as
    it was before the step into a fresh mapping, which then replaces the
    old one, so no cell can see a neighbour's new state mid-step. With
    `workers > 1` the evaluation is fanned out over a thread pool; workers
    only read the old grid and return their own slice of results.
    """

    def __init__(self, cells, cell_size=DEFAULT_CELL_SIZE, workers=None):
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self.workers = workers
        self.generation = 0
        self.cells = dict(cells)

        for (x, y), cell in self.cells.items():
            if (cell.x, cell.y) != (x, y):
                raise ValueError(f"cell at {(cell.x, cell.y)} stored under key {(x, y)}")
            if x % cell_size or y % cell_size:
                raise ValueError(f"position {(x, y)} is not on the {cell_size}px lattice")

        if self.cells:
            self.cols = max(x for x, _ in self.cells) // cell_size + 1
            self.rows = max(y for _, y in self.cells) // cell_size + 1
        else:
            self.cols = self.rows = 0

        # The 8 compass directions, in a fixed order
        s = cell_size
        self.offsets = (
            (-s, -s), (-s, 0), (-s, s),
            (0, -s),           (0, s),
            (s, -s),  (s, 0),  (s, s),
        )

    @classmethod
    def create(cls, width, height, cell_size=DEFAULT_CELL_SIZE,
               initial_density=DEFAULT_INITIAL_DENSITY, random_seed=None, workers=None):
        """Fill a `width` x `height` pixel area with randomly seeded cells."""
        rng = np.random.default_rng(random_seed)
        cells = {}
        for y in range(0, height // cell_size * cell_size, cell_size):
            for x in range(0, width // cell_size * cell_size, cell_size):
                cells[(x, y)] = Cell(x, y, LifeState.random(initial_density, rng))
        logger.debug("Seeded %d cells at density %.2f", len(cells), initial_density)
        return cls(cells, cell_size=cell_size, workers=workers)

    @classmethod
    def from_array(cls, array, cell_size=DEFAULT_CELL_SIZE, workers=None):
        """Build a grid from a 2D 0/1 array indexed [row, col]."""
        cells = {}
        for (row, col), value in np.ndenumerate(np.asarray(array)):
            x, y = int(col) * cell_size, int(row) * cell_size
            cells[(x, y)] = Cell(x, y, LifeState.ALIVE if value else LifeState.DEAD)
        return cls(cells, cell_size=cell_size, workers=workers)

    def neighbors(self, cell):
        """Return the existing lattice neighbours of `cell`."""
        found = []
        for dx, dy in self.offsets:
            neighbor = self.cells.get((cell.x + dx, cell.y + dy))
            if neighbor is not None:
                found.append(neighbor)
        return found

    def _evaluate(self, positions):
        results = []
        for pos in positions:
            cell = self.cells[pos]
            alive_neighbors = sum(1 for n in self.neighbors(cell) if n.alive)
            results.append((pos, next_state(cell.state, alive_neighbors)))
        return results

    def step(self):
        positions = list(self.cells)

        if self.workers and self.workers > 1 and len(positions) > 1:
            chunk = -(-len(positions) // self.workers)
            chunks = [positions[i:i + chunk] for i in range(0, len(positions), chunk)]
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = [r for part in pool.map(self._evaluate, chunks) for r in part]
        else:
            results = self._evaluate(positions)

        # Commit only after every cell has been evaluated
        self.cells = {(x, y): Cell(x, y, state) for (x, y), state in results}
        self.generation += 1

    def alive_positions(self):
        return sorted(pos for pos, cell in self.cells.items() if cell.alive)

    def live_count(self):
        return sum(1 for cell in self.cells.values() if cell.alive)

    def get_grid(self):
        grid = np.zeros((self.rows, self.cols), dtype=np.float32)
        for (x, y), cell in self.cells.items():
            if cell.alive:
                grid[y // self.cell_size, x // self.cell_size] = 1
        return grid


class TensorGameOfLife:
    """Dense Game of Life on a torch tensor, for large grids or a GPU.

    Same bounded rule as `GameOfLife`: neighbours are counted with a 3x3
    convolution over a zero-padded grid, so nothing wraps around the edges.
    """

    def __init__(self, grid, device='cuda'):
        self.device = device if torch.cuda.is_available() and device == 'cuda' else 'cpu'
        self.grid = torch.as_tensor(np.asarray(grid, dtype=np.float32), device=self.device)
        self.generation = 0

        # Create convolution kernel for counting neighbors
        self.kernel = torch.tensor([
            [1, 1, 1],
            [1, 0, 1],
            [1, 1, 1]
        ], dtype=torch.float32, device=self.device).view(1, 1, 3, 3)

    @classmethod
    def create(cls, rows, cols, initial_density=DEFAULT_INITIAL_DENSITY, random_seed=None, device='cuda'):
        rng = np.random.default_rng(random_seed)
        grid = (rng.random((rows, cols)) < initial_density).astype(np.float32)
        return cls(grid, device=device)

    @property
    def rows(self):
        return self.grid.shape[0]

    @property
    def cols(self):
        return self.grid.shape[1]

    def step(self):
        neighbors = torch.nn.functional.conv2d(
            self.grid.unsqueeze(0).unsqueeze(0),
            self.kernel,
            padding=1
        )[0, 0]

        is_alive = (self.grid == 1.0)
        survives = is_alive & ((neighbors == 2) | (neighbors == 3))
        births = ~is_alive & (neighbors == 3)

        new_grid = torch.zeros_like(self.grid)
        new_grid[survives | births] = 1.0
        self.grid = new_grid
        self.generation += 1

    def live_count(self):
        return int(self.grid.sum().item())

    def get_grid(self):
        return self.grid.cpu().numpy()
