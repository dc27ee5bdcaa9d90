"""Tests for golsim.render."""

import numpy as np

from golsim.constants import ALIVE_COLOR, DEAD_COLOR, GRID_LINE_COLOR
from golsim.render import frame_bytes, render_frame


class TestRenderFrame:
    def test_shape_and_dtype(self) -> None:
        frame = render_frame(np.zeros((3, 5)), cell_size=4)
        assert frame.shape == (12, 20, 3)
        assert frame.dtype == np.uint8

    def test_explicit_size(self) -> None:
        frame = render_frame(np.zeros((60, 80)), cell_size=10, width=800, height=600)
        assert frame.shape == (600, 800, 3)

    def test_cell_colors(self) -> None:
        frame = render_frame(np.array([[1, 0]]), cell_size=4)
        assert tuple(frame[1, 1]) == ALIVE_COLOR
        assert tuple(frame[2, 3]) == ALIVE_COLOR
        assert tuple(frame[1, 5]) == DEAD_COLOR

    def test_grid_lines(self) -> None:
        frame = render_frame(np.array([[1, 0]]), cell_size=4)
        assert tuple(frame[0, 2]) == GRID_LINE_COLOR
        assert tuple(frame[2, 0]) == GRID_LINE_COLOR
        assert tuple(frame[2, 4]) == GRID_LINE_COLOR


class TestFrameBytes:
    def test_row_major_rgb(self) -> None:
        frame = np.zeros((2, 3, 3), dtype=np.uint8)
        frame[0, 1] = (1, 2, 3)
        frame[1, 0] = (4, 5, 6)
        data = frame_bytes(frame)
        assert len(data) == 2 * 3 * 3
        assert data[3:6] == bytes([1, 2, 3])
        assert data[9:12] == bytes([4, 5, 6])

    def test_non_contiguous_input(self) -> None:
        frame = render_frame(np.ones((4, 4)), cell_size=2)[:, ::2]
        assert len(frame_bytes(frame)) == frame.shape[0] * frame.shape[1] * 3
