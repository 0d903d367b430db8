"""
Object-space coordinates for each pattern geometry.

Pure functions. Points are produced row by row (i over rows, j over
columns), the same order the detectors report image points in.
"""

from __future__ import annotations

import numpy as np

from ..types import BoardConfig, PatternType


def _grid_indices(columns: int, rows: int) -> tuple[np.ndarray, np.ndarray]:
    """(j, i) index arrays in row-major order."""
    i, j = np.mgrid[0:rows, 0:columns]
    return j.ravel(), i.ravel()


def chessboard_object_points(columns: int, rows: int, square_size: float) -> np.ndarray:
    """
    Chessboard corner (j, i) -> (j*s, i*s, 0).

    Returns:
        (columns*rows, 3) float32 array
    """
    j, i = _grid_indices(columns, rows)
    points = np.zeros((j.size, 3), dtype=np.float32)
    points[:, 0] = j * square_size
    points[:, 1] = i * square_size
    return points


def acircles_object_points(columns: int, rows: int, square_size: float) -> np.ndarray:
    """
    Asymmetric circle grid point (j, i) -> ((2j + i%2)*s, i*s, 0).

    Odd rows are shifted by one spacing, giving the staggered lattice.
    """
    j, i = _grid_indices(columns, rows)
    points = np.zeros((j.size, 3), dtype=np.float32)
    points[:, 0] = (2 * j + i % 2) * square_size
    points[:, 1] = i * square_size
    return points


def double_acircles_object_points(
    columns: int,
    rows: int,
    square_size: float,
    grid_distance: float,
) -> np.ndarray:
    """
    Two asymmetric grids placed back to back, centered on the origin.

    The white grid comes first and sits grid_distance plus one grid width
    further out than the black grid. Both are mirrored in x and y.

    Returns:
        (2*columns*rows, 3) float32 array, white points then black points
    """
    s = square_size
    grid_width = (2 * (columns - 1) + 1) * s
    center_x = grid_width + grid_distance / 2
    center_y = (rows - 1) * s / 2

    j, i = _grid_indices(columns, rows)
    lattice_x = (2 * j + i % 2) * s
    lattice_y = i * s

    white = np.zeros((j.size, 3), dtype=np.float32)
    white[:, 0] = -(lattice_x + grid_distance + grid_width - center_x)
    white[:, 1] = -lattice_y - center_y

    black = np.zeros((j.size, 3), dtype=np.float32)
    black[:, 0] = -(lattice_x - center_x)
    black[:, 1] = -lattice_y - center_y

    return np.vstack([white, black])


def get_object_points(board: BoardConfig) -> np.ndarray | None:
    """
    Object points matching a detection of this board.

    Returns None for ChArUco boards: their samples are stored as raw
    corner/id pairs and resolved against the board at calibration time.
    """
    if board.pattern is PatternType.CHESSBOARD:
        return chessboard_object_points(board.columns, board.rows, board.square_size)
    if board.pattern is PatternType.ACIRCLES_GRID:
        return acircles_object_points(board.columns, board.rows, board.square_size)
    if board.pattern is PatternType.DOUBLE_ACIRCLES_GRID:
        return double_acircles_object_points(
            board.columns, board.rows, board.square_size, board.grid_distance
        )
    return None
