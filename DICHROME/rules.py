# =========== START of rules.py ===========
"""Two-color Life with a four-step tombstone.

- Birth: an EMPTY cell with exactly 3 living neighbors comes alive. The color is
  the plurality color among those neighbors; ties go to ORANGE.
- Survival: a BLUE or ORANGE cell with 3 to 5 living neighbors keeps its color,
  otherwise it becomes DEAD.
- Decay: DEAD -> DEAD1 -> DEAD2 -> DEAD3 -> EMPTY regardless of neighbors.
  Decaying cells are never counted as neighbors.

Neighborhoods are Moore (8 cells) on a torus. The kernels are compiled with
numba in ``nogil`` mode so the update scheduler can run them on several
threads at once.
"""
from __future__ import annotations
from typing import Tuple

from numba import njit

from .enums import CellState, GridArray


EMPTY = int(CellState.EMPTY)
BLUE = int(CellState.BLUE)
ORANGE = int(CellState.ORANGE)
DEAD = int(CellState.DEAD)
DEAD3 = int(CellState.DEAD3)

BIRTH_COUNT = 3
SURVIVAL_MIN = 3
SURVIVAL_MAX = 5


@njit(cache=True, nogil=True)
def count_neighbors(grid, x, y):
    """Count BLUE and ORANGE cells in the Moore neighborhood of (x, y),
    wrapping around the grid edges."""
    width = grid.shape[0]
    height = grid.shape[1]
    blue_count = 0
    orange_count = 0
    for i in range(-1, 2):
        for j in range(-1, 2):
            if i == 0 and j == 0:
                continue # Skip the cell itself
            nx = (x + i + width) % width
            ny = (y + j + height) % height
            neighbor = grid[nx, ny]
            if neighbor == BLUE:
                blue_count += 1
            elif neighbor == ORANGE:
                orange_count += 1
    return blue_count, orange_count


@njit(cache=True, nogil=True)
def next_state(state, blue_count, orange_count):
    """Next state of a cell from its current state and its neighbor counts.
    Counts are ignored for decaying cells."""
    if state >= DEAD:
        if state == DEAD3:
            return EMPTY
        return state + 1

    total = blue_count + orange_count
    if state == BLUE or state == ORANGE:
        if SURVIVAL_MIN <= total and total <= SURVIVAL_MAX:
            return state
        return DEAD

    if total == BIRTH_COUNT:
        if blue_count > orange_count:
            return BLUE
        return ORANGE
    return EMPTY


@njit(cache=True, nogil=True)
def update_rows(current, nxt, start, stop):
    """Apply the rule to every cell with ``start <= x < stop``.

    Reads only ``current`` and writes only ``nxt[start:stop]``.
    """
    height = current.shape[1]
    for x in range(start, stop):
        for y in range(height):
            state = current[x, y]
            if state >= DEAD:
                nxt[x, y] = next_state(state, 0, 0)
                continue
            blue_count, orange_count = count_neighbors(current, x, y)
            nxt[x, y] = next_state(state, blue_count, orange_count)


def transition(state: int, blue_count: int, orange_count: int) -> CellState:
    return CellState(int(next_state(int(state), int(blue_count), int(orange_count))))


def neighbor_counts(grid: GridArray, x: int, y: int) -> Tuple[int, int]:
    blue_count, orange_count = count_neighbors(grid, int(x), int(y))
    return int(blue_count), int(orange_count)


def sequential_update(current: GridArray, nxt: GridArray):
    """Single-threaded pass over the whole grid."""
    update_rows(current, nxt, 0, current.shape[0])


# =========== END of rules.py ===========
