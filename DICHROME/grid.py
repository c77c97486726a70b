# =========== START of grid.py ===========
from __future__ import annotations
from typing import Dict, Tuple

import numpy as np

from .logging_config import logger
from .enums import CellState, GridArray, NUM_STATES



################################################
#               GENERATION BUFFERS             #
################################################

class GenerationPair:
    """Two equally shaped cell buffers, indexed ``[x, y]``.

    ``current`` is read during an update and ``next`` is written. Both are
    allocated once and only ever mutated in place; ``swap`` exchanges the
    references without touching their contents.
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.current: GridArray = np.zeros((width, height), dtype=np.uint8)
        self.next: GridArray = np.zeros((width, height), dtype=np.uint8)
        logger.debug(f"Allocated generation buffers {width}x{height}")

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def swap(self):
        """Swap current and next generation"""
        self.current, self.next = self.next, self.current

    def seed(self, states: np.ndarray):
        """Copy an initial state into the current buffer."""
        states = np.asarray(states)
        if states.shape != self.shape:
            raise ValueError(f"Shape mismatch: expected {self.shape}, got {states.shape}")
        if not np.issubdtype(states.dtype, np.integer):
            raise ValueError(f"Cell states must be integers, got dtype {states.dtype}")
        if states.size and (states.min() < 0 or states.max() >= NUM_STATES):
            raise ValueError(f"Cell states must lie in [0, {NUM_STATES - 1}]")
        self.current[...] = states
        self.next.fill(CellState.EMPTY)

    def snapshot(self) -> GridArray:
        return self.current.copy()

    def population(self) -> Dict[CellState, int]:
        """Number of cells in each state in the current buffer"""
        counts = np.bincount(self.current.ravel(), minlength=NUM_STATES)
        return {state: int(counts[state]) for state in CellState}


# =========== END of grid.py ===========
