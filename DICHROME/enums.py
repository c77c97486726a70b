# =========== START of enums.py ===========
from __future__ import annotations
from enum import Enum, IntEnum, auto
from typing import Tuple

import numpy as np
import numpy.typing as npt


# Type aliases for improved type hints
GridArray = npt.NDArray[np.uint8]
RowSlice = Tuple[int, int]



################################################
#                       ENUMS                  #
################################################


class CellState(IntEnum):
    """State of a single cell. The integer value is what the buffers and the
    dense-cell frames store, and ordering matters: everything >= DEAD is a
    decay step."""
    EMPTY = 0
    BLUE = 1
    ORANGE = 2
    DEAD = 3   # tombstone, first decay step
    DEAD1 = 4
    DEAD2 = 5
    DEAD3 = 6  # terminal decay step, next is EMPTY


NUM_STATES = len(CellState)


class FrameProtocol(Enum):
    """Wire format used when streaming generations to the output sink"""
    OFF = auto()
    DENSE_CELLS = auto()    # 1 byte per cell
    SPARSE_PIXELS = auto()  # 1 word per non-empty cell + end-of-frame marker
    DENSE_PIXELS = auto()   # 1 packed RGB word per cell


# =========== END of enums.py ===========
