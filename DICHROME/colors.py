# =========== START of colors.py ===========
from __future__ import annotations
from typing import Dict, Tuple

import numpy as np
import numpy.typing as npt

from .enums import CellState


RGB = Tuple[int, int, int]


# Renderer palette. EMPTY and DEAD3 are not drawn and show the background.
RENDER_COLORS: Dict[CellState, str] = {
    CellState.BLUE: '#0099ff',
    CellState.ORANGE: '#ff9900',
    CellState.DEAD: '#666666',
    CellState.DEAD1: '#7f7f7f',
    CellState.DEAD2: '#999999',
}
DRAWN_STATES: Tuple[CellState, ...] = tuple(RENDER_COLORS)


# Dense-pixel palette. Anything not listed is white.
PIXEL_COLORS: Dict[CellState, RGB] = {
    CellState.BLUE: (0, 0, 255),
    CellState.ORANGE: (255, 128, 0),
    CellState.DEAD: (0, 0, 0),
    CellState.DEAD1: (136, 136, 136),
    CellState.DEAD2: (160, 160, 160),
    CellState.DEAD3: (238, 238, 238),
}
DEFAULT_PIXEL_COLOR: RGB = (255, 255, 255)


def pack_rgb(r: int, g: int, b: int) -> int:
    """Pack a color as ``blue | green << 8 | red << 16``."""
    return b | g << 8 | r << 16


def pixel_lookup_table() -> npt.NDArray[np.uint32]:
    """Packed pixel word for every possible uint8 cell value."""
    table = np.full(256, pack_rgb(*DEFAULT_PIXEL_COLOR), dtype=np.uint32)
    for state, rgb in PIXEL_COLORS.items():
        table[int(state)] = pack_rgb(*rgb)
    return table


# =========== END of colors.py ===========
