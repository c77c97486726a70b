# =========== START of renderer.py ===========
from __future__ import annotations
import warnings
from typing import Dict, Optional

import matplotlib
import numpy as np
import numpy.typing as npt

from .logging_config import logger
from .enums import CellState, GridArray
from .colors import DRAWN_STATES, RENDER_COLORS
from .settings import GlobalSettings


warnings.filterwarnings('ignore', category=UserWarning)


def group_points(grid: GridArray) -> Dict[CellState, npt.NDArray[np.int64]]:
    """Cell coordinates ``(x, y)`` for each drawn color class.
    Classes without any cells are left out."""
    groups = {}
    for state in DRAWN_STATES:
        xs, ys = np.nonzero(grid == state)
        if len(xs):
            groups[state] = np.column_stack((xs, ys))
    return groups


class Renderer:
    """Live matplotlib view of the grid.

    One scatter collection per drawn state; each frame replaces their offsets,
    so a frame costs one batched draw per non-empty class. Closing the window
    or pressing Escape sets ``quit_requested``.
    """

    def __init__(self, width: int, height: int, backend: Optional[str] = None,
                 title: Optional[str] = None):
        settings = GlobalSettings.Visualization
        backend = backend or settings.BACKEND
        matplotlib.use(backend)
        import matplotlib.pyplot as plt
        self._plt = plt

        self.width = width
        self.height = height
        self.pause_interval = settings.PAUSE_INTERVAL
        self.quit_requested = False

        dpi = settings.DPI
        self.figure = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi, facecolor=settings.BACKGROUND)
        self.axes = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self.axes.set_facecolor(settings.BACKGROUND)
        self.axes.set_xlim(-0.5, width - 0.5)
        self.axes.set_ylim(height - 0.5, -0.5) # y grows downwards like window pixels
        self.axes.set_axis_off()

        empty = np.empty((0, 2))
        self._collections = {
            state: self.axes.scatter(empty[:, 0], empty[:, 1], s=settings.MARKER_SIZE, marker='s',
                                     c=RENDER_COLORS[state], linewidths=0)
            for state in DRAWN_STATES
        }

        manager = self.figure.canvas.manager
        if manager is not None:
            manager.set_window_title(title or settings.WINDOW_TITLE)
        self.figure.canvas.mpl_connect('close_event', self._on_close)
        self.figure.canvas.mpl_connect('key_press_event', self._on_key)
        plt.show(block=False)
        logger.info(f"Renderer opened ({width}x{height}, backend={matplotlib.get_backend()})")

    def _on_close(self, event):
        logger.info("Renderer window closed")
        self.quit_requested = True

    def _on_key(self, event):
        if event.key == 'escape':
            logger.info("Escape pressed, stopping")
            self.quit_requested = True

    def poll_quit(self) -> bool:
        """Process pending GUI events and report whether the user asked to quit."""
        self.figure.canvas.flush_events()
        return self.quit_requested

    def draw(self, grid: GridArray):
        groups = group_points(grid)
        for state, collection in self._collections.items():
            points = groups.get(state)
            if points is None:
                collection.set_visible(False)
                continue
            collection.set_offsets(points)
            collection.set_visible(True)
        self.figure.canvas.draw_idle()
        self._plt.pause(self.pause_interval)

    def close(self):
        self._plt.close(self.figure)


# =========== END of renderer.py ===========
