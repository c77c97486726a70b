# =========== START of settings.py ===========
from __future__ import annotations
import multiprocessing as mp
from typing import Optional

from .enums import FrameProtocol



################################################
#                 GLOBAL SETTINGS              #
################################################


class GlobalSettings:

    class Simulation:
        GRID_WIDTH: int = 500
        GRID_HEIGHT: int = 500

        # One update worker per hardware context
        NUM_WORKERS: int = max(1, mp.cpu_count())

        INITIAL_CONDITIONS: str = "Random" # Name registered with InitialConditionManager
        RANDOM_SEED: Optional[int] = None

        MAX_GENERATIONS: Optional[int] = None # None runs until the renderer asks to quit

        # Encode the current generation on a helper thread while the next one is computed.
        # Both only read the current buffer; the swap waits for both.
        OVERLAP_OUTPUT_WITH_UPDATE: bool = True

    class Output:
        PROTOCOL: FrameProtocol = FrameProtocol.OFF
        VISUAL_OUT: bool = True

    class Visualization:
        BACKEND: str = 'TkAgg'
        WINDOW_TITLE: str = "Conway's Game of Life"
        DPI: int = 100
        MARKER_SIZE: float = 1.0 # points^2, one marker per cell
        PAUSE_INTERVAL: float = 0.001 # seconds spent in the GUI event loop per frame
        BACKGROUND: str = '#ffffff'

    class Performance:
        FPS_REPORT_INTERVAL: float = 1.0 # seconds
        STATS_REPORT_INTERVAL: int = 100 # generations between timing summaries


# =========== END of settings.py ===========
