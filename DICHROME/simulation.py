# =========== START of simulation.py ===========
from __future__ import annotations
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import BinaryIO, Optional

import setproctitle

from .logging_config import DETAIL_LEVEL_NUM, logger, setup_directories, setup_logging
from .enums import FrameProtocol, GridArray
from .settings import GlobalSettings
from .grid import GenerationPair
from .scheduler import ParallelUpdateScheduler
from .encoders import FrameWriter, FrameWriteError, create_writer
from .initial_conditions import InitialConditionManager
from .utils import FpsCounter, PerformanceLogger, log_errors



################################################
#               GENERATION DRIVER              #
################################################

class GenerationDriver:
    """Runs the present -> update -> swap cycle.

    The renderer and the frame writer only ever see ``pair.current`` and are
    finished with it before the swap. With ``overlap_output`` the writer
    encodes on a helper thread while the scheduler computes the next buffer;
    both only read the current buffer.
    """

    def __init__(self, pair: GenerationPair, scheduler: ParallelUpdateScheduler,
                 writer: Optional[FrameWriter] = None, renderer=None,
                 fps_counter: Optional[FpsCounter] = None,
                 perf_logger: Optional[PerformanceLogger] = None,
                 overlap_output: Optional[bool] = None):
        self.pair = pair
        self.scheduler = scheduler
        self.writer = writer
        self.renderer = renderer
        self.fps_counter = fps_counter or FpsCounter()
        self.perf = perf_logger or PerformanceLogger()
        if overlap_output is None:
            overlap_output = GlobalSettings.Simulation.OVERLAP_OUTPUT_WITH_UPDATE
        self.overlap_output = overlap_output
        self.generation = 0

    @classmethod
    def from_settings(cls, sink: Optional[BinaryIO] = None) -> 'GenerationDriver':
        """Build a driver from GlobalSettings, seeding the initial generation."""
        sim = GlobalSettings.Simulation
        writer = create_writer(GlobalSettings.Output.PROTOCOL, sink, (sim.GRID_WIDTH, sim.GRID_HEIGHT))
        pair = GenerationPair(sim.GRID_WIDTH, sim.GRID_HEIGHT)
        InitialConditionManager.get_instance().apply(sim.INITIAL_CONDITIONS, pair, sim.RANDOM_SEED)
        scheduler = ParallelUpdateScheduler(sim.NUM_WORKERS)
        renderer = None
        if GlobalSettings.Output.VISUAL_OUT:
            from .renderer import Renderer
            renderer = Renderer(sim.GRID_WIDTH, sim.GRID_HEIGHT)
        return cls(pair, scheduler, writer=writer, renderer=renderer)

    def _write_frame(self, grid: GridArray):
        with self.perf.measure('output'):
            self.writer.write(grid)

    @log_errors
    def _update(self):
        with self.perf.measure('update'):
            self.scheduler.update(self.pair.current, self.pair.next)

    def step(self):
        """Advance one generation."""
        current = self.pair.current

        if self.renderer is not None:
            with self.perf.measure('render'):
                self.renderer.draw(current)

        if self.writer is not None and self.overlap_output:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix="output") as executor:
                output = executor.submit(self._write_frame, current)
                self._update()
                output.result()
        else:
            if self.writer is not None:
                self._write_frame(current)
            self._update()

        self.pair.swap()
        self.generation += 1
        self.fps_counter.tick()

        if logger.isEnabledFor(DETAIL_LEVEL_NUM):
            logger.detail(f"Generation {self.generation}: update {self.perf.last('update') * 1000:.2f}ms")  # type: ignore [attr-defined]
        interval = GlobalSettings.Performance.STATS_REPORT_INTERVAL
        if interval and self.generation % interval == 0:
            logger.debug(f"Timing after {self.generation} generations: {self.perf.get_stats()}")

    def run(self, max_generations: Optional[int] = None) -> int:
        """Step until ``max_generations`` have run or the renderer asks to quit.
        Returns the number of generations run."""
        generations_run = 0
        while max_generations is None or generations_run < max_generations:
            if self.renderer is not None and self.renderer.poll_quit():
                break
            self.step()
            generations_run += 1
        return generations_run

    def close(self):
        if self.renderer is not None:
            self.renderer.close()


def main() -> int:
    setproctitle.setproctitle("DICHROME")
    paths, _ = setup_directories()
    setup_logging(paths['logs'])

    sim = GlobalSettings.Simulation
    output = GlobalSettings.Output
    logger.info(f"Grid {sim.GRID_WIDTH}x{sim.GRID_HEIGHT}, workers={sim.NUM_WORKERS}, "
                f"protocol={output.PROTOCOL.name}, visual={output.VISUAL_OUT}")

    if output.PROTOCOL == FrameProtocol.OFF and not output.VISUAL_OUT and sim.MAX_GENERATIONS is None:
        logger.warning("No output selected; running headless until interrupted")

    try:
        driver = GenerationDriver.from_settings(sink=sys.stdout.buffer)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        generations = driver.run(sim.MAX_GENERATIONS)
        logger.info(f"Stopped after {generations} generations")
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return 0
    except FrameWriteError as e:
        if isinstance(e.__cause__, BrokenPipeError):
            logger.info("Output consumer closed the stream, stopping")
            # Keep the interpreter from flushing into the closed pipe at exit
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, sys.stdout.fileno())
            return 0
        logger.error(f"Frame output failed, stopping: {e}")
        return 1
    finally:
        driver.close()


# =========== END of simulation.py ===========
