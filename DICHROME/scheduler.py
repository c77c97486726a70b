# =========== START of scheduler.py ===========
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

import numpy as np

from .logging_config import logger
from .enums import GridArray, RowSlice
from .rules import update_rows
from .settings import GlobalSettings


RowKernel = Callable[[GridArray, GridArray, int, int], None]


class UpdateAbortedError(RuntimeError):
    """A worker failed, so the next buffer is not a valid generation."""


def partition_rows(num_rows: int, num_workers: int) -> List[RowSlice]:
    """Split ``[0, num_rows)`` into ``num_workers`` contiguous slices of
    ``num_rows // num_workers`` rows; the last slice takes the remainder."""
    if num_workers < 1:
        raise ValueError(f"num_workers must be >= 1, got {num_workers}")
    rows_per_worker = num_rows // num_workers
    slices = []
    for i in range(num_workers):
        start = i * rows_per_worker
        end = start + rows_per_worker
        if i == num_workers - 1:
            end = num_rows # Handle remainder
        slices.append((start, end))
    return slices


class ParallelUpdateScheduler:
    """Fork-join update of a whole grid.

    Each call partitions the rows, starts one thread per non-empty slice and
    joins all of them before returning. The current buffer is shared
    read-only; every worker writes a disjoint range of rows of the next
    buffer, so no locking is needed and the result does not depend on the
    number of workers.
    """

    def __init__(self, num_workers: Optional[int] = None, kernel: RowKernel = update_rows):
        if num_workers is None:
            num_workers = GlobalSettings.Simulation.NUM_WORKERS
        if num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")
        self.num_workers = num_workers
        self.kernel = kernel

    def update(self, current: GridArray, nxt: GridArray):
        """Compute the next generation of ``current`` into ``nxt``.

        Raises UpdateAbortedError if any worker raised; in that case ``nxt``
        is partially written and must not be swapped in.
        """
        if current.shape != nxt.shape:
            raise ValueError(f"Buffer shape mismatch: {current.shape} vs {nxt.shape}")
        if np.shares_memory(current, nxt):
            raise ValueError("Current and next buffers must not alias")

        slices = [s for s in partition_rows(current.shape[0], self.num_workers) if s[1] > s[0]]

        if len(slices) <= 1:
            # Plain sequential pass
            try:
                self.kernel(current, nxt, 0, current.shape[0])
            except Exception as e:
                logger.error(f"Sequential update failed: {e}")
                raise UpdateAbortedError(f"Update of rows 0:{current.shape[0]} failed") from e
            return

        futures = []
        failures = []
        with ThreadPoolExecutor(max_workers=len(slices), thread_name_prefix="update") as executor:
            for start, end in slices:
                futures.append((start, end, executor.submit(self.kernel, current, nxt, start, end)))

            # Join every worker before deciding the outcome
            for start, end, future in futures:
                error = future.exception()
                if error is not None:
                    logger.error(f"Update worker for rows {start}:{end} failed: {error}")
                    failures.append((start, end, error))

        if failures:
            start, end, error = failures[0]
            raise UpdateAbortedError(
                f"{len(failures)} of {len(slices)} update workers failed (first: rows {start}:{end})"
            ) from error


# =========== END of scheduler.py ===========
