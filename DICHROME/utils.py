# =========== START of utils.py ===========
from __future__ import annotations
import time
import traceback
from collections import defaultdict
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Set

import numpy as np

from .logging_config import logger
from .settings import GlobalSettings


class FpsCounter:
    """Counts frames and reports the rate once per interval.

    Owned by whoever drives the frames; nothing here is process-wide.
    """

    def __init__(self, interval: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.interval = GlobalSettings.Performance.FPS_REPORT_INTERVAL if interval is None else interval
        self.clock = clock
        self.count = 0
        self.last_report: Optional[float] = None
        self.last_fps: Optional[int] = None

    @property
    def initialized(self) -> bool:
        return self.last_report is not None

    def tick(self) -> Optional[int]:
        """Count one frame. Returns the frame count when an interval has
        elapsed (and logs it), otherwise None."""
        now = self.clock()
        if self.last_report is None:
            self.last_report = now # Initialize on first call

        self.count += 1

        if now - self.last_report >= self.interval:
            fps = self.count
            logger.info(f"FPS: {fps}")
            self.last_fps = fps
            self.count = 0
            self.last_report = now
            return fps
        return None


class PerformanceLogger:
    def __init__(self, max_history: int = 1000):
        self.metrics: Dict[str, List[float]] = defaultdict(list)
        self.start_times: Dict[str, float] = {}
        self.active_measurements: Set[str] = set()
        self.max_history = max_history

    @contextmanager
    def measure(self, name: str):
        """Context manager for measuring execution time"""
        try:
            self.start_measurement(name)
            yield
        finally:
            self.end_measurement(name)

    def start_measurement(self, name: str):
        """Start measuring a named operation"""
        if name in self.active_measurements:
            logger.warning(f"Measurement '{name}' already active")
            return
        self.start_times[name] = time.perf_counter()
        self.active_measurements.add(name)

    def end_measurement(self, name: str):
        """End measuring a named operation"""
        if name not in self.active_measurements:
            logger.warning(f"Measurement '{name}' not active")
            return
        self.log_metric(name, time.perf_counter() - self.start_times[name])
        self.active_measurements.remove(name)

    def log_metric(self, name: str, value: float):
        """Log a metric value, limiting the history size."""
        self.metrics[name].append(value)
        if len(self.metrics[name]) > self.max_history:
            self.metrics[name] = self.metrics[name][-self.max_history:]

    def last(self, name: str) -> float:
        values = self.metrics.get(name)
        return values[-1] if values else 0.0

    def get_stats(self) -> Dict[str, Any]:
        """Get performance statistics"""
        stats = {}
        for name, measurements in self.metrics.items():
            if measurements:
                stats[name] = {
                    'avg': float(np.mean(measurements[-100:])),  # Last 100 measurements
                    'min': float(np.min(measurements)),
                    'max': float(np.max(measurements)),
                    'count': len(measurements)
                }
        return stats

    def reset(self):
        """Reset all measurements"""
        self.metrics.clear()
        self.start_times.clear()
        self.active_measurements.clear()


def log_errors(func):
    """Decorator to catch and log errors with context"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"Error in {func.__name__}: {str(e)}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )
            raise
    return wrapper


# =========== END of utils.py ===========
