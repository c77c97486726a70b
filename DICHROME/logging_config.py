# =========== START of logging_config.py ===========
from __future__ import annotations
import sys
import logging
import os
from datetime import datetime
from typing import Dict, Optional, Tuple


class LogSettings:
    class Logging:
        LOG_LEVEL: str = "INFO"
        CONSOLE_LOG_LEVEL: str = "INFO"
        LOG_TO_FILE: bool = True


# --- Custom Log Level ---
DETAIL_LEVEL_NUM = 15  # Between DEBUG (10) and INFO (20)
logging.addLevelName(DETAIL_LEVEL_NUM, "DETAIL")

def detail(self, message, *args, **kws):
    """Logs a message with level DETAIL on this logger."""
    if self.isEnabledFor(DETAIL_LEVEL_NUM):
        self._log(DETAIL_LEVEL_NUM, message, args, **kws)

logging.Logger.detail = detail  # type: ignore [attr-defined]
# --- End Custom Log Level ---


class FindFontFilter(logging.Filter):
    def filter(self, record):
        return "findfont" not in record.getMessage()


APP_DIR = "DICHROME"
SUBDIRS = {
    'logs': 'logs',
}

# Shared application logger. Handlers are attached by setup_logging().
logger = logging.getLogger(APP_DIR)
logger.addHandler(logging.NullHandler())


def _resolve_level(level_str: str) -> int:
    level_str = level_str.upper()
    if level_str == "DETAIL":
        return DETAIL_LEVEL_NUM
    return getattr(logging, level_str, logging.INFO)


def setup_directories(base_dir: Optional[str] = None) -> Tuple[Dict[str, str], str]:
    """Sets up the necessary directories for the application."""
    base_path = os.path.join(base_dir or os.getcwd(), APP_DIR)
    resources_path = os.path.join(base_path, "Resources")
    paths = {}
    for key, subdir in SUBDIRS.items():
        path = os.path.join(resources_path, subdir)
        os.makedirs(path, exist_ok=True)
        paths[key] = path
    return paths, base_path


def setup_logging(log_dir: Optional[str] = None) -> logging.Logger:
    """Setup logging with a timestamped log file and a console handler.

    The console handler writes to stderr: stdout is reserved for binary frames
    when an output protocol is selected. Calling this twice is a no-op.
    """
    root_logger = logging.getLogger()
    if any(getattr(h, '_dichrome_handler', False) for h in root_logger.handlers):
        return logger # Already initialized

    timestamp_24hr = datetime.now().strftime("%Y%m%d_%H%M%S") # 24-hour format

    file_log_level = _resolve_level(LogSettings.Logging.LOG_LEVEL)
    console_log_level = _resolve_level(LogSettings.Logging.CONSOLE_LOG_LEVEL)
    main_formatter = logging.Formatter('%(asctime)s - %(levelname)s - [%(threadName)s] - %(message)s')

    handlers = []
    main_log_path = "Disabled"
    if LogSettings.Logging.LOG_TO_FILE and log_dir is not None:
        main_log_path = os.path.join(log_dir, f'{APP_DIR}_{timestamp_24hr}.log')
        main_file_handler = logging.FileHandler(main_log_path)
        main_file_handler.setFormatter(main_formatter)
        main_file_handler.setLevel(file_log_level)
        handlers.append(main_file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(main_formatter)
    console_handler.setLevel(console_log_level)
    handlers.append(console_handler)

    # Root level is the *lowest* of all handlers
    root_logger.setLevel(min(h.level for h in handlers))
    for handler in handlers:
        handler._dichrome_handler = True  # type: ignore [attr-defined]
        root_logger.addHandler(handler)

    # --- Configure matplotlib and numba loggers ---
    numba_logger = logging.getLogger('numba')
    numba_logger.setLevel(logging.WARNING)
    numba_logger.propagate = True

    matplotlib_logger = logging.getLogger('matplotlib')
    matplotlib_logger.setLevel(logging.WARNING)
    for handler in matplotlib_logger.handlers[:]: matplotlib_logger.removeHandler(handler)
    stream_h = logging.StreamHandler(sys.stderr)
    stream_h.addFilter(FindFontFilter())
    stream_h.setLevel(logging.WARNING)
    matplotlib_logger.addHandler(stream_h)
    matplotlib_logger.propagate = False
    # ---

    logger.info(f"Logging initialized. Root Level: {logging.getLevelName(root_logger.level)}, "
                f"File Handler Level: {logging.getLevelName(file_log_level)}, "
                f"Console Handler Level: {logging.getLevelName(console_log_level)}")
    logger.info(f"Log file: {main_log_path}")
    return logger


# =========== END of logging_config.py ===========
