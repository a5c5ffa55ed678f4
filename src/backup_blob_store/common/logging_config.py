"""
Colored console logging for the backup blob store tools.

Level names are colored so errors and warnings stand out, and records coming
from the Azure SDK are tagged with a distinct color for the logger name.
"""

import logging
import os
import sys
from typing import Optional, TextIO


class Colors:
    """ANSI color codes for terminal output."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    CYAN = '\033[36m'


class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds colors to log levels and SDK logger names.

    Color scheme:
    - DEBUG: Cyan
    - INFO: Green
    - WARNING: Yellow
    - ERROR: Red
    - CRITICAL: Bold Red
    - Azure SDK loggers: Blue
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    SDK_LOGGER_PREFIX = 'azure'

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and self._supports_color(stream or sys.stdout)

    @staticmethod
    def _supports_color(stream: TextIO) -> bool:
        """Check whether ``stream`` is a terminal that accepts ANSI colors."""
        if os.environ.get('NO_COLOR'):
            return False
        if os.environ.get('FORCE_COLOR'):
            return True
        if not hasattr(stream, 'isatty') or not stream.isatty():
            return False

        # On Windows only ANSICON and Windows Terminal render the codes
        if sys.platform == 'win32':
            return bool(os.environ.get('ANSICON') or os.environ.get('WT_SESSION'))

        return True

    def _is_sdk_log(self, record: logging.LogRecord) -> bool:
        return record.name.split('.', 1)[0] == self.SDK_LOGGER_PREFIX

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        levelname_orig = record.levelname
        name_orig = record.name

        level_color = self.LEVEL_COLORS.get(record.levelno, '')
        record.levelname = f"{level_color}{record.levelname}{Colors.RESET}"

        if self._is_sdk_log(record):
            record.name = f"{Colors.BLUE}{record.name}{Colors.RESET}"

        result = super().format(record)

        record.levelname = levelname_orig
        record.name = name_orig

        return result


def setup_colored_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    use_colors: bool = True,
    stream: Optional[TextIO] = None,
    sdk_level: int = logging.WARNING,
) -> None:
    """
    Configure colored logging on the root logger.

    Args:
        level: The logging level for the root logger and console handler
        format_string: Custom format string (default: timestamp, name, level, message)
        date_format: Custom date format string
        use_colors: Whether to use colors (auto-detects TTY support)
        stream: Stream the console handler writes to (default: stdout)
        sdk_level: Level for the ``azure`` logger, whose HTTP logging is verbose at INFO

    Example:
        >>> from backup_blob_store.common.logging_config import setup_colored_logging
        >>> setup_colored_logging(level=logging.DEBUG, stream=sys.stderr)
    """
    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if date_format is None:
        date_format = '%Y-%m-%d %H:%M:%S'

    stream = stream or sys.stdout
    formatter = ColoredFormatter(
        fmt=format_string,
        datefmt=date_format,
        use_colors=use_colors,
        stream=stream,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger(ColoredFormatter.SDK_LOGGER_PREFIX).setLevel(max(level, sdk_level))
