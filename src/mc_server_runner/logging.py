# mc_server_runner/logging.py
"""Logging setup for the runner.

Configures the package logger with a daily-rotating file handler and a
console handler. Console records get a coloured level prefix so operators can
tell warnings from progress messages at a glance.
"""

import logging
import logging.handlers
import os
import platform
import sys
from datetime import datetime

from colorama import Fore, Style

from .config.const import DEFAULT_LOG_KEEP, package_name

DEFAULT_LOG_FILENAME = f"{package_name}.log"
LOGGER_NAME = "mc_server_runner"

_LEVEL_PREFIXES = {
    logging.DEBUG: Style.DIM + "[DEBUG] " + Style.RESET_ALL,
    logging.INFO: Fore.CYAN + "[INFO] " + Style.RESET_ALL,
    logging.WARNING: Fore.YELLOW + "[WARN] " + Style.RESET_ALL,
    logging.ERROR: Fore.RED + "[ERROR] " + Style.RESET_ALL,
    logging.CRITICAL: Fore.RED + Style.BRIGHT + "[CRITICAL] " + Style.RESET_ALL,
}


class ConsoleFormatter(logging.Formatter):
    """Prefixes each console record with a coloured level tag."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        prefix = _LEVEL_PREFIXES.get(record.levelno, "")
        return f"{prefix}{message}"


def setup_logging(
    log_dir: str,
    log_filename: str = DEFAULT_LOG_FILENAME,
    log_keep: int = DEFAULT_LOG_KEEP,
    file_log_level: int = logging.INFO,
    cli_log_level: int = logging.INFO,
    when: str = "midnight",
    interval: int = 1,
    force_reconfigure: bool = False,
) -> logging.Logger:
    """Sets up file and console logging for the package logger.

    Args:
        log_dir: Directory to store log files. Created if missing.
        log_filename: The base name of the log file.
        log_keep: Number of rotated log files to keep.
        file_log_level: Minimum level written to the log file.
        cli_log_level: Minimum level written to the console.
        when: Rotation unit. See ``TimedRotatingFileHandler``.
        interval: Rotation interval.
        force_reconfigure: Drop existing handlers and configure again.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(min(file_log_level, cli_log_level))

    if force_reconfigure:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ConsoleFormatter("%(message)s"))
    console_handler.setLevel(cli_log_level)
    logger.addHandler(console_handler)

    try:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, log_filename)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_path,
            when=when,
            interval=interval,
            backupCount=log_keep,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        file_handler.setLevel(file_log_level)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"File logging disabled: cannot write to '{log_dir}': {e}")

    logger.debug(
        f"Logging setup complete. Dir: {log_dir}, Filename: {log_filename}, "
        f"File level: {file_log_level}, CLI level: {cli_log_level}"
    )
    return logger


def log_separator(
    logger: logging.Logger, app_name: str = package_name, app_version: str = "0.0.0"
) -> None:
    """Writes a banner with app, OS and Python details to the file handlers."""
    os_info = f"{platform.system()} {platform.release()}"
    current_time = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    separator_line = "=" * 100
    info_lines = [
        f"{app_name} v{app_version}",
        f"Operating System: {os_info}",
        f"Python Version: {platform.python_version()}",
        f"Timestamp: {current_time}",
    ]

    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            continue
        if getattr(handler, "stream", None) is None:
            continue
        try:
            handler.stream.write("\n" + separator_line + "\n")
            for line in info_lines:
                handler.stream.write(line + "\n")
            handler.stream.write(separator_line + "\n\n")
            handler.stream.flush()
        except ValueError as e:
            if "I/O operation on closed file" not in str(e):
                raise
            print(
                f"Warning: Could not write to log file (stream closed): {e}",
                file=sys.stderr,
            )
