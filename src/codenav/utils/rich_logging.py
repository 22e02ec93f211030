"""Console logging with command context and colour-aware formatting."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "codenav"


class CommandLogFormatter(logging.Formatter):
    """Formatter that prefixes each record with the running command."""

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        command_context = ""
        if hasattr(record, "command"):
            command_context = f"[{record.command}] "

        if self.use_colors:
            level_colors = {
                "DEBUG": "\033[36m",      # Cyan
                "INFO": "\033[32m",       # Green
                "WARNING": "\033[33m",    # Yellow
                "ERROR": "\033[31m",      # Red
                "CRITICAL": "\033[35m",   # Magenta
            }
            reset = "\033[0m"
            level_color = level_colors.get(record.levelname, "")
        else:
            level_color = ""
            reset = ""

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return (
            f"{timestamp} {level_color}{record.levelname:8s}{reset} "
            f"{command_context}{message}"
        )


class CommandLogger(logging.LoggerAdapter):
    """Logger adapter that stamps the current command onto every record."""

    def __init__(self, logger: logging.Logger, command: Optional[str] = None):
        super().__init__(logger, {})
        self.command = command

    def set_command(self, command: Optional[str]) -> None:
        self.command = command

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        if self.command:
            extra["command"] = self.command
        kwargs["extra"] = extra
        return msg, kwargs


class _CommandFilter(logging.Filter):
    """Copies the adapter's command onto records from module loggers."""

    def __init__(self, adapter: CommandLogger):
        super().__init__()
        self._adapter = adapter

    def filter(self, record: logging.LogRecord) -> bool:
        if self._adapter.command and not hasattr(record, "command"):
            record.command = self._adapter.command
        return True


def setup_logging(
    log_level: str = "WARNING",
    log_file: Optional[Path] = None,
    use_json: bool = False,
    command: Optional[str] = None,
) -> CommandLogger:
    """
    Configure the ``codenav`` logger hierarchy.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path for a plain-text copy of the log
        use_json: Emit one JSON object per line instead of the human format
        command: Command name stamped onto every record

    Returns:
        CommandLogger wrapping the package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.propagate = False

    # Close existing handlers before clearing (prevents file descriptor leak)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    for existing in logger.filters[:]:
        logger.removeFilter(existing)

    if use_json:
        formatter = logging.Formatter(
            '{"timestamp":"%(asctime)s","command":"%(command)s","level":"%(levelname)s",'
            '"message":"%(message)s","module":"%(module)s","function":"%(funcName)s"}',
            defaults={"command": command or ""},
        )
    else:
        use_colors = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
        formatter = CommandLogFormatter(use_colors=use_colors)

    # stdout carries command output, so logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(CommandLogFormatter(use_colors=False))
        logger.addHandler(file_handler)

    command_logger = CommandLogger(logger, command)
    for handler in logger.handlers:
        handler.addFilter(_CommandFilter(command_logger))
    return command_logger
