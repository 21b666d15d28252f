import logging
import sys

from geofund.logging.ilogger import ILogger
from geofund.logging.loglevel import LogLevel

LOGGER_NAME = "geofund"
LOG_FILE = "geofund.log"


def _formatter():
    return logging.Formatter(
        "%(name)s: %(asctime)s | %(levelname)s | %(filename)s:%(lineno)s >>> %(message)s"
    )


def _stack_level(additional_depth: int) -> int:
    # Three frames sit between the caller and logging: the holder, this
    # wrapper's method and the logging call itself.
    return 3 + additional_depth


class PythonLogger(ILogger):
    """
    Log messages with the standard library logging framework, under the
    ``"geofund"`` logger.
    """

    def __init__(
        self,
        log_level: LogLevel,
        add_default_stream_handler: bool,
        add_default_file_handler: bool,
    ) -> None:
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(log_level.value)

        if add_default_stream_handler:
            self._add_handler(logging.StreamHandler(stream=sys.stdout))
        if add_default_file_handler:
            self._add_handler(logging.FileHandler(LOG_FILE))

    def debug(self, message: str, additional_depth: int = 0) -> None:
        self.logger.debug(message, stacklevel=_stack_level(additional_depth))

    def info(self, message: str, additional_depth: int = 0) -> None:
        self.logger.info(message, stacklevel=_stack_level(additional_depth))

    def warning(self, message: str, additional_depth: int = 0) -> None:
        self.logger.warning(message, stacklevel=_stack_level(additional_depth))

    def error(self, message: str, additional_depth: int = 0) -> None:
        self.logger.error(message, stacklevel=_stack_level(additional_depth))

    def critical(self, message: str, additional_depth: int = 0) -> None:
        self.logger.critical(message, stacklevel=_stack_level(additional_depth))

    def _add_handler(self, handler: logging.Handler) -> None:
        handler.setFormatter(_formatter())
        self.logger.addHandler(handler)
