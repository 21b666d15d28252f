import sys

from loguru import logger

from geofund.logging.ilogger import ILogger
from geofund.logging.loglevel import LogLevel
from geofund.logging.pythonlogger import LOG_FILE


def _depth_level(additional_depth: int) -> int:
    # Two frames sit between the caller and loguru: the holder and this
    # wrapper's method.
    return 2 + additional_depth


class LoguruLogger(ILogger):
    """
    Log messages with the loguru logging framework.
    """

    def __init__(
        self,
        log_level: LogLevel,
        add_default_stream_handler: bool,
        add_default_file_handler: bool,
    ) -> None:
        # Remove default handler set by loguru
        logger.remove()

        if add_default_stream_handler:
            logger.add(sys.stdout, level=log_level.value)
        if add_default_file_handler:
            logger.add(LOG_FILE, level=log_level.value)

    def debug(self, message: str, additional_depth: int = 0) -> None:
        logger.opt(depth=_depth_level(additional_depth)).debug(message)

    def info(self, message: str, additional_depth: int = 0) -> None:
        logger.opt(depth=_depth_level(additional_depth)).info(message)

    def warning(self, message: str, additional_depth: int = 0) -> None:
        logger.opt(depth=_depth_level(additional_depth)).warning(message)

    def error(self, message: str, additional_depth: int = 0) -> None:
        logger.opt(depth=_depth_level(additional_depth)).error(message)

    def critical(self, message: str, additional_depth: int = 0) -> None:
        logger.opt(depth=_depth_level(additional_depth)).critical(message)
