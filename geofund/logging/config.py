from enum import Enum

import geofund

from .loglevel import LogLevel
from .logurulogger import LoguruLogger
from .nulllogger import NullLogger
from .pythonlogger import PythonLogger


class LoggerType(Enum):
    """
    The available logging frameworks.
    """

    PYTHON = PythonLogger.__name__
    """
    The standard library logging framework.
    """
    LOGURU = LoguruLogger.__name__
    """
    The loguru logging framework.
    """
    NULL = NullLogger.__name__
    """
    A dummy logger that doesn't log anything.
    """


def configure(
    logger_type: LoggerType,
    log_level: LogLevel = LogLevel.WARNING,
    add_default_stream_handler: bool = True,
    add_default_file_handler: bool = False,
) -> None:
    """
    Select the logging framework used by geofund and assign it a log level.

    Parameters
    ----------
    logger_type : LoggerType
        The logging framework to be used.
    log_level : LogLevel
        The log level to be set. WARNING by default.
    add_default_stream_handler : bool
        Whether to log to stdout. True by default.
    add_default_file_handler : bool
        Whether to log to ``geofund.log`` in the working directory. False by
        default.
    """
    match logger_type:
        case LoggerType.PYTHON:
            geofund.logging.logger.instance = PythonLogger(
                log_level, add_default_stream_handler, add_default_file_handler
            )
        case LoggerType.LOGURU:
            geofund.logging.logger.instance = LoguruLogger(
                log_level, add_default_stream_handler, add_default_file_handler
            )
        case _:
            geofund.logging.logger.instance = NullLogger()
