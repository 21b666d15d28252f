from enum import Enum


class LogLevel(Enum):
    """
    The available log levels for the logger.
    """

    DEBUG = 10
    """
    Fine-grained information, e.g. the window selected by a crop.
    """
    INFO = 20
    """
    Progress of an operation: files read, datasets fetched, layers finalized.
    """
    WARNING = 30
    """
    Something was lost or approximated but the operation completed, e.g. the
    holes of a polygon dropped while casting to a LineString.
    """
    ERROR = 40
    CRITICAL = 50
