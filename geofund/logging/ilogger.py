from abc import abstractmethod

from geofund.logging.loglevel import LogLevel


class ILogger:
    """
    Interface to be implemented by all logger wrappers.

    Every method takes the message to log and an ``additional_depth``. The
    depth corrects the reported filename and line number when the call passes
    through extra frames, e.g. a decorator.
    """

    @abstractmethod
    def debug(self, message: str, additional_depth: int = 0) -> None:
        raise NotImplementedError

    @abstractmethod
    def info(self, message: str, additional_depth: int = 0) -> None:
        raise NotImplementedError

    @abstractmethod
    def warning(self, message: str, additional_depth: int = 0) -> None:
        raise NotImplementedError

    @abstractmethod
    def error(self, message: str, additional_depth: int = 0) -> None:
        raise NotImplementedError

    @abstractmethod
    def critical(self, message: str, additional_depth: int = 0) -> None:
        raise NotImplementedError

    def log(self, loglevel: LogLevel, message: str, additional_depth: int = 0) -> None:
        """
        Log a message with the specified urgency level.
        """
        match loglevel:
            case LogLevel.DEBUG:
                self.debug(message, additional_depth)
            case LogLevel.INFO:
                self.info(message, additional_depth)
            case LogLevel.WARNING:
                self.warning(message, additional_depth)
            case LogLevel.ERROR:
                self.error(message, additional_depth)
            case LogLevel.CRITICAL:
                self.critical(message, additional_depth)
            case _:
                raise ValueError(f"Unknown logging urgency at level {loglevel}")
