from geofund.logging.ilogger import ILogger
from geofund.logging.nulllogger import NullLogger


class _LoggerHolder(ILogger):
    """
    Forwards every call to the logger configured at that moment.

    Modules bind ``geofund.logging.logger`` at import time, long before a user
    calls :func:`geofund.logging.configure`. Holding the actual logger one
    level down lets ``configure`` swap it without the importers noticing.
    """

    def __init__(self) -> None:
        self._instance: ILogger = NullLogger()

    @property
    def instance(self) -> ILogger:
        return self._instance

    @instance.setter
    def instance(self, value: ILogger) -> None:
        self._instance = value

    def debug(self, message: str, additional_depth: int = 0) -> None:
        self.instance.debug(message, additional_depth)

    def info(self, message: str, additional_depth: int = 0) -> None:
        self.instance.info(message, additional_depth)

    def warning(self, message: str, additional_depth: int = 0) -> None:
        self.instance.warning(message, additional_depth)

    def error(self, message: str, additional_depth: int = 0) -> None:
        self.instance.error(message, additional_depth)

    def critical(self, message: str, additional_depth: int = 0) -> None:
        self.instance.critical(message, additional_depth)
