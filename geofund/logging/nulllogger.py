from geofund.logging.ilogger import ILogger


class NullLogger(ILogger):
    """
    Dummy logger that discards every message. This is the default until
    :func:`geofund.logging.configure` is called.
    """

    def debug(self, message: str, additional_depth: int = 0) -> None:
        pass

    def info(self, message: str, additional_depth: int = 0) -> None:
        pass

    def warning(self, message: str, additional_depth: int = 0) -> None:
        pass

    def error(self, message: str, additional_depth: int = 0) -> None:
        pass

    def critical(self, message: str, additional_depth: int = 0) -> None:
        pass
