from functools import wraps
from time import time
from typing import Callable, ParamSpec, TypeVar

from geofund.logging.loglevel import LogLevel

T = TypeVar("T")
P = ParamSpec("P")


def _subject(args) -> str:
    if len(args) == 0:
        return "no input"
    return type(args[0]).__name__


def standard_log_decorator(
    start_level: LogLevel = LogLevel.INFO, end_level: LogLevel = LogLevel.DEBUG
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator to log the beginning and end of the decorated operation, with
    the type of its first argument and the elapsed time.
    """

    def decorator(fun: Callable[P, T]) -> Callable[P, T]:
        @wraps(fun)
        def wrapper(*args: P.args, **kwargs: P.kwargs):
            from geofund.logging import logger

            name = f"{fun.__module__}.{fun.__qualname__}"
            subject = _subject(args)
            logger.log(
                loglevel=start_level,
                message=f"Beginning {name} on {subject}...",
                additional_depth=2,
            )

            start_time = time()
            return_value = fun(*args, **kwargs)
            elapsed = time() - start_time

            logger.log(
                loglevel=end_level,
                message=f"Finished {name} on {subject} in {elapsed:.3f} seconds",
                additional_depth=2,
            )
            return return_value

        return wrapper

    return decorator


def init_log_decorator(
    level: LogLevel = LogLevel.DEBUG,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for ``__init__`` methods: logs which object was constructed once
    its validation has passed.
    """

    def decorator(fun: Callable[P, T]) -> Callable[P, T]:
        @wraps(fun)
        def wrapper(*args: P.args, **kwargs: P.kwargs):
            from geofund.logging import logger

            return_value = fun(*args, **kwargs)
            logger.log(
                loglevel=level,
                message=f"Initialized {args[0]!r}",
                additional_depth=2,
            )
            return return_value

        return wrapper

    return decorator
