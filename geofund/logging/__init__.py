"""
Logging support for geofund.

geofund is silent by default. To see what it does, configure one of the
supported frameworks:

>>> import geofund
>>> from geofund.logging import LoggerType, LogLevel
>>>
>>> geofund.logging.configure(LoggerType.LOGURU, LogLevel.INFO)

Or integrate with an existing standard library logging setup, without the
default handlers:

>>> import logging
>>> geofund.logging.configure(
>>>     LoggerType.PYTHON, LogLevel.DEBUG, add_default_stream_handler=False
>>> )
>>> logging.basicConfig(level=logging.DEBUG, handlers=[logging.FileHandler("maps.log")])
"""

from geofund.logging._loggerholder import _LoggerHolder
from geofund.logging.config import LoggerType, configure
from geofund.logging.ilogger import ILogger  # noqa: I001
from geofund.logging.loglevel import LogLevel

logger = _LoggerHolder()
