"""
Module to define type aliases.
"""

from typing import Any, Sequence, TypeAlias, Union

import numpy as np
from numpy.typing import NDArray

Position: TypeAlias = tuple[float, ...]
PositionSequence: TypeAlias = tuple[Position, ...]
CoordinateLike: TypeAlias = Union[Sequence[Any], NDArray[np.floating]]
Bounds: TypeAlias = tuple[float, float, float, float]
# Anything accepted by pyproj.CRS.from_user_input: "EPSG:4326", 4326, a WKT
# string, a pyproj.CRS or a rasterio CRS.
CRSLike: TypeAlias = Any
FloatArray: TypeAlias = NDArray[np.floating]
IntArray: TypeAlias = NDArray[np.int_]
BoolArray: TypeAlias = NDArray[np.bool_]
