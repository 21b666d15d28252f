"""
Ordered collections of geometries sharing one coordinate reference system.
"""

from typing import Any, Iterable, Iterator, Optional, Union

import geopandas as gpd
import numpy as np
import pyproj
import shapely

from geofund.errors import CRSMismatchError, InvalidGeometry
from geofund.geometry import Geometry, GeometryKind, recast
from geofund.logging.logging_decorators import standard_log_decorator
from geofund.typing import Bounds, CRSLike


def as_crs(crs: CRSLike) -> Optional[pyproj.CRS]:
    """Normalize a CRS identifier, keeping ``None`` for an unknown CRS."""
    if crs is None:
        return None
    return pyproj.CRS.from_user_input(crs)


def crs_equal(a: CRSLike, b: CRSLike) -> bool:
    a = as_crs(a)
    b = as_crs(b)
    if a is None or b is None:
        return a is None and b is None
    return a == b


def check_crs(a: CRSLike, b: CRSLike, what: str = "operands") -> None:
    if not crs_equal(a, b):
        raise CRSMismatchError(
            f"CRS of {what} do not match: {_crs_name(a)} != {_crs_name(b)}. "
            "Reproject one of them first."
        )


def _crs_name(crs: CRSLike) -> str:
    crs = as_crs(crs)
    if crs is None:
        return "unknown CRS"
    return crs.to_string()


class GeometryCollection:
    """
    Ordered sequence of geometries, independent of any attributes.

    Parameters
    ----------
    geometries : iterable of Geometry
    crs : optional
        Anything accepted by ``pyproj.CRS.from_user_input``, or None when the
        CRS is unknown. Shared by all geometries.
    """

    def __init__(self, geometries: Iterable[Geometry] = (), crs: CRSLike = None):
        geometries = tuple(geometries)
        for i, geometry in enumerate(geometries):
            if not isinstance(geometry, Geometry):
                raise TypeError(
                    f"Element {i} should be a Geometry, got {type(geometry).__name__}"
                )
        self._geometries = geometries
        self._crs = as_crs(crs)

    @property
    def crs(self) -> Optional[pyproj.CRS]:
        return self._crs

    @property
    def geometries(self) -> tuple[Geometry, ...]:
        return self._geometries

    @property
    def kinds(self) -> tuple[GeometryKind, ...]:
        return tuple(geometry.kind for geometry in self._geometries)

    def __len__(self) -> int:
        return len(self._geometries)

    def __iter__(self) -> Iterator[Geometry]:
        return iter(self._geometries)

    def __getitem__(self, key: Any) -> Union[Geometry, "GeometryCollection"]:
        if isinstance(key, (int, np.integer)):
            return self._geometries[key]
        if isinstance(key, slice):
            return GeometryCollection(self._geometries[key], self._crs)
        return self.take(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeometryCollection):
            return NotImplemented
        return self._geometries == other._geometries and crs_equal(
            self._crs, other._crs
        )

    def __repr__(self) -> str:
        return f"GeometryCollection(n={len(self)}, crs={_crs_name(self._crs)})"

    def take(self, indexer: Any) -> "GeometryCollection":
        """
        Select geometries by a row-aligned boolean mask or by integer
        positions. Order follows the collection for masks and the indexer for
        positions.
        """
        indexer = np.asarray(indexer)
        if indexer.dtype == bool:
            if indexer.shape != (len(self),):
                raise ValueError(
                    f"Boolean mask of shape {indexer.shape} does not align with "
                    f"{len(self)} geometries"
                )
            indexer = np.flatnonzero(indexer)
        elif indexer.size > 0 and not np.issubdtype(indexer.dtype, np.integer):
            raise TypeError(f"Cannot index geometries with dtype {indexer.dtype}")
        selection = tuple(self._geometries[i] for i in indexer.ravel())
        return GeometryCollection(selection, self._crs)

    @property
    def bounds(self) -> Bounds:
        """Total bounds (xmin, ymin, xmax, ymax); NaN for an empty collection."""
        if len(self) == 0:
            return (np.nan, np.nan, np.nan, np.nan)
        bounds = np.array([geometry.bounds for geometry in self._geometries])
        xmin, ymin = bounds[:, :2].min(axis=0)
        xmax, ymax = bounds[:, 2:].max(axis=0)
        return float(xmin), float(ymin), float(xmax), float(ymax)

    def to_shapely(self) -> np.ndarray:
        geoms = np.empty(len(self), dtype=object)
        geoms[:] = [geometry.to_shapely() for geometry in self._geometries]
        return geoms

    def union(self):
        """Union of all geometries as a single shapely geometry."""
        return shapely.union_all(self.to_shapely())

    def intersects(self, other: Union[Geometry, "GeometryCollection"]) -> np.ndarray:
        """
        Row-aligned boolean array: whether each geometry intersects ``other``.
        A collection is unioned first, and must share this collection's CRS.
        """
        if isinstance(other, GeometryCollection):
            check_crs(self._crs, other.crs, "geometry collections")
            target = other.union()
        elif isinstance(other, Geometry):
            target = other.to_shapely()
        else:
            raise TypeError(
                f"Expected Geometry or GeometryCollection, got {type(other).__name__}"
            )
        return shapely.intersects(self.to_shapely(), target)

    def recast(self, kind: Union[GeometryKind, str]) -> "GeometryCollection":
        return GeometryCollection(
            [recast(geometry, kind) for geometry in self._geometries], self._crs
        )

    def to_geoseries(self) -> gpd.GeoSeries:
        return gpd.GeoSeries(list(self.to_shapely()), crs=self._crs)

    @classmethod
    def from_geoseries(cls, series: gpd.GeoSeries) -> "GeometryCollection":
        geometries = []
        for i, geom in enumerate(series):
            if geom is None or geom.is_empty:
                raise InvalidGeometry(f"Missing or empty geometry in row {i}")
            geometries.append(Geometry.from_shapely(geom))
        return cls(geometries, series.crs)

    @standard_log_decorator()
    def to_crs(self, crs: CRSLike) -> "GeometryCollection":
        """
        Reproject all geometries to ``crs``.

        Raises
        ------
        CRSMismatchError
            If the collection has no CRS to reproject from.
        """
        if self._crs is None:
            raise CRSMismatchError("Cannot reproject geometries with an unknown CRS")
        return GeometryCollection.from_geoseries(self.to_geoseries().to_crs(crs))
