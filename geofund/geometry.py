"""
Simple feature geometry primitives.

A :class:`Geometry` is a ``kind`` tag plus coordinates, nested the same way
as in GeoJSON:

    * Point: ``(x, y)``
    * LineString, MultiPoint: ``((x, y), (x, y), ...)``
    * Polygon: a sequence of rings, the first being the exterior boundary and
      the rest holes. Every ring is a closed LineString.
    * MultiLineString: a sequence of LineStrings.
    * MultiPolygon: a sequence of Polygons.

Geometries are validated on construction and immutable afterwards. They
expose ``__geo_interface__``, so shapely and geopandas accept them directly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Union

import numpy as np
import shapely.geometry

from geofund.errors import InvalidGeometry, UnsupportedCast
from geofund.logging import logger
from geofund.typing import Bounds, CoordinateLike, Position, PositionSequence


class GeometryKind(Enum):
    POINT = "Point"
    LINESTRING = "LineString"
    POLYGON = "Polygon"
    MULTIPOINT = "MultiPoint"
    MULTILINESTRING = "MultiLineString"
    MULTIPOLYGON = "MultiPolygon"

    @classmethod
    def parse(cls, kind: Union["GeometryKind", str]) -> "GeometryKind":
        """Accepts a GeometryKind, or its name in any case: "polygon", "LINESTRING"."""
        if isinstance(kind, cls):
            return kind
        lookup = {member.value.lower(): member for member in cls}
        try:
            return lookup[str(kind).lower()]
        except KeyError:
            raise ValueError(
                f'Unknown geometry kind "{kind}", available kinds: '
                f'{", ".join(member.value for member in cls)}'
            )

    @property
    def is_multi(self) -> bool:
        return self.value.startswith("Multi")


def _position(value: Any) -> Position:
    try:
        position = tuple(float(v) for v in value)
    except (TypeError, ValueError) as e:
        raise InvalidGeometry(
            f"A position must be a sequence of numbers, got {value!r}"
        ) from e
    if len(position) not in (2, 3):
        raise InvalidGeometry(
            f"A position must have 2 or 3 coordinates, got {len(position)}: {value!r}"
        )
    if not np.isfinite(position).all():
        raise InvalidGeometry(f"A position must be finite, got {position}")
    return position


def _positions(values: Any, minimum: int, what: str) -> PositionSequence:
    try:
        positions = tuple(_position(value) for value in values)
    except TypeError as e:
        raise InvalidGeometry(f"{what} must be a sequence of positions") from e
    if len(positions) < minimum:
        raise InvalidGeometry(
            f"{what} needs at least {minimum} positions, got {len(positions)}"
        )
    return positions


def _ring(values: Any) -> PositionSequence:
    ring = _positions(values, 4, "A polygon ring")
    if ring[0] != ring[-1]:
        raise InvalidGeometry(
            f"Polygon ring is not closed: first position {ring[0]} differs from"
            f" last position {ring[-1]}"
        )
    return ring


def _members(values: Any, build: Callable[[Any], Any], what: str) -> tuple:
    try:
        members = tuple(build(value) for value in values)
    except TypeError as e:
        raise InvalidGeometry(f"{what} must be a sequence of parts") from e
    if len(members) == 0:
        raise InvalidGeometry(f"{what} needs at least one part")
    return members


def _linestring(values: Any) -> PositionSequence:
    return _positions(values, 2, "A LineString")


def _polygon(values: Any) -> tuple[PositionSequence, ...]:
    return _members(values, _ring, "A Polygon")


def _build(kind: GeometryKind, coordinates: Any) -> tuple:
    match kind:
        case GeometryKind.POINT:
            return _position(coordinates)
        case GeometryKind.LINESTRING:
            return _linestring(coordinates)
        case GeometryKind.POLYGON:
            return _polygon(coordinates)
        case GeometryKind.MULTIPOINT:
            return _positions(coordinates, 1, "A MultiPoint")
        case GeometryKind.MULTILINESTRING:
            return _members(coordinates, _linestring, "A MultiLineString")
        case GeometryKind.MULTIPOLYGON:
            return _members(coordinates, _polygon, "A MultiPolygon")
        case _:
            raise InvalidGeometry(f"Unknown geometry kind: {kind}")


def _iter_positions(kind: GeometryKind, coordinates: tuple) -> Iterator[Position]:
    match kind:
        case GeometryKind.POINT:
            yield coordinates
        case GeometryKind.LINESTRING | GeometryKind.MULTIPOINT:
            yield from coordinates
        case GeometryKind.POLYGON | GeometryKind.MULTILINESTRING:
            for part in coordinates:
                yield from part
        case GeometryKind.MULTIPOLYGON:
            for polygon in coordinates:
                for ring in polygon:
                    yield from ring


@dataclass(frozen=True)
class Geometry:
    """
    A single validated simple feature geometry.

    Parameters
    ----------
    kind : GeometryKind or str
    coordinates : nested sequence of numbers
        Nested according to ``kind``, see the module docstring. Numpy arrays
        are accepted; they are stored as tuples of floats.

    Raises
    ------
    InvalidGeometry
        If a ring is not closed, a ring has fewer than 4 positions, a
        LineString fewer than 2, or positions differ in dimensionality.
    """

    kind: GeometryKind
    coordinates: tuple

    def __post_init__(self):
        kind = GeometryKind.parse(self.kind)
        coordinates = _build(kind, self.coordinates)
        ndims = {len(position) for position in _iter_positions(kind, coordinates)}
        if len(ndims) > 1:
            raise InvalidGeometry(
                f"Inconsistent coordinate dimensionality in {kind.value}: "
                f"found positions with {sorted(ndims)} coordinates"
            )
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "coordinates", coordinates)

    @property
    def __geo_interface__(self) -> dict:
        return {"type": self.kind.value, "coordinates": self.coordinates}

    @property
    def ndim(self) -> int:
        return len(next(_iter_positions(self.kind, self.coordinates)))

    def positions(self) -> np.ndarray:
        """All vertices, as an array of shape (n, ndim)."""
        return np.array(list(_iter_positions(self.kind, self.coordinates)))

    @property
    def bounds(self) -> Bounds:
        xy = self.positions()[:, :2]
        xmin, ymin = xy.min(axis=0)
        xmax, ymax = xy.max(axis=0)
        return float(xmin), float(ymin), float(xmax), float(ymax)

    def to_shapely(self):
        return shapely.geometry.shape(self.__geo_interface__)

    @classmethod
    def from_shapely(cls, geom) -> "Geometry":
        mapping = shapely.geometry.mapping(geom)
        if "coordinates" not in mapping:
            raise InvalidGeometry(
                f"Cannot convert a {mapping['type']} to a single geometry"
            )
        return cls(mapping["type"], mapping["coordinates"])


def construct(
    kind: Union[GeometryKind, str], coordinates: CoordinateLike
) -> Geometry:
    """
    Construct a geometry of ``kind`` from literal coordinates.

    Examples
    --------
    >>> square = construct("Polygon", [[(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]])
    """
    return Geometry(kind, coordinates)


def point(coordinates: CoordinateLike) -> Geometry:
    return Geometry(GeometryKind.POINT, coordinates)


def linestring(coordinates: CoordinateLike) -> Geometry:
    return Geometry(GeometryKind.LINESTRING, coordinates)


def polygon(rings: CoordinateLike) -> Geometry:
    return Geometry(GeometryKind.POLYGON, rings)


def multipoint(coordinates: CoordinateLike) -> Geometry:
    return Geometry(GeometryKind.MULTIPOINT, coordinates)


def multilinestring(coordinates: CoordinateLike) -> Geometry:
    return Geometry(GeometryKind.MULTILINESTRING, coordinates)


def multipolygon(coordinates: CoordinateLike) -> Geometry:
    return Geometry(GeometryKind.MULTIPOLYGON, coordinates)


def _wrap(coordinates: tuple) -> tuple:
    return (coordinates,)


def _identity(coordinates: tuple) -> tuple:
    return coordinates


def _unwrap(coordinates: tuple) -> tuple:
    if len(coordinates) != 1:
        raise UnsupportedCast(
            f"Only a multi-geometry with exactly one part can be cast to a single"
            f" geometry, got {len(coordinates)} parts"
        )
    return coordinates[0]


def _exterior(rings: tuple) -> tuple:
    nholes = len(rings) - 1
    if nholes > 0:
        logger.warning(
            f"Polygon has {nholes} hole(s) which are dropped when casting to "
            "LineString. Cast to MultiLineString to keep them."
        )
    return rings[0]


def _all_rings(polygons: tuple) -> tuple:
    return tuple(ring for rings in polygons for ring in rings)


_K = GeometryKind
_CASTS: dict[tuple[GeometryKind, GeometryKind], Callable[[tuple], tuple]] = {
    (_K.POLYGON, _K.LINESTRING): _exterior,
    (_K.LINESTRING, _K.POLYGON): _wrap,
    (_K.POLYGON, _K.MULTILINESTRING): _identity,
    (_K.MULTILINESTRING, _K.POLYGON): _identity,
    (_K.MULTIPOLYGON, _K.MULTILINESTRING): _all_rings,
    (_K.POLYGON, _K.MULTIPOLYGON): _wrap,
    (_K.MULTIPOLYGON, _K.POLYGON): _unwrap,
    (_K.POINT, _K.MULTIPOINT): _wrap,
    (_K.MULTIPOINT, _K.POINT): _unwrap,
    (_K.LINESTRING, _K.MULTIPOINT): _identity,
    (_K.MULTIPOINT, _K.LINESTRING): _identity,
    (_K.LINESTRING, _K.MULTILINESTRING): _wrap,
    (_K.MULTILINESTRING, _K.LINESTRING): _unwrap,
}


def recast(geometry: Geometry, kind: Union[GeometryKind, str]) -> Geometry:
    """
    Convert a geometry to a structurally compatible kind.

    Polygon -> LineString takes the exterior ring vertices as a path; the
    closing position is kept, the fill semantics are lost. Point <->
    MultiPoint, LineString <-> MultiLineString and Polygon <-> MultiPolygon
    wrap or unwrap a single part. Casting to the geometry's own kind returns
    it unchanged.

    Raises
    ------
    UnsupportedCast
        If the kinds are not structurally compatible, e.g. Point -> Polygon,
        or a multi-geometry with several parts is unwrapped.
    InvalidGeometry
        If the cast is allowed but the result is invalid, e.g. an open
        LineString cast to Polygon.
    """
    target = GeometryKind.parse(kind)
    if target == geometry.kind:
        return geometry
    try:
        cast = _CASTS[(geometry.kind, target)]
    except KeyError:
        raise UnsupportedCast(
            f"Cannot cast {geometry.kind.value} to {target.value}"
        )
    return Geometry(target, cast(geometry.coordinates))
