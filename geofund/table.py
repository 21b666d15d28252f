"""
Feature tables: attribute columns with a declared schema, paired row by row
with a geometry collection.
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

import geopandas as gpd
import numpy as np
import pandas as pd

from geofund.classify import NO_CATEGORY_CODE, bin_codes, validate_breaks
from geofund.collection import GeometryCollection
from geofund.errors import SchemaError
from geofund.geometry import Geometry, GeometryKind
from geofund.logging import logger
from geofund.logging.logging_decorators import init_log_decorator
from geofund.schemata import (
    ColumnsSchema,
    ColumnType,
    ColumnTypeSchema,
    LengthSchema,
)
from geofund.typing import Bounds, CRSLike

GEOMETRY_COLUMN = "geometry"

Predicate = Union[Callable[[pd.DataFrame], Any], Sequence[bool], np.ndarray, pd.Series]


def _as_schema(schema: Mapping[str, Union[ColumnType, str]]) -> dict[str, ColumnType]:
    declared = {}
    for name, column_type in schema.items():
        try:
            declared[name] = ColumnType(column_type)
        except ValueError:
            raise SchemaError(
                f"column {name!r} has unknown type {column_type!r}, expected one"
                f" of {[t.value for t in ColumnType]}"
            )
    return declared


class FeatureTable:
    """
    Attributes of spatial objects paired with their geometries, one geometry
    per row.

    Parameters
    ----------
    attributes : pandas.DataFrame, dict of columns, or None
        The non-spatial attributes. None creates a table without attribute
        columns. The index is discarded; rows are identified by position.
    geometry : GeometryCollection or iterable of Geometry
        One geometry per row.
    schema : dict of column name to ColumnType, optional
        The declared type of every attribute column. Inferred from the column
        dtypes when omitted.
    crs : optional
        CRS of ``geometry`` when it is not a GeometryCollection already.

    Raises
    ------
    SchemaError
        If the attribute columns do not match the schema, a column named
        "geometry" is given, or the number of rows differs from the number
        of geometries.

    Examples
    --------
    >>> table = FeatureTable(
    ...     {"name": ["a", "b"], "pop": [10.0, 20.0]},
    ...     [point((0.0, 0.0)), point((1.0, 1.0))],
    ...     schema={"name": "string", "pop": "numeric"},
    ... )
    """

    @init_log_decorator()
    def __init__(
        self,
        attributes: Union[pd.DataFrame, Mapping[str, Any], None],
        geometry: Union[GeometryCollection, Iterable[Geometry]],
        schema: Optional[Mapping[str, Union[ColumnType, str]]] = None,
        crs: CRSLike = None,
    ):
        if not isinstance(geometry, GeometryCollection):
            geometry = GeometryCollection(geometry, crs)
        elif crs is not None:
            raise ValueError("crs can only be given for an iterable of geometries")

        if attributes is None:
            frame = pd.DataFrame(index=pd.RangeIndex(len(geometry)))
        else:
            frame = pd.DataFrame(attributes).reset_index(drop=True)

        if GEOMETRY_COLUMN in frame.columns:
            raise SchemaError(
                f'"{GEOMETRY_COLUMN}" is reserved for the geometry column and '
                "cannot be an attribute"
            )
        LengthSchema("geometry").validate(frame, geometry=geometry)

        if schema is None:
            schema = {name: ColumnType.infer(frame[name]) for name in frame.columns}
        else:
            schema = _as_schema(schema)
        ColumnsSchema(schema.keys()).validate(frame)
        for name, column_type in schema.items():
            ColumnTypeSchema(column_type).validate(frame[name], name=name)

        self._attributes = frame
        self._geometry = geometry
        self._schema = schema

    def __repr__(self) -> str:
        return (
            f"FeatureTable(nrows={len(self)}, columns={list(self.columns)}, "
            f"geometry={self._geometry!r})"
        )

    def __len__(self) -> int:
        return len(self._geometry)

    @property
    def attributes(self) -> pd.DataFrame:
        return self._attributes.copy()

    @property
    def schema(self) -> dict[str, ColumnType]:
        return dict(self._schema)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._attributes.columns)

    @property
    def crs(self):
        return self._geometry.crs

    @property
    def bounds(self) -> Bounds:
        return self._geometry.bounds

    def column(self, name: str) -> pd.Series:
        if name not in self._schema:
            raise KeyError(f"column {name!r} not in table, available: {self.columns}")
        return self._attributes[name].copy()

    def _new(
        self, frame: pd.DataFrame, geometry: GeometryCollection, schema=None
    ) -> "FeatureTable":
        if schema is None:
            schema = self._schema
        return FeatureTable(frame, geometry, schema=schema)

    def filter(self, predicate: Predicate) -> "FeatureTable":
        """
        Keep only the rows matching ``predicate``, in their original order.

        Parameters
        ----------
        predicate : callable or boolean array
            Either a row-aligned boolean array, or a callable receiving a copy
            of the attribute DataFrame and returning one.

        Examples
        --------
        >>> large = countries.filter(lambda df: df["pop_est"] > 1e8)
        """
        if callable(predicate):
            predicate = predicate(self.attributes)
        mask = np.asarray(predicate)
        if mask.dtype != bool:
            raise TypeError(f"Predicate should give booleans, got dtype {mask.dtype}")
        if mask.shape != (len(self),):
            raise ValueError(
                f"Predicate of shape {mask.shape} does not align with {len(self)} rows"
            )
        frame = self._attributes.loc[mask].reset_index(drop=True)
        return self._new(frame, self._geometry.take(mask))

    def derive_column(
        self,
        name: str,
        source: str,
        breaks: Sequence[float],
        labels: Sequence[Any],
        include_lowest: bool = False,
        right: bool = True,
        missing: Optional[float] = None,
    ) -> "FeatureTable":
        """
        Bin the numeric column ``source`` into an ordered categorical column
        ``name``.

        See :func:`geofund.classify.bin_codes` for the bin edge semantics.
        Values that fall outside the breakpoints, are missing, or equal
        ``missing`` get no category (a missing value in the new column); rows
        are never dropped.

        Raises
        ------
        BreakpointError
            If the breakpoints or labels are malformed.
        SchemaError
            If ``source`` is not a numeric column, or ``name`` is "geometry".
        """
        if name == GEOMETRY_COLUMN:
            raise SchemaError(f'cannot derive a column named "{GEOMETRY_COLUMN}"')
        if source not in self._schema:
            raise SchemaError(f"column {source!r} not in table, available: {self.columns}")
        column = self._attributes[source]
        ColumnTypeSchema(ColumnType.NUMERIC).validate(column, name=source)
        breaks = validate_breaks(breaks, labels)

        values = column.to_numpy(dtype=np.float64, na_value=np.nan)
        codes = bin_codes(values, breaks, include_lowest, right, nodata=missing)
        nmissing = int((codes == NO_CATEGORY_CODE).sum())
        if nmissing > 0:
            logger.info(f"{nmissing} value(s) of column {source!r} fall in no category")

        frame = self._attributes.copy()
        frame[name] = pd.Categorical.from_codes(
            codes, categories=list(labels), ordered=True
        )
        schema = dict(self._schema)
        schema[name] = ColumnType.CATEGORICAL
        return self._new(frame, self._geometry, schema)

    def extract_geometry(self) -> GeometryCollection:
        """The geometry collection, detached from the attributes."""
        return self._geometry

    def recast(self, kind: Union[GeometryKind, str]) -> "FeatureTable":
        return self._new(self._attributes, self._geometry.recast(kind))

    def to_crs(self, crs: CRSLike) -> "FeatureTable":
        return self._new(self._attributes, self._geometry.to_crs(crs))

    def equals(self, other: "FeatureTable") -> bool:
        return (
            self._schema == other._schema
            and self._attributes.equals(other._attributes)
            and self._geometry == other._geometry
        )

    def to_geodataframe(self) -> gpd.GeoDataFrame:
        return gpd.GeoDataFrame(
            self.attributes,
            geometry=list(self._geometry.to_shapely()),
            crs=self._geometry.crs,
        )

    @classmethod
    def from_geodataframe(
        cls,
        gdf: gpd.GeoDataFrame,
        schema: Optional[Mapping[str, Union[ColumnType, str]]] = None,
    ) -> "FeatureTable":
        attributes = pd.DataFrame(gdf.drop(columns=gdf.geometry.name))
        geometry = GeometryCollection.from_geoseries(gdf.geometry)
        return cls(attributes, geometry, schema=schema)
