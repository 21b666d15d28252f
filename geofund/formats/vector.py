"""
Input and output of vector files (shapefile, GeoPackage, GeoJSON, ...)
through geopandas.
"""

import pathlib
from typing import Mapping, Optional, Union

import geopandas as gpd

from geofund.errors import InvalidGeometry, UnreadableFile
from geofund.logging.logging_decorators import standard_log_decorator
from geofund.schemata import ColumnType
from geofund.table import FeatureTable


@standard_log_decorator()
def read_vector_file(
    path: Union[str, pathlib.Path],
    layer: Optional[str] = None,
    schema: Optional[Mapping[str, Union[ColumnType, str]]] = None,
) -> FeatureTable:
    """
    Read a vector file into a feature table.

    Parameters
    ----------
    path : str or Path
    layer : str, optional
        Layer to read from multi-layer formats such as GeoPackage.
    schema : dict, optional
        Declared attribute column types; inferred when omitted.

    Raises
    ------
    UnreadableFile
        If the file does not exist, cannot be parsed, or contains missing or
        empty geometries.
    """
    path = pathlib.Path(path)
    if not path.exists():
        raise UnreadableFile(f"Could not find vector file {path}")
    kwargs = {} if layer is None else {"layer": layer}
    try:
        gdf = gpd.read_file(path, **kwargs)
    except Exception as e:
        # The error types depend on the I/O engine (pyogrio or fiona).
        raise UnreadableFile(f"Could not read vector file {path}: {e}") from e
    try:
        return FeatureTable.from_geodataframe(gdf, schema=schema)
    except InvalidGeometry as e:
        raise UnreadableFile(f"Invalid geometry in vector file {path}: {e}") from e


@standard_log_decorator()
def write_vector_file(
    path: Union[str, pathlib.Path],
    table: FeatureTable,
    driver: Optional[str] = None,
    layer: Optional[str] = None,
) -> None:
    """
    Write a feature table to a vector file. The driver is inferred by
    geopandas from the extension unless given. Categorical columns are
    written as text, and read back as string columns.
    """
    kwargs = {}
    if driver is not None:
        kwargs["driver"] = driver
    if layer is not None:
        kwargs["layer"] = layer
    gdf = table.to_geodataframe()
    # Write categories as their labels.
    for name, column_type in table.schema.items():
        if column_type == ColumnType.CATEGORICAL:
            gdf[name] = gdf[name].astype(object)
    gdf.to_file(pathlib.Path(path), **kwargs)
