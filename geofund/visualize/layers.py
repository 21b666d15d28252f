"""
Drawable layers and their styles.

A layer is either a :class:`VectorLayer` (a feature table) or a
:class:`RasterLayer` (a raster grid). Resolving a layer turns its data and
style into concrete RGBA colors; this is where missing color table entries
are detected, before anything is drawn.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

import geopandas as gpd
import matplotlib.colors
import numpy as np
import pandas as pd

from geofund.classify import NO_CATEGORY_CODE
from geofund.errors import SchemaError
from geofund.geometry import GeometryKind
from geofund.raster import RasterGrid
from geofund.table import FeatureTable
from geofund.visualize.common import (
    TRANSPARENT,
    _cmapnorm_from_colorslevels,
    _default_levels,
    check_mapped,
    rgba_table,
)


@dataclass(frozen=True)
class Style:
    """
    How to draw a layer.

    Parameters
    ----------
    fill_by : str, optional
        Vector layers: attribute column whose values select the fill color
        from ``color_table``. Without it, every feature gets ``facecolor``.
    color_table : mapping, optional
        Category -> color. Required with ``fill_by`` and for categorical
        rasters. Any value drawn without an entry raises UnmappedCategory.
    facecolor, edgecolor : color, optional
        Plain fill and outline colors of vector features.
    linewidth : float
    markersize : float
        Size of point features.
    alpha : float
        Opacity of the fill.
    colors : colormap name, list of colors or Colormap
        Continuous rasters: the color scale, see ``levels``.
    levels : sequence of floats, optional
        Continuous rasters: boundaries between the colors. When omitted, ten
        equidistant levels spanning the data are used.
    label : str, optional
        Name of the layer in the legend.
    """

    fill_by: Optional[str] = None
    color_table: Optional[Mapping[Any, Any]] = None
    facecolor: Any = "lightgrey"
    edgecolor: Any = "black"
    linewidth: float = 0.5
    markersize: float = 10.0
    alpha: float = 1.0
    colors: Any = "viridis"
    levels: Optional[Sequence[float]] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class VectorLayer:
    table: FeatureTable
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class RasterLayer:
    grid: RasterGrid
    style: Style = field(default_factory=Style)


Layer = Union[VectorLayer, RasterLayer]


def as_layer(data: Any, style: Optional[Style] = None) -> Layer:
    """Wrap a feature table or raster grid in the matching layer."""
    match data:
        case VectorLayer() | RasterLayer():
            if style is not None:
                raise ValueError("A layer carries its own style already")
            return data
        case FeatureTable():
            return VectorLayer(data, style or Style())
        case RasterGrid():
            return RasterLayer(data, style or Style())
        case _:
            raise TypeError(
                "Can only draw a FeatureTable or RasterGrid, got "
                f"{type(data).__name__}"
            )


def layer_crs(layer: Layer):
    match layer:
        case VectorLayer(table=table):
            return table.crs
        case RasterLayer(grid=grid):
            return grid.crs


@dataclass(frozen=True)
class ResolvedVector:
    """Feature geometries per family, with one RGBA color per feature."""

    polygons: gpd.GeoDataFrame
    lines: gpd.GeoDataFrame
    points: gpd.GeoDataFrame
    style: Style
    bounds: tuple
    legend: tuple


@dataclass(frozen=True)
class ResolvedRaster:
    rgba: np.ndarray
    extent: tuple
    origin: str
    style: Style
    bounds: tuple
    legend: tuple


ResolvedLayer = Union[ResolvedVector, ResolvedRaster]

_FAMILIES = {
    GeometryKind.POLYGON: "polygons",
    GeometryKind.MULTIPOLYGON: "polygons",
    GeometryKind.LINESTRING: "lines",
    GeometryKind.MULTILINESTRING: "lines",
    GeometryKind.POINT: "points",
    GeometryKind.MULTIPOINT: "points",
}


def _require_color_table(style: Style, what: str) -> Mapping[Any, Any]:
    if style.color_table is None:
        raise ValueError(f"{what} requires a color_table in its style")
    return style.color_table


def _feature_colors(layer: VectorLayer) -> tuple[np.ndarray, tuple]:
    table = layer.table
    style = layer.style
    n = len(table)
    if style.fill_by is None:
        color = matplotlib.colors.to_rgba(style.facecolor, style.alpha)
        return np.tile(color, (n, 1)), ()

    if style.fill_by not in table.columns:
        raise SchemaError(
            f"Cannot fill by column {style.fill_by!r}, available: {table.columns}"
        )
    colors = rgba_table(
        _require_color_table(style, "Filling by attribute"), style.alpha
    )
    values = list(table.column(style.fill_by))
    present = [value for value in values if not pd.isna(value)]
    check_mapped(present, colors, f"column {style.fill_by!r}")

    rgba = np.array(
        [TRANSPARENT if pd.isna(value) else colors[value] for value in values]
    ).reshape(n, 4)
    present = set(present)
    legend = tuple((str(key), colors[key]) for key in colors if key in present)
    return rgba, legend


def resolve_vector(layer: VectorLayer) -> ResolvedVector:
    rgba, legend = _feature_colors(layer)
    gdf = layer.table.to_geodataframe()
    gdf["_color"] = [tuple(color) for color in rgba]
    families = np.array([_FAMILIES[kind] for kind in layer.table.extract_geometry().kinds])
    if len(families) == 0:
        families = np.array([], dtype=str)
    return ResolvedVector(
        polygons=gdf[families == "polygons"],
        lines=gdf[families == "lines"],
        points=gdf[families == "points"],
        style=layer.style,
        bounds=layer.table.bounds,
        legend=legend,
    )


def _categorical_rgba(grid: RasterGrid, style: Style) -> tuple[np.ndarray, tuple]:
    colors = rgba_table(_require_color_table(style, "A categorical raster"), style.alpha)
    codes = grid.values
    used = [grid.categories[code] for code in np.unique(codes[codes != NO_CATEGORY_CODE])]
    check_mapped(used, colors, "raster category")

    # NO_CATEGORY_CODE (-1) picks the last, transparent, entry.
    lookup = np.array(
        [colors.get(label, TRANSPARENT) for label in grid.categories] + [TRANSPARENT]
    ).reshape(-1, 4)
    legend = tuple((str(label), colors[label]) for label in grid.categories if label in used)
    return lookup[codes], legend


def _class_rgba(grid: RasterGrid, style: Style) -> tuple[np.ndarray, tuple]:
    # Numeric grid whose cell values are classes, e.g. land use codes.
    colors = rgba_table(style.color_table, style.alpha)
    valid = grid.valid()
    used = [value.item() for value in np.unique(grid.values[valid])]
    check_mapped(used, colors, "raster cell")

    rgba = np.zeros((*grid.shape, 4))
    for value in used:
        rgba[valid & (grid.values == value)] = colors[value]
    legend = tuple((str(key), colors[key]) for key in colors if key in set(used))
    return rgba, legend


def _continuous_rgba(grid: RasterGrid, style: Style) -> np.ndarray:
    valid = grid.valid()
    if not valid.any():
        return np.zeros((*grid.shape, 4))
    levels = style.levels
    if levels is None:
        levels = _default_levels(grid.values[valid])
    cmap, norm = _cmapnorm_from_colorslevels(style.colors, levels)
    masked = np.ma.masked_array(grid.values, mask=~valid)
    rgba = cmap(norm(masked))
    rgba[..., 3] *= style.alpha
    rgba[~valid] = TRANSPARENT
    return rgba


def resolve_raster(layer: RasterLayer) -> ResolvedRaster:
    grid = layer.grid
    style = layer.style
    if grid.nbands != 1:
        raise ValueError(
            f"Can only draw a single band, grid has {grid.nbands}; select one with band()"
        )
    grid = grid.band(0)
    if not grid.transform.is_rectilinear:
        raise NotImplementedError(f"Cannot draw a rotated grid: {grid.transform}")

    if grid.is_categorical:
        rgba, legend = _categorical_rgba(grid, style)
    elif style.color_table is not None:
        rgba, legend = _class_rgba(grid, style)
    else:
        rgba, legend = _continuous_rgba(grid, style), ()

    # imshow places row 0 at the top for origin "upper"; flip columns of
    # grids running from east to west.
    if grid.transform.a < 0:
        rgba = rgba[:, ::-1]
    origin = "upper" if grid.transform.e < 0 else "lower"
    return ResolvedRaster(
        rgba=rgba,
        extent=grid.extent,
        origin=origin,
        style=style,
        bounds=grid.bounds,
        legend=legend,
    )


def resolve(layer: Layer) -> ResolvedLayer:
    match layer:
        case VectorLayer():
            return resolve_vector(layer)
        case RasterLayer():
            return resolve_raster(layer)
        case _:
            raise TypeError(f"Unknown layer type {type(layer).__name__}")
