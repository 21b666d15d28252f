"""
Raster grids: arrays of cell values positioned by an affine transform.

Values have shape ``(nrows, ncols)`` or ``(nrows, ncols, nbands)``. Cell
``(i, j)``, row ``i`` and column ``j``, has its upper left corner at
``transform @ (j, i)`` and its centre at ``transform @ (j + 0.5, i + 0.5)``.

Categorical grids, as produced by :func:`reclassify`, store integer category
codes; ``categories`` holds the ordered labels and
:data:`geofund.classify.NO_CATEGORY_CODE` marks cells without a category.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import affine
import numpy as np
import rasterio.crs
import rasterio.warp
import shapely
import xarray as xr

from geofund import util
from geofund.classify import (
    NO_CATEGORY_CODE,
    bin_codes,
    codes_to_labels,
    validate_breaks,
)
from geofund.collection import GeometryCollection, as_crs, check_crs, crs_equal
from geofund.errors import CRSMismatchError, EmptyCropError, SchemaError
from geofund.geometry import Geometry
from geofund.logging import logger
from geofund.logging.logging_decorators import standard_log_decorator
from geofund.schemata import DTypeSchema, NdimSchema
from geofund.typing import Bounds, BoolArray, CRSLike

_NUMERIC = DTypeSchema(np.integer) | DTypeSchema(np.floating)
_NDIM = NdimSchema(2) | NdimSchema(3)


@dataclass(frozen=True, eq=False)
class RasterGrid:
    """
    An immutable raster grid.

    Parameters
    ----------
    values : array_like
        Numeric cell values of shape (nrows, ncols) or (nrows, ncols, nbands).
        The array is copied and made read-only.
    transform : affine.Affine
        Maps (column, row) to world coordinates of the cell corner.
    crs : optional
        Anything accepted by ``pyproj.CRS.from_user_input``; None if unknown.
    nodata : float, optional
        Sentinel for cells without data. NaN cells are always treated as
        missing.
    categories : sequence, optional
        Ordered category labels, for grids of integer category codes.
    """

    values: np.ndarray
    transform: affine.Affine
    crs: CRSLike = None
    nodata: Optional[float] = None
    categories: Optional[tuple] = None

    def __post_init__(self):
        values = np.array(self.values)
        _NDIM.validate(values)
        _NUMERIC.validate(values)
        if 0 in values.shape:
            raise SchemaError(f"Raster dimensions must be positive, got {values.shape}")
        if not isinstance(self.transform, affine.Affine):
            raise TypeError(
                f"transform should be affine.Affine, got {type(self.transform).__name__}"
            )
        if self.transform.is_degenerate:
            raise ValueError(f"Degenerate transform: {self.transform}")

        nodata = self.nodata
        categories = self.categories
        if categories is not None:
            categories = tuple(categories)
            DTypeSchema(np.integer).validate(values)
            if nodata is None:
                nodata = NO_CATEGORY_CODE
            if nodata != NO_CATEGORY_CODE:
                raise SchemaError(
                    f"nodata of a categorical grid must be {NO_CATEGORY_CODE}, got {nodata}"
                )
            if ((values < NO_CATEGORY_CODE) | (values >= len(categories))).any():
                raise SchemaError(
                    f"Category codes must lie in [{NO_CATEGORY_CODE}, {len(categories)})"
                )

        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "crs", as_crs(self.crs))
        object.__setattr__(self, "nodata", nodata)
        object.__setattr__(self, "categories", categories)

    @property
    def nrows(self) -> int:
        return self.values.shape[0]

    @property
    def ncols(self) -> int:
        return self.values.shape[1]

    @property
    def nbands(self) -> int:
        return 1 if self.values.ndim == 2 else self.values.shape[2]

    @property
    def shape(self) -> tuple[int, ...]:
        return self.values.shape

    @property
    def is_categorical(self) -> bool:
        return self.categories is not None

    def cell_corner(self, i: int, j: int) -> tuple[float, float]:
        return self.transform @ (j, i)

    def cell_center(self, i: int, j: int) -> tuple[float, float]:
        return self.transform @ (j + 0.5, i + 0.5)

    def xy(self) -> tuple[np.ndarray, np.ndarray]:
        """World coordinates of all cell centres, each of shape (nrows, ncols)."""
        cols, rows = np.meshgrid(np.arange(self.ncols) + 0.5, np.arange(self.nrows) + 0.5)
        return self.transform @ (cols, rows)

    @property
    def bounds(self) -> Bounds:
        """(xmin, ymin, xmax, ymax) of the outer cell edges."""
        corners = [
            self.transform @ (0, 0),
            self.transform @ (self.ncols, 0),
            self.transform @ (0, self.nrows),
            self.transform @ (self.ncols, self.nrows),
        ]
        xs, ys = zip(*corners)
        return min(xs), min(ys), max(xs), max(ys)

    @property
    def extent(self) -> tuple[float, float, float, float]:
        """(xmin, xmax, ymin, ymax), the order matplotlib expects."""
        xmin, ymin, xmax, ymax = self.bounds
        return xmin, xmax, ymin, ymax

    def valid(self) -> BoolArray:
        """Cells holding data: not NaN and not equal to nodata."""
        valid = np.ones(self.shape, dtype=bool)
        if np.issubdtype(self.values.dtype, np.floating):
            valid &= ~np.isnan(self.values)
        if self.nodata is not None:
            valid &= self.values != self.nodata
        return valid

    def band(self, k: int) -> "RasterGrid":
        """Single band ``k`` (zero based) as a 2D grid."""
        if self.values.ndim == 2:
            if k != 0:
                raise IndexError(f"Grid has a single band, got band index {k}")
            return self
        return RasterGrid(
            self.values[:, :, k], self.transform, self.crs, self.nodata, self.categories
        )

    def as_labels(self) -> np.ndarray:
        """Category labels per cell, ``None`` where there is no category."""
        if not self.is_categorical:
            raise TypeError("Only categorical grids have labels; reclassify first")
        return codes_to_labels(self.values, self.categories)

    def equals(self, other: "RasterGrid") -> bool:
        return (
            self.shape == other.shape
            and self.transform == other.transform
            and crs_equal(self.crs, other.crs)
            and _nodata_equal(self.nodata, other.nodata)
            and self.categories == other.categories
            and np.array_equal(self.values, other.values, equal_nan=_has_nan(self))
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterGrid):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"RasterGrid(shape={self.shape}, dtype={self.values.dtype}, "
            f"bounds={self.bounds}, crs={self.crs})"
        )

    def to_dataarray(self) -> xr.DataArray:
        """
        Convert to an xarray DataArray with midpoint ``x`` and ``y``
        coordinates. Only grids without rotation can be converted.
        """
        coords = util.xycoords(self.transform, self.nrows, self.ncols)
        dims = ("y", "x") if self.values.ndim == 2 else ("y", "x", "band")
        if self.values.ndim == 3:
            coords["band"] = np.arange(1, self.nbands + 1)
        attrs = {}
        if self.crs is not None:
            attrs["crs"] = self.crs.to_string()
        if self.nodata is not None:
            attrs["nodata"] = self.nodata
        if self.categories is not None:
            attrs["categories"] = list(self.categories)
        return xr.DataArray(np.array(self.values), coords=coords, dims=dims, attrs=attrs)

    @classmethod
    def from_dataarray(
        cls, da: xr.DataArray, crs: CRSLike = None, nodata: Optional[float] = None
    ) -> "RasterGrid":
        """
        Create a grid from a DataArray with equidistant ``x`` and ``y``
        midpoint coordinates, and optionally a ``band`` dimension.

        ``crs``, ``nodata`` and ``categories`` are taken from ``da.attrs``
        unless given.
        """
        extradims = [dim for dim in da.dims if dim not in ("y", "x", "band")]
        if extradims or "x" not in da.dims or "y" not in da.dims:
            raise ValueError(f'Dimensions must be ("y", "x"[, "band"]), got {da.dims}')
        order = [dim for dim in ("y", "x", "band") if dim in da.dims]
        da = da.transpose(*order)

        # Make sure x is increasing, y is decreasing
        flip = slice(None, None, -1)
        if not da.indexes["x"].is_monotonic_increasing:
            da = da.isel(x=flip)
            if "dx" in da.coords:
                da = da.assign_coords(dx=abs(da["dx"]))
        if not da.indexes["y"].is_monotonic_decreasing:
            da = da.isel(y=flip)
            if "dy" in da.coords:
                da = da.assign_coords(dy=-abs(da["dy"]))

        if crs is None:
            crs = da.attrs.get("crs")
        if nodata is None:
            nodata = da.attrs.get("nodata")
        categories = da.attrs.get("categories")
        return cls(da.values, util.transform(da), crs, nodata, categories)


def _nodata_equal(a, b) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a == b or (np.isnan(a) and np.isnan(b))


def _has_nan(grid: RasterGrid) -> bool:
    return np.issubdtype(grid.values.dtype, np.floating)


def _mask_shape(grid: RasterGrid, mask: Union[Geometry, GeometryCollection]):
    match mask:
        case GeometryCollection():
            check_crs(grid.crs, mask.crs, "raster grid and mask")
            if len(mask) == 0:
                raise EmptyCropError("Cannot crop with an empty geometry collection")
            return mask.union()
        case Geometry():
            return mask.to_shapely()
        case _:
            raise TypeError(
                f"mask should be Geometry or GeometryCollection, got {type(mask).__name__}"
            )


def _nullify(grid: RasterGrid, values: np.ndarray, outside: BoolArray):
    if values.ndim == 3:
        outside = np.broadcast_to(outside[:, :, np.newaxis], values.shape)
    nodata = grid.nodata
    if nodata is None:
        if not np.issubdtype(values.dtype, np.floating):
            logger.info(
                "Integer grid without nodata value converted to float64 to mark "
                "cells outside the mask as NaN"
            )
            values = values.astype(np.float64)
        values[outside] = np.nan
    else:
        values[outside] = nodata
    return values


@standard_log_decorator()
def crop(
    grid: RasterGrid,
    mask: Union[Geometry, GeometryCollection],
    nullify: bool = True,
) -> RasterGrid:
    """
    Restrict a grid to the smallest window holding every cell whose centre
    falls inside (or on the boundary of) ``mask``.

    Parameters
    ----------
    grid : RasterGrid
    mask : Geometry or GeometryCollection
        Typically a polygon. A collection is unioned first and must share the
        grid's CRS.
    nullify : bool, optional
        Set cells in the window but outside the mask to nodata (NaN when the
        grid has no nodata value). Default True.

    Returns
    -------
    cropped : RasterGrid
        The transform is shifted to the window origin, so cell indices still
        map to the true world coordinates.

    Raises
    ------
    EmptyCropError
        If no cell centre falls inside the mask.
    """
    shape = _mask_shape(grid, mask)
    shapely.prepare(shape)
    xs, ys = grid.xy()
    inside = shapely.intersects_xy(shape, xs, ys)
    if not inside.any():
        raise EmptyCropError(
            f"Mask with bounds {tuple(shape.bounds)} does not cover any cell "
            f"centre of the grid with bounds {grid.bounds}"
        )

    rows = np.flatnonzero(inside.any(axis=1))
    cols = np.flatnonzero(inside.any(axis=0))
    row0, row1 = rows[0], rows[-1] + 1
    col0, col1 = cols[0], cols[-1] + 1
    logger.debug(f"Crop window: rows {row0}:{row1}, columns {col0}:{col1}")

    values = grid.values[row0:row1, col0:col1].copy()
    nodata = grid.nodata
    outside = ~inside[row0:row1, col0:col1]
    if nullify and outside.any():
        values = _nullify(grid, values, outside)

    transform = grid.transform @ affine.Affine.translation(col0, row0)
    return RasterGrid(values, transform, grid.crs, nodata, grid.categories)


@standard_log_decorator()
def reclassify(
    grid: RasterGrid,
    breaks: Sequence[float],
    labels: Sequence[Any],
    include_lowest: bool = False,
    right: bool = True,
) -> RasterGrid:
    """
    Bin every cell value into one of ``labels``.

    See :func:`geofund.classify.bin_codes` for the bin edge semantics. Cells
    equal to the grid's nodata value, NaN cells and values outside the
    breakpoints get no category.

    Returns
    -------
    reclassified : RasterGrid
        Categorical grid of the same shape and transform.

    Examples
    --------
    >>> grid = RasterGrid(np.array([[1, 2], [3, 4]]), affine.Affine.identity())
    >>> reclassify(grid, [0, 2, 4], ["low", "high"]).as_labels()
    array([['low', 'low'],
           ['high', 'high']], dtype=object)
    """
    if grid.is_categorical:
        raise TypeError("Grid is categorical already")
    breaks = validate_breaks(breaks, labels)
    codes = bin_codes(grid.values, breaks, include_lowest, right, nodata=grid.nodata)
    return RasterGrid(
        codes.astype(np.int32),
        grid.transform,
        grid.crs,
        NO_CATEGORY_CODE,
        tuple(labels),
    )


@standard_log_decorator()
def reproject(
    grid: RasterGrid, crs: CRSLike, resampling: str = "nearest"
) -> RasterGrid:
    """
    Warp a grid to another CRS with ``rasterio.warp``.

    Parameters
    ----------
    grid : RasterGrid
        Must have a known CRS.
    crs : Any
        Target CRS.
    resampling : str
        Name of a ``rasterio.enums.Resampling`` method. Categorical grids
        only support "nearest".
    """
    if grid.crs is None:
        raise CRSMismatchError("Cannot reproject a grid with an unknown CRS")
    if grid.is_categorical and resampling != "nearest":
        raise ValueError(
            f'Categorical grids can only be resampled with "nearest", got "{resampling}"'
        )
    try:
        method = rasterio.warp.Resampling[resampling]
    except KeyError:
        raise ValueError(
            f'Unknown resampling method "{resampling}", available methods: '
            f'{", ".join(m.name for m in rasterio.warp.Resampling)}'
        )

    src_crs = rasterio.crs.CRS.from_wkt(grid.crs.to_wkt())
    dst_crs = rasterio.crs.CRS.from_wkt(as_crs(crs).to_wkt())
    dst_transform, width, height = rasterio.warp.calculate_default_transform(
        src_crs, dst_crs, grid.ncols, grid.nrows, *grid.bounds
    )

    values = grid.values
    nodata = grid.nodata
    if nodata is None:
        if not np.issubdtype(values.dtype, np.floating):
            values = values.astype(np.float64)
        nodata = np.nan

    source = values if values.ndim == 2 else np.moveaxis(values, -1, 0)
    destination = np.full((*source.shape[:-2], height, width), nodata, dtype=source.dtype)
    rasterio.warp.reproject(
        source=np.array(source, order="C"),
        destination=destination,
        src_transform=grid.transform,
        src_crs=src_crs,
        src_nodata=nodata,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=nodata,
        resampling=method,
    )
    if destination.ndim == 3:
        destination = np.moveaxis(destination, 0, -1)
    return RasterGrid(destination, dst_transform, crs, grid.nodata, grid.categories)
