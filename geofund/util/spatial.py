"""
Utility functions for dealing with the spatial location of rasters:
:func:`geofund.util.spatial.coord_reference`,
:func:`geofund.util.spatial.spatial_reference`,
:func:`geofund.util.spatial.transform` and
:func:`geofund.util.spatial.xycoords`. These convert between midpoint
``x``/``y`` coordinates, as used by xarray, and affine transforms, as used by
rasterio. They are used internally, but are not private since they may be
useful to users as well.
"""

import collections
from typing import Any, Dict, Tuple

import affine
import numpy as np
import xarray as xr


def xycoords(transform: affine.Affine, nrow: int, ncol: int) -> Dict[str, Any]:
    """
    Midpoint ``x`` and ``y`` coordinates and cell sizes ``dx`` and ``dy`` of
    a rectilinear grid.

    Parameters
    ----------
    transform : affine.Affine
        Without rotation terms.
    nrow : int
    ncol : int

    Returns
    -------
    coords : OrderedDict
        With keys "x", "y", "dx", "dy".
    """
    if not transform.is_rectilinear:
        raise ValueError(f"Cannot express a rotated grid in x and y: {transform}")
    dx = transform.a
    dy = transform.e
    xmin = transform.c
    ymax = transform.f
    coords: collections.OrderedDict[str, Any] = collections.OrderedDict()
    coords["y"] = ymax + (np.arange(nrow) + 0.5) * dy
    coords["x"] = xmin + (np.arange(ncol) + 0.5) * dx
    coords["dx"] = np.array(float(dx))
    coords["dy"] = np.array(float(dy))
    return coords


def coord_reference(da_coord) -> Tuple[float, float, float]:
    """
    Extracts dx, xmin, xmax for a coordinate DataArray, where x is any coordinate.

    Parameters
    ----------
    da_coord : xarray.DataArray of a coordinate

    Returns
    --------------
    tuple
        (dx, xmin, xmax) for a coordinate x
    """
    x = da_coord.values

    dx_string = f"d{da_coord.name}"
    if dx_string in da_coord.coords:
        dx = da_coord.coords[dx_string]
        if dx.size != 1:
            values = dx.values.astype(np.float64)
            if not np.allclose(values, values[0]):
                raise ValueError(
                    f"DataArray has to be equidistant along {da_coord.name}"
                )
            dx = values[0]
        dx = float(dx)
    elif x.size == 1:
        raise ValueError(
            f"DataArray has size 1 along {da_coord.name}, so cellsize must be provided"
            f" as a coordinate named d{da_coord.name}."
        )
    else:  # Equidistant
        dxs = np.diff(x.astype(np.float64))
        dx = dxs[0]
        atolx = abs(1.0e-4 * dx)
        if not np.allclose(dxs, dx, atolx):
            raise ValueError(
                f"DataArray has to be equidistant along {da_coord.name}, or cellsizes"
                f" must be provided as a coordinate named d{da_coord.name}."
            )
        dx = float(dx)

    # as xarray uses midpoint coordinates
    xmin = float(x.min()) - 0.5 * abs(dx)
    xmax = float(x.max()) + 0.5 * abs(dx)
    return dx, xmin, xmax


def spatial_reference(
    a: xr.DataArray,
) -> Tuple[float, float, float, float, float, float]:
    """
    Extracts spatial reference from DataArray.

    Parameters
    ----------
    a : xarray.DataArray

    Returns
    --------------
    tuple
        (dx, xmin, xmax, dy, ymin, ymax)
    """
    dx, xmin, xmax = coord_reference(a["x"])
    dy, ymin, ymax = coord_reference(a["y"])
    return dx, xmin, xmax, dy, ymin, ymax


def transform(a: xr.DataArray) -> affine.Affine:
    """
    Extract the spatial reference information from the DataArray coordinates,
    into an affine.Affine object.

    Parameters
    ----------
    a : xarray.DataArray

    Returns
    -------
    affine.Affine
    """
    dx, xmin, _, dy, _, ymax = spatial_reference(a)
    if dx < 0.0:
        raise ValueError("dx must be positive")
    if dy > 0.0:
        raise ValueError("dy must be negative")
    return affine.Affine(dx, 0.0, xmin, 0.0, dy, ymax)
