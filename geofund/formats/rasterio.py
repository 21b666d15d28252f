"""
Functions that make use of `rasterio
<https://rasterio.readthedocs.io/en/stable/>`_ for input and output of GDAL
supported raster formats.
"""

import json
import pathlib
from typing import Optional, Union

import numpy as np
import rasterio
import rasterio.errors

from geofund.errors import UnreadableFile
from geofund.logging.logging_decorators import standard_log_decorator
from geofund.raster import RasterGrid

# tiff and jpeg keys have been added manually.
EXTENSION_GDAL_DRIVER_CODE_MAP = {
    "asc": "AAIGrid",
    "bil": "EHdr",
    "bmp": "BMP",
    "gif": "GIF",
    "gpkg": "GPKG",
    "grd": "NWT_GRD",
    "img": "HFA",
    "jp2": "JP2OpenJPEG",
    "map": "PCRaster",
    "nc": "netCDF",
    "png": "PNG",
    "rst": "RST",
    "tif": "GTiff",
    "tiff": "GTiff",
    "vrt": "VRT",
    "xyz": "XYZ",
}

CATEGORIES_TAG = "GEOFUND_CATEGORIES"


def _as_crs_input(crs):
    if crs is None:
        return None
    # The EPSG code, when GDAL can identify one, over the stored WKT.
    epsg = crs.to_epsg()
    if epsg is not None:
        return epsg
    return crs.to_wkt()


def _get_driver(path: pathlib.Path) -> str:
    ext = path.suffix.lower()[1:]  # skip the period
    try:
        return EXTENSION_GDAL_DRIVER_CODE_MAP[ext]
    except KeyError:
        raise ValueError(
            f'Unknown extension "{ext}", available extensions: '
            f'{", ".join(EXTENSION_GDAL_DRIVER_CODE_MAP.keys())}'
        )


@standard_log_decorator()
def read_raster_file(path: Union[str, pathlib.Path]) -> RasterGrid:
    """
    Read a GDAL supported raster file.

    All bands are read; a multi-band file gives a grid of shape
    (nrows, ncols, nbands). The nodata value, CRS and transform are taken
    from the file. Category labels written by :func:`write_raster_file` are
    restored.

    Raises
    ------
    UnreadableFile
        If the file does not exist or GDAL cannot read it.
    """
    path = pathlib.Path(path)
    if not path.is_file():
        raise UnreadableFile(f"Could not find raster file {path}")
    try:
        with rasterio.open(path, "r") as dataset:
            values = dataset.read()
            transform = dataset.transform
            crs = dataset.crs
            nodata = dataset.nodata
            tags = dataset.tags()
    except rasterio.errors.RasterioError as e:
        raise UnreadableFile(f"Could not read raster file {path}: {e}") from e

    # rasterio reads (band, row, col)
    if values.shape[0] == 1:
        values = values[0]
    else:
        values = np.moveaxis(values, 0, -1)

    categories = None
    if CATEGORIES_TAG in tags:
        categories = tuple(json.loads(tags[CATEGORIES_TAG]))
    return RasterGrid(
        values,
        transform,
        crs=_as_crs_input(crs),
        nodata=nodata,
        categories=categories,
    )


@standard_log_decorator()
def write_raster_file(
    path: Union[str, pathlib.Path],
    grid: RasterGrid,
    driver: Optional[str] = None,
) -> None:
    """
    Write a grid to a GDAL supported raster file.

    Parameters
    ----------
    path : str or Path
    grid : RasterGrid
    driver : str, optional
        Which GDAL format driver to use. The complete list is at
        https://gdal.org/drivers/raster/index.html. By default tries to guess
        from the file extension.
    """
    path = pathlib.Path(path)
    if driver is None:
        driver = _get_driver(path)

    values = grid.values if grid.values.ndim == 3 else grid.values[:, :, np.newaxis]
    profile = {
        "driver": driver,
        "height": grid.nrows,
        "width": grid.ncols,
        "count": grid.nbands,
        "dtype": values.dtype,
        "transform": grid.transform,
        "nodata": grid.nodata,
    }
    if grid.crs is not None:
        profile["crs"] = grid.crs.to_wkt()

    with rasterio.Env():
        with rasterio.open(path, "w", **profile) as dataset:
            dataset.write(np.moveaxis(values, -1, 0))
            if grid.categories is not None:
                dataset.update_tags(**{CATEGORIES_TAG: json.dumps(list(grid.categories))})
