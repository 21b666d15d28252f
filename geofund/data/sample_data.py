"""
Functions to fetch public reference datasets.

Downloads are cached in ``pooch.os_cache("geofund")``; set the
``GEOFUND_DATA_DIR`` environment variable to use another directory.
"""

import pathlib
from dataclasses import dataclass
from typing import Union

import pooch
import requests
from filelock import FileLock
from pooch import Unzip

from geofund.errors import FetchError
from geofund.formats.rasterio import read_raster_file
from geofund.formats.vector import read_vector_file
from geofund.logging import logger
from geofund.logging.logging_decorators import standard_log_decorator
from geofund.raster import RasterGrid
from geofund.table import FeatureTable

NATURAL_EARTH_RESOLUTIONS = ("110m", "50m", "10m")
WORLDCLIM_RESOLUTIONS = ("10m", "5m", "2.5m", "30s")


@dataclass(frozen=True)
class ReferenceDataset:
    kind: str
    url: str
    member: str
    resolutions: tuple[str, ...]

    def archive(self, resolution: str) -> str:
        return self.url.format(resolution=resolution).rsplit("/", 1)[-1]


DATASETS = {
    "countries": ReferenceDataset(
        kind="vector",
        url="https://naciscdn.org/naturalearth/{resolution}/cultural/ne_{resolution}_admin_0_countries.zip",
        member="ne_{resolution}_admin_0_countries.shp",
        resolutions=NATURAL_EARTH_RESOLUTIONS,
    ),
    "coastline": ReferenceDataset(
        kind="vector",
        url="https://naciscdn.org/naturalearth/{resolution}/physical/ne_{resolution}_coastline.zip",
        member="ne_{resolution}_coastline.shp",
        resolutions=NATURAL_EARTH_RESOLUTIONS,
    ),
    "elevation": ReferenceDataset(
        kind="raster",
        url="https://geodata.ucdavis.edu/climate/worldclim/2_1/base/wc2.1_{resolution}_elev.zip",
        member="wc2.1_{resolution}_elev.tif",
        resolutions=WORLDCLIM_RESOLUTIONS,
    ),
}


def create_pooch_registry() -> pooch.core.Pooch:
    # The upstream archives are not versioned, so no hashes are checked.
    registry = {}
    urls = {}
    for dataset in DATASETS.values():
        for resolution in dataset.resolutions:
            archive = dataset.archive(resolution)
            registry[archive] = None
            urls[archive] = dataset.url.format(resolution=resolution)
    return pooch.create(
        path=pooch.os_cache("geofund"),
        base_url="",
        registry=registry,
        urls=urls,
        env="GEOFUND_DATA_DIR",
    )


REGISTRY = create_pooch_registry()


def _lookup(name: str, resolution: str) -> ReferenceDataset:
    try:
        dataset = DATASETS[name]
    except KeyError:
        raise FetchError(
            f'Unknown dataset "{name}", available datasets: {", ".join(DATASETS)}'
        )
    if resolution not in dataset.resolutions:
        raise FetchError(
            f'Dataset "{name}" is not available at resolution "{resolution}", '
            f'available resolutions: {", ".join(dataset.resolutions)}'
        )
    return dataset


@standard_log_decorator()
def fetch_reference_dataset(
    name: str, resolution: str
) -> Union[FeatureTable, RasterGrid]:
    """
    Download (or take from the cache) a named public dataset.

    Parameters
    ----------
    name : str
        "countries" and "coastline" (Natural Earth, vector), or "elevation"
        (WorldClim 2.1, raster).
    resolution : str
        "110m", "50m" or "10m" for Natural Earth; "10m", "5m", "2.5m" or
        "30s" for WorldClim.

    Returns
    -------
    FeatureTable for vector datasets, RasterGrid for raster datasets.

    Raises
    ------
    FetchError
        If the dataset or resolution is unknown, or the download fails.
    """
    dataset = _lookup(name, resolution)
    archive = dataset.archive(resolution)
    REGISTRY.path.mkdir(parents=True, exist_ok=True)
    lock = FileLock(REGISTRY.path / f"{archive}.lock")
    with lock:
        try:
            fnames = REGISTRY.fetch(archive, processor=Unzip())
        except (requests.exceptions.RequestException, OSError, ValueError) as e:
            raise FetchError(f'Could not fetch "{name}" at {resolution}: {e}') from e

    member = dataset.member.format(resolution=resolution)
    path = next((f for f in fnames if pathlib.Path(f).name == member), None)
    if path is None:
        raise FetchError(f"Archive {archive} does not contain {member}")
    logger.info(f'Reading "{name}" at {resolution} from {path}')

    if dataset.kind == "vector":
        return read_vector_file(path)
    return read_raster_file(path)
