from unittest.mock import patch

import affine
import numpy as np
import pytest
import requests

from geofund.data import sample_data
from geofund.errors import FetchError
from geofund.formats import write_raster_file, write_vector_file
from geofund.raster import RasterGrid
from geofund.table import FeatureTable


def test_registry_urls():
    registry = sample_data.create_pooch_registry()
    assert registry.get_url("ne_110m_admin_0_countries.zip") == (
        "https://naciscdn.org/naturalearth/110m/cultural/ne_110m_admin_0_countries.zip"
    )
    assert registry.get_url("ne_50m_coastline.zip") == (
        "https://naciscdn.org/naturalearth/50m/physical/ne_50m_coastline.zip"
    )
    assert registry.get_url("wc2.1_30s_elev.zip") == (
        "https://geodata.ucdavis.edu/climate/worldclim/2_1/base/wc2.1_30s_elev.zip"
    )
    assert len(registry.registry) == 3 + 3 + 4


def test_data_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("GEOFUND_DATA_DIR", str(tmp_path))
    registry = sample_data.create_pooch_registry()
    assert registry.path == tmp_path


@pytest.mark.parametrize(
    ("name", "resolution", "match"),
    [
        ("rivers", "110m", "Unknown dataset"),
        ("countries", "30s", "not available at resolution"),
        ("elevation", "110m", "not available at resolution"),
    ],
)
def test_unknown_dataset(name, resolution, match):
    with pytest.raises(FetchError, match=match):
        sample_data.fetch_reference_dataset(name, resolution)


def test_fetch_countries(regions, tmp_path):
    shp = tmp_path / "ne_110m_admin_0_countries.shp"
    write_vector_file(shp, regions)
    with patch("geofund.data.sample_data.REGISTRY") as registry:
        registry.path = tmp_path
        registry.fetch.return_value = [
            str(tmp_path / "ne_110m_admin_0_countries.prj"),
            str(shp),
        ]
        table = sample_data.fetch_reference_dataset("countries", "110m")

    registry.fetch.assert_called_once()
    assert registry.fetch.call_args.args[0] == "ne_110m_admin_0_countries.zip"
    assert isinstance(table, FeatureTable)
    assert len(table) == 3


def test_fetch_elevation(tmp_path):
    grid = RasterGrid(
        np.arange(6, dtype=np.int16).reshape(2, 3),
        affine.Affine(1.0, 0.0, -180.0, 0.0, -1.0, 90.0),
        crs="EPSG:4326",
        nodata=-32768,
    )
    tif = tmp_path / "wc2.1_10m_elev.tif"
    write_raster_file(tif, grid)
    with patch("geofund.data.sample_data.REGISTRY") as registry:
        registry.path = tmp_path
        registry.fetch.return_value = [str(tif)]
        elevation = sample_data.fetch_reference_dataset("elevation", "10m")

    assert isinstance(elevation, RasterGrid)
    assert elevation == grid


def test_fetch_network_failure(tmp_path):
    with patch("geofund.data.sample_data.REGISTRY") as registry:
        registry.path = tmp_path
        registry.fetch.side_effect = requests.exceptions.ConnectionError("offline")
        with pytest.raises(FetchError, match="offline") as excinfo:
            sample_data.fetch_reference_dataset("coastline", "10m")
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)


def test_fetch_member_missing(tmp_path):
    with patch("geofund.data.sample_data.REGISTRY") as registry:
        registry.path = tmp_path
        registry.fetch.return_value = [str(tmp_path / "readme.txt")]
        with pytest.raises(FetchError, match="does not contain"):
            sample_data.fetch_reference_dataset("coastline", "10m")
