import affine
import numpy as np
import pytest

from geofund.errors import UnreadableFile
from geofund.formats import read_raster_file, write_raster_file
from geofund.raster import RasterGrid, reclassify


def test_saveopen(square_grid, tmp_path):
    path = tmp_path / "withcrs.tif"
    write_raster_file(path, square_grid)
    back = read_raster_file(path)

    assert back.crs.to_epsg() == 28992
    assert back.transform == square_grid.transform
    assert back.nodata == square_grid.nodata
    assert back.values.dtype == np.float64
    np.testing.assert_array_equal(back.values, square_grid.values)
    assert back == square_grid


def test_saveopen_no_crs(tmp_path):
    grid = RasterGrid(
        np.ones((3, 4), dtype=np.float32),
        affine.Affine(1.0, 0.0, 0.0, 0.0, -1.0, 3.0),
    )
    write_raster_file(tmp_path / "no_crs.tif", grid)
    back = read_raster_file(tmp_path / "no_crs.tif")
    assert back.crs is None
    assert back.values.dtype == np.float32
    assert back.nodata is None


def test_saveopen_multiband(multiband_grid, tmp_path):
    write_raster_file(tmp_path / "bands.tif", multiband_grid)
    back = read_raster_file(tmp_path / "bands.tif")
    assert back.shape == (3, 4, 3)
    np.testing.assert_array_equal(back.band(2).values, 3.0)


def test_saveopen_categorical(small_grid, tmp_path):
    classes = reclassify(small_grid, [0, 2, 4], ["low", "high"])
    write_raster_file(tmp_path / "classes.tif", classes)
    back = read_raster_file(tmp_path / "classes.tif")
    assert back.categories == ("low", "high")
    assert back.as_labels().tolist() == [["low", "low"], ["high", "high"]]


def test_unknown_extension(square_grid, tmp_path):
    with pytest.raises(ValueError, match="Unknown extension"):
        write_raster_file(tmp_path / "grid.abc", square_grid)


def test_explicit_driver(square_grid, tmp_path):
    write_raster_file(tmp_path / "grid.abc", square_grid, driver="GTiff")
    assert read_raster_file(tmp_path / "grid.abc").shape == (4, 4)


def test_read_missing_file(tmp_path):
    with pytest.raises(UnreadableFile, match="Could not find"):
        read_raster_file(tmp_path / "missing.tif")


def test_read_corrupt_file(tmp_path):
    path = tmp_path / "corrupt.tif"
    path.write_text("this is not a raster")
    with pytest.raises(UnreadableFile, match="Could not read"):
        read_raster_file(path)
