import affine
import numpy as np
import pytest
import xarray as xr

from geofund import util


def test_xycoords():
    transform = affine.Affine(1.0, 0.0, 0.0, 0.0, -1.0, 2.0)
    coords = util.xycoords(transform, 2, 3)
    np.testing.assert_allclose(coords["x"], [0.5, 1.5, 2.5])
    np.testing.assert_allclose(coords["y"], [1.5, 0.5])
    assert float(coords["dx"]) == 1.0
    assert float(coords["dy"]) == -1.0


def test_xycoords_rotated():
    transform = affine.Affine.rotation(30.0)
    with pytest.raises(ValueError, match="rotated"):
        util.xycoords(transform, 2, 2)


def test_transform():
    # implicit dx dy
    data = np.ones((2, 3))
    coords = {"x": [0.5, 1.5, 2.5], "y": [1.5, 0.5]}
    dims = ("y", "x")
    da = xr.DataArray(data, coords, dims)
    actual = util.transform(da)
    expected = affine.Affine(1.0, 0.0, 0.0, 0.0, -1.0, 2.0)
    assert actual == expected

    # explicit dx dy, equidistant
    coords = {
        "x": [0.5, 1.5, 2.5],
        "y": [1.5, 0.5],
        "dx": ("x", [1.0, 1.0, 1.0]),
        "dy": ("y", [-1.0, -1.0]),
    }
    da = xr.DataArray(data, coords, dims)
    actual = util.transform(da)
    assert actual == expected

    # explicit dx dy, non-equidistant
    coords = {
        "x": [0.5, 1.5, 3.5],
        "y": [1.5, 0.5],
        "dx": ("x", [1.0, 1.0, 2.0]),
        "dy": ("y", [-1.0, -1.0]),
    }
    da = xr.DataArray(data, coords, dims)
    with pytest.raises(ValueError):
        util.transform(da)


def test_spatial_reference():
    data = np.ones((2, 3))
    coords = {"x": [0.5, 1.5, 2.5], "y": [1.5, 0.5]}
    da = xr.DataArray(data, coords, ("y", "x"))
    assert util.spatial_reference(da) == (1.0, 0.0, 3.0, -1.0, 0.0, 2.0)


def test_coord_reference_single_cell():
    da = xr.DataArray([1.0], {"x": [0.5]}, ("x",))
    with pytest.raises(ValueError, match="cellsize must be provided"):
        util.coord_reference(da["x"])
