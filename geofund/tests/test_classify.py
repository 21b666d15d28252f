import numpy as np
import pytest

from geofund.classify import (
    NO_CATEGORY,
    NO_CATEGORY_CODE,
    bin_codes,
    codes_to_labels,
    validate_breaks,
)
from geofund.errors import BreakpointError


@pytest.mark.parametrize(
    ("breaks", "labels", "match"),
    [
        ([0.0], [], "At least two breakpoints"),
        ([0.0, 1.0, 1.0], ["a", "b"], "not strictly increasing"),
        ([2.0, 1.0], ["a"], "not strictly increasing"),
        ([0.0, np.nan], ["a"], "NaN"),
        ([0.0, 1.0, 2.0], ["a"], "Incorrect number of labels"),
        ([0.0, 1.0, 2.0], ["a", "a"], "unique"),
    ],
)
def test_validate_breaks_errors(breaks, labels, match):
    with pytest.raises(BreakpointError, match=match):
        validate_breaks(breaks, labels)


def test_validate_breaks():
    breaks = validate_breaks([0, 2, 4], ["low", "high"])
    assert breaks.dtype == np.float64
    np.testing.assert_array_equal(breaks, [0.0, 2.0, 4.0])


def test_right_closed():
    codes = bin_codes([0.0, 1.0, 2.0, 3.0, 4.0, 5.0], [0, 2, 4])
    np.testing.assert_array_equal(codes, [-1, 0, 0, 1, 1, -1])


def test_right_closed_include_lowest():
    codes = bin_codes([0.0, 2.0, 4.0], [0, 2, 4], include_lowest=True)
    np.testing.assert_array_equal(codes, [0, 0, 1])


def test_left_closed():
    codes = bin_codes([0.0, 1.0, 2.0, 3.0, 4.0], [0, 2, 4], right=False)
    np.testing.assert_array_equal(codes, [0, 0, 1, 1, -1])


def test_left_closed_include_lowest():
    codes = bin_codes([0.0, 4.0], [0, 2, 4], include_lowest=True, right=False)
    np.testing.assert_array_equal(codes, [0, 1])


def test_nan_and_nodata():
    codes = bin_codes([np.nan, -9999.0, 1.0], [-10000, 0, 2], nodata=-9999.0)
    np.testing.assert_array_equal(codes, [NO_CATEGORY_CODE, NO_CATEGORY_CODE, 1])


def test_bin_codes_keeps_shape():
    values = np.array([[1, 2], [3, 4]])
    codes = bin_codes(values, [0, 2, 4])
    assert codes.shape == (2, 2)
    np.testing.assert_array_equal(codes, [[0, 0], [1, 1]])


def test_codes_to_labels():
    labels = codes_to_labels([0, 1, NO_CATEGORY_CODE], ["low", "high"])
    assert list(labels) == ["low", "high", NO_CATEGORY]


def test_no_values_dropped():
    rng = np.random.default_rng(42)
    values = rng.uniform(-5.0, 15.0, size=1000)
    values[::7] = np.nan
    breaks = [0.0, 2.5, 5.0, 10.0]
    labels = ["a", "b", "c"]
    for include_lowest in (True, False):
        for right in (True, False):
            codes = bin_codes(values, breaks, include_lowest, right)
            assert codes.shape == values.shape
            assert set(np.unique(codes)) <= {NO_CATEGORY_CODE, 0, 1, 2}
            assert set(codes_to_labels(codes, labels)) <= {"a", "b", "c", NO_CATEGORY}
