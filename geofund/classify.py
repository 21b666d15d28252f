"""
Binning of numeric values into an ordered set of categories.

This is the single implementation behind
:meth:`geofund.table.FeatureTable.derive_column` and
:func:`geofund.raster.reclassify`. Values are mapped to integer category
codes; a value that falls in no bin maps to :data:`NO_CATEGORY_CODE`, so the
output always has as many elements as the input.
"""

from typing import Any, Optional, Sequence

import numpy as np

from geofund.errors import BreakpointError
from geofund.typing import FloatArray, IntArray

NO_CATEGORY_CODE = -1
"""Code for values that fall in no bin, are NaN, or equal the nodata value."""

NO_CATEGORY = None
"""Label for :data:`NO_CATEGORY_CODE` when codes are converted back to labels."""


def validate_breaks(breaks: Sequence[float], labels: Sequence[Any]) -> FloatArray:
    """
    Check breakpoints and labels, returning the breakpoints as a float array.

    Raises
    ------
    BreakpointError
        If fewer than two breakpoints are given, breakpoints are not strictly
        increasing, the number of labels is not one less than the number of
        breakpoints, or labels are not unique.
    """
    breaks = np.asarray(breaks, dtype=np.float64)
    if breaks.ndim != 1 or breaks.size < 2:
        raise BreakpointError(
            f"At least two breakpoints are required, got {breaks.tolist()}"
        )
    if np.isnan(breaks).any():
        raise BreakpointError(f"Breakpoints may not contain NaN: {breaks.tolist()}")
    if not (np.diff(breaks) > 0).all():
        raise BreakpointError(
            f"Breakpoints {breaks.tolist()} are not strictly increasing"
        )
    labels = list(labels)
    nbins = breaks.size - 1
    if len(labels) != nbins:
        raise BreakpointError(
            f"Incorrect number of labels. Number of breakpoints is {breaks.size},"
            f" expected {nbins} labels, got {len(labels)} labels instead."
        )
    if len(set(labels)) != len(labels):
        raise BreakpointError(f"Labels must be unique, got {labels}")
    return breaks


def bin_codes(
    values: Any,
    breaks: Sequence[float],
    include_lowest: bool = False,
    right: bool = True,
    nodata: Optional[float] = None,
) -> IntArray:
    """
    Assign every value the index of the bin it falls into.

    With ``right=True`` the bins are ``(b[i], b[i+1]]`` and ``include_lowest``
    makes the first bin ``[b[0], b[1]]``. With ``right=False`` the bins are
    ``[b[i], b[i+1])`` and ``include_lowest`` makes the last bin
    ``[b[n-1], b[n]]``.

    Parameters
    ----------
    values : array_like of numbers
        Any shape; the output has the same shape.
    breaks : sequence of floats
        Strictly increasing, at least two. Not validated here, see
        :func:`validate_breaks`.
    include_lowest : bool
    right : bool
    nodata : float, optional
        Values equal to this map to ``NO_CATEGORY_CODE``. NaN always does.

    Returns
    -------
    codes : np.ndarray of int
        Values in ``[0, len(breaks) - 1)`` or ``NO_CATEGORY_CODE``.
    """
    values = np.asarray(values, dtype=np.float64)
    breaks = np.asarray(breaks, dtype=np.float64)
    nbins = breaks.size - 1

    if right:
        codes = np.searchsorted(breaks, values, side="left") - 1
        if include_lowest:
            codes[values == breaks[0]] = 0
    else:
        codes = np.searchsorted(breaks, values, side="right") - 1
        if include_lowest:
            codes[values == breaks[-1]] = nbins - 1

    invalid = (codes < 0) | (codes >= nbins) | np.isnan(values)
    if nodata is not None:
        invalid |= values == nodata
    codes[invalid] = NO_CATEGORY_CODE
    return codes.astype(np.int64)


def codes_to_labels(codes: Any, labels: Sequence[Any]) -> np.ndarray:
    """Map category codes back to labels, with ``NO_CATEGORY`` for missing."""
    codes = np.asarray(codes)
    lookup = np.empty(len(labels) + 1, dtype=object)
    lookup[:-1] = list(labels)
    lookup[-1] = NO_CATEGORY
    # NO_CATEGORY_CODE (-1) indexes the last element of the lookup.
    return lookup[codes]
