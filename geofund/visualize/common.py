from typing import Any, Iterable, Mapping, Optional

import matplotlib
import matplotlib.colors
import numpy as np

from geofund.errors import UnmappedCategory

TRANSPARENT = (0.0, 0.0, 0.0, 0.0)


def _cmapnorm_from_colorslevels(colors, levels):
    """
    Create ListedColormap and BoundaryNorm from colors (either a list of colors
    or a named colormap) and a list of levels. Number of levels must be at least
    two, and number of colors therefore least three.

    In the case of a list of colors, the resulting colorbar looks like:
    < color 0 | color 1 | color 2 ... n-1 | color n >
              ^         ^                 ^
           level 0   level 1           level n-1

    Parameters
    ----------
    colors : list of str, list of RGB/RGBA tuples, colormap name (str), or matplotlib.colors.Colormap
        If list, it should be a Matplotlib acceptable list of colors. Length N.
        Accepts both tuples of (R, G, B) and hexidecimal (e.g. `#7ec0ee`).
        If str, use an existing Matplotlib colormap. This function will
        automatically add distinctive colors for pixels lower or higher than
        the given min respectively max level.
        If Colormap, a copy is used as is, so add under- and over-colors
        yourself.
    levels : listlike of floats or integers
        Boundaries between the legend colors/classes. Length: N - 1.

    Returns
    -------
    cmap : matplotlib.colors.ListedColormap
    norm : matplotlib.colors.BoundaryNorm
    """
    # check number of levels
    if len(levels) < 2:
        raise ValueError(f"Number of levels {levels} should exceed 1.")

    # check monotonic increasing levels
    if not (np.diff(levels) > 0).all():
        raise ValueError(f"Levels {levels} are not monotonic increasing.")

    if isinstance(colors, matplotlib.colors.Colormap):
        # use given cmap
        cmap = colors.copy()
    else:
        nlevels = len(levels)
        if isinstance(colors, str):
            # Use given cmap, but fix the under and over colors
            # The colormap (probably) does not have a nice under and over color.
            cmap = matplotlib.colormaps[colors]
            colors = cmap(np.linspace(0, 1, nlevels + 1))

        # Validate number of colors vs number of levels
        ncolors = len(colors)
        if not nlevels == ncolors - 1:
            raise ValueError(
                f"Incorrect number of levels. Number of colors is {ncolors},"
                f" expected {ncolors - 1} levels, got {nlevels} levels instead."
            )
        # Create cmap from given list of colors
        # Under and over colors for values outside levels[0] and levels[-1]
        cmap = matplotlib.colors.ListedColormap(colors[1:-1]).with_extremes(
            under=colors[0], over=colors[-1]
        )
    cmap = cmap.with_extremes(bad=TRANSPARENT)
    norm = matplotlib.colors.BoundaryNorm(levels, cmap.N)
    return cmap, norm


def _default_levels(values: np.ndarray, nlevels: int = 10) -> np.ndarray:
    """Equidistant levels spanning the finite values."""
    vmin = float(values.min())
    vmax = float(values.max())
    if vmin == vmax:
        return np.array([vmin - 0.5, vmax + 0.5])
    return np.linspace(vmin, vmax, nlevels)


def rgba_table(
    color_table: Mapping[Any, Any], alpha: Optional[float] = None
) -> dict[Any, tuple]:
    """Convert every color of a category -> color table to an RGBA tuple."""
    return {
        key: matplotlib.colors.to_rgba(color, alpha)
        for key, color in color_table.items()
    }


def check_mapped(values: Iterable[Any], table: Mapping[Any, Any], what: str) -> None:
    """
    Raise UnmappedCategory listing every value without a color entry.
    """
    unmapped = sorted({value for value in values if value not in table}, key=str)
    if unmapped:
        raise UnmappedCategory(
            f"No color for {what} value(s) {unmapped}; color table has entries "
            f"for {sorted(table.keys(), key=str)}"
        )
