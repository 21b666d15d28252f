import pathlib
from enum import Enum
from typing import Any, Iterable, Optional, Union

import matplotlib.patches
import matplotlib.pyplot as plt
import numpy as np

from geofund.collection import check_crs
from geofund.errors import RendererStateError
from geofund.logging import logger
from geofund.logging.logging_decorators import standard_log_decorator
from geofund.visualize.layers import (
    Layer,
    ResolvedLayer,
    ResolvedRaster,
    ResolvedVector,
    Style,
    as_layer,
    layer_crs,
    resolve,
)


class RendererState(Enum):
    EMPTY = "empty"
    COMPOSING = "composing"
    FINALIZED = "finalized"


class Renderer:
    """
    Composes layers into a map.

    Layers are drawn in the order they are added: later layers draw over
    earlier ones. A renderer moves from EMPTY to COMPOSING when the first
    layer is added, and to FINALIZED by :meth:`finalize`, which resolves all
    styles to colors. Only a finalized renderer can draw, and it accepts no
    more layers.

    Parameters
    ----------
    title : str, optional
    figsize : tuple of two floats, optional
        This is used in plt.subplots(figsize)

    Examples
    --------
    >>> renderer = Renderer(title="Elevation")
    >>> renderer.add_layer(elevation, Style(colors="terrain", levels=[0, 100, 500]))
    >>> renderer.add_layer(countries, Style(facecolor="none"))
    >>> fig = renderer.finalize().draw()
    """

    def __init__(self, title: Optional[str] = None, figsize=None):
        self.title = title
        self.figsize = figsize
        self._layers: list[Layer] = []
        self._resolved: tuple[ResolvedLayer, ...] = ()
        self._state = RendererState.EMPTY

    @property
    def state(self) -> RendererState:
        return self._state

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)

    def add_layer(self, data: Any, style: Optional[Style] = None) -> "Renderer":
        """
        Add a FeatureTable, RasterGrid or ready-made layer on top of the
        current layers.
        """
        if self._state == RendererState.FINALIZED:
            raise RendererStateError("Cannot add layers to a finalized renderer")
        layer = as_layer(data, style)
        if self._layers:
            check_crs(layer_crs(self._layers[0]), layer_crs(layer), "map layers")
        self._layers.append(layer)
        self._state = RendererState.COMPOSING
        return self

    @standard_log_decorator()
    def finalize(self) -> "Renderer":
        """
        Resolve the styles of all layers to colors.

        Raises
        ------
        UnmappedCategory
            If a layer contains a value without an entry in its color table.
            The renderer then stays in the COMPOSING state.
        RendererStateError
            If no layers have been added.
        """
        match self._state:
            case RendererState.FINALIZED:
                return self
            case RendererState.EMPTY:
                raise RendererStateError("Nothing to finalize: add a layer first")

        self._resolved = tuple(resolve(layer) for layer in self._layers)
        self._state = RendererState.FINALIZED
        logger.debug(f"Resolved {len(self._resolved)} layer(s)")
        return self

    def draw(self, ax=None, legend: bool = False):
        """
        Draw the finalized layers.

        Parameters
        ----------
        ax : matplotlib.axes.Axes, optional
            Draw on existing axes, otherwise a new figure is created.
        legend : bool
            Add a legend entry for every mapped category.

        Returns
        -------
        fig : matplotlib.figure.Figure
        """
        if self._state != RendererState.FINALIZED:
            raise RendererStateError("Call finalize() before drawing")

        if ax is None:
            fig, ax = plt.subplots(figsize=self.figsize)
        else:
            fig = ax.figure

        for zorder, resolved in enumerate(self._resolved, start=1):
            match resolved:
                case ResolvedVector():
                    _draw_vector(ax, resolved, zorder)
                case ResolvedRaster():
                    _draw_raster(ax, resolved, zorder)

        _set_limits(ax, [resolved.bounds for resolved in self._resolved])
        ax.set_aspect("equal")
        if self.title is not None:
            ax.set_title(self.title)
        if legend:
            _add_legend(ax, self._resolved)
        return fig


def _draw_vector(ax, resolved: ResolvedVector, zorder: int) -> None:
    style = resolved.style
    if len(resolved.polygons) > 0:
        resolved.polygons.plot(
            ax=ax,
            color=list(resolved.polygons["_color"]),
            edgecolor=style.edgecolor,
            linewidth=style.linewidth,
            zorder=zorder,
        )
    if len(resolved.lines) > 0:
        resolved.lines.plot(
            ax=ax,
            color=list(resolved.lines["_color"]),
            linewidth=style.linewidth,
            zorder=zorder,
        )
    if len(resolved.points) > 0:
        resolved.points.plot(
            ax=ax,
            color=list(resolved.points["_color"]),
            markersize=style.markersize,
            zorder=zorder,
        )


def _draw_raster(ax, resolved: ResolvedRaster, zorder: int) -> None:
    ax.imshow(
        resolved.rgba,
        extent=resolved.extent,
        origin=resolved.origin,
        interpolation="nearest",
        zorder=zorder,
    )


def _set_limits(ax, bounds: list[tuple]) -> None:
    bounds = np.array(bounds, dtype=np.float64).reshape(-1, 4)
    bounds = bounds[~np.isnan(bounds).any(axis=1)]
    if len(bounds) == 0:
        return
    xmin, ymin = bounds[:, :2].min(axis=0)
    xmax, ymax = bounds[:, 2:].max(axis=0)
    # Single points have zero extent.
    if xmax > xmin:
        ax.set_xlim(xmin, xmax)
    if ymax > ymin:
        ax.set_ylim(ymin, ymax)


def _add_legend(ax, resolved_layers) -> None:
    handles = []
    for resolved in resolved_layers:
        for label, rgba in resolved.legend:
            if resolved.style.label is not None:
                label = f"{resolved.style.label}: {label}"
            handles.append(matplotlib.patches.Patch(facecolor=rgba, label=label))
    if handles:
        ax.legend(handles=handles)


def render(
    layers: Iterable[Union[Layer, Any, tuple]],
    title: Optional[str] = None,
    figsize=None,
    ax=None,
    legend: bool = False,
):
    """
    Draw layers, in order, into a single map.

    Parameters
    ----------
    layers : iterable
        Each element a VectorLayer, RasterLayer, FeatureTable, RasterGrid, or a
        ``(data, style)`` tuple.
    title : str, optional
    figsize : tuple of two floats, optional
    ax : matplotlib.axes.Axes, optional
    legend : bool

    Returns
    -------
    fig : matplotlib.figure.Figure
    """
    renderer = Renderer(title=title, figsize=figsize)
    for layer in layers:
        if isinstance(layer, tuple):
            renderer.add_layer(*layer)
        else:
            renderer.add_layer(layer)
    return renderer.finalize().draw(ax=ax, legend=legend)


def save(fig, path: Union[str, pathlib.Path], dpi: int = 200) -> None:
    """Write a rendered map to an image file; the format follows the suffix."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    logger.info(f"Saved map to {path}")
