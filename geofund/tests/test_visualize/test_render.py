import affine
import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from geofund.errors import (
    CRSMismatchError,
    RendererStateError,
    SchemaError,
    UnmappedCategory,
)
from geofund.geometry import linestring, point
from geofund.raster import RasterGrid, reclassify
from geofund.table import FeatureTable
from geofund.visualize import (
    RasterLayer,
    Renderer,
    RendererState,
    Style,
    VectorLayer,
    render,
    save,
)
from geofund.visualize.common import TRANSPARENT
from geofund.visualize.layers import as_layer, resolve_raster, resolve_vector

COLORS = {"west": "red", "middle": "green", "east": "blue"}


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture(scope="function")
def elevation():
    values = np.array([[0.0, 10.0, 20.0], [30.0, np.nan, 50.0]])
    transform = affine.Affine(1.0, 0.0, 0.0, 0.0, -1.0, 2.0)
    return RasterGrid(values, transform, crs="EPSG:4326")


def test_state_machine(regions):
    renderer = Renderer(title="regions")
    assert renderer.state == RendererState.EMPTY
    with pytest.raises(RendererStateError):
        renderer.finalize()
    with pytest.raises(RendererStateError):
        renderer.draw()

    renderer.add_layer(regions)
    assert renderer.state == RendererState.COMPOSING
    with pytest.raises(RendererStateError):
        renderer.draw()

    assert renderer.finalize() is renderer
    assert renderer.state == RendererState.FINALIZED
    # Finalizing twice is harmless.
    renderer.finalize()
    with pytest.raises(RendererStateError):
        renderer.add_layer(regions)

    fig = renderer.draw()
    assert isinstance(fig, matplotlib.figure.Figure)
    assert fig.axes[0].get_title() == "regions"


def test_add_layer_order(regions, elevation):
    renderer = Renderer().add_layer(elevation).add_layer(regions, Style(facecolor="none"))
    assert isinstance(renderer.layers[0], RasterLayer)
    assert isinstance(renderer.layers[1], VectorLayer)
    assert renderer.layers[1].style.facecolor == "none"


def test_add_layer_crs_mismatch(regions, square_grid):
    renderer = Renderer().add_layer(regions)
    with pytest.raises(CRSMismatchError):
        renderer.add_layer(square_grid)
    assert len(renderer.layers) == 1


def test_as_layer_type():
    with pytest.raises(TypeError, match="FeatureTable or RasterGrid"):
        as_layer(np.zeros((2, 2)))


def test_unmapped_category_on_finalize(regions):
    style = Style(fill_by="name", color_table={"west": "red", "east": "blue"})
    renderer = Renderer().add_layer(regions, style)
    with pytest.raises(UnmappedCategory, match="middle"):
        renderer.finalize()
    assert renderer.state == RendererState.COMPOSING


def test_layers_drawn_in_order(regions, elevation):
    fig = render(
        [
            (elevation, Style(colors="terrain", levels=[0.0, 25.0, 50.0])),
            (regions, Style(facecolor="none", edgecolor="black")),
        ]
    )
    ax = fig.axes[0]
    image = ax.images[0]
    assert image.get_zorder() == 1
    assert all(collection.get_zorder() == 2 for collection in ax.collections)
    assert len(ax.collections) > 0


def test_fill_by_colors(regions):
    resolved = resolve_vector(VectorLayer(regions, Style(fill_by="name", color_table=COLORS)))
    colors = list(resolved.polygons["_color"])
    assert colors == [
        (1.0, 0.0, 0.0, 1.0),
        (0.0, 0.5019607843137255, 0.0, 1.0),
        (0.0, 0.0, 1.0, 1.0),
    ]
    assert len(resolved.lines) == 0
    assert len(resolved.points) == 0
    assert [label for label, _ in resolved.legend] == ["west", "middle", "east"]


def test_fill_by_missing_value(cities):
    derived = cities.derive_column("level", "elevation", [0, 100, 200], ["low", "high"])
    style = Style(fill_by="level", color_table={"low": "green", "high": "brown"})
    resolved = resolve_vector(VectorLayer(derived, style))
    colors = list(resolved.points["_color"])
    # -2.0 and NaN fall in no category and are not drawn.
    assert colors[0] == TRANSPARENT
    assert colors[2] == TRANSPARENT
    assert colors[3] == matplotlib.colors.to_rgba("brown")


def test_fill_by_unknown_column(regions):
    style = Style(fill_by="area", color_table=COLORS)
    with pytest.raises(SchemaError, match="area"):
        resolve_vector(VectorLayer(regions, style))


def test_mixed_geometry_families():
    table = FeatureTable(
        {"kind": ["road", "well"]},
        [linestring([(0, 0), (1, 1)]), point((0.5, 0.5))],
    )
    resolved = resolve_vector(VectorLayer(table))
    assert len(resolved.lines) == 1
    assert len(resolved.points) == 1
    fig = render([table])
    assert len(fig.axes[0].collections) == 2


def test_categorical_raster(small_grid):
    classes = reclassify(small_grid, [1, 2, 4], ["low", "high"])
    style = Style(color_table={"low": "white", "high": "black"})
    resolved = resolve_raster(RasterLayer(classes, style))
    assert resolved.rgba.shape == (2, 2, 4)
    # 1 is not in (1, 2] and gets no category.
    assert tuple(resolved.rgba[0, 0]) == TRANSPARENT
    assert tuple(resolved.rgba[0, 1]) == (1.0, 1.0, 1.0, 1.0)
    assert tuple(resolved.rgba[1, 1]) == (0.0, 0.0, 0.0, 1.0)
    assert resolved.origin == "upper"
    assert resolved.extent == (0.0, 2.0, 0.0, 2.0)


def test_categorical_raster_unmapped(small_grid):
    classes = reclassify(small_grid, [0, 2, 4], ["low", "high"])
    layer = RasterLayer(classes, Style(color_table={"low": "white"}))
    with pytest.raises(UnmappedCategory, match="high"):
        resolve_raster(layer)


def test_categorical_raster_needs_color_table(small_grid):
    classes = reclassify(small_grid, [0, 2, 4], ["low", "high"])
    with pytest.raises(ValueError, match="color_table"):
        resolve_raster(RasterLayer(classes))


def test_class_raster(small_grid):
    style = Style(color_table={1: "red", 2: "red", 3: "blue", 4: "blue"})
    resolved = resolve_raster(RasterLayer(small_grid, style))
    assert tuple(resolved.rgba[1, 0]) == (0.0, 0.0, 1.0, 1.0)
    with pytest.raises(UnmappedCategory):
        resolve_raster(RasterLayer(small_grid, Style(color_table={1: "red"})))


def test_continuous_raster_nodata_transparent(elevation):
    resolved = resolve_raster(RasterLayer(elevation, Style(levels=[0.0, 25.0, 50.0])))
    assert tuple(resolved.rgba[1, 1]) == TRANSPARENT
    assert resolved.rgba[0, 0, 3] == 1.0


def test_raster_origin_lower():
    transform = affine.Affine(1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
    grid = RasterGrid(np.ones((2, 2)), transform)
    assert resolve_raster(RasterLayer(grid)).origin == "lower"


def test_raster_multiband(multiband_grid):
    with pytest.raises(ValueError, match="single band"):
        resolve_raster(RasterLayer(multiband_grid))
    resolved = resolve_raster(RasterLayer(multiband_grid.band(0)))
    assert resolved.rgba.shape == (3, 4, 4)


def test_raster_rotated():
    transform = affine.Affine.rotation(45.0)
    grid = RasterGrid(np.ones((2, 2)), transform)
    with pytest.raises(NotImplementedError):
        resolve_raster(RasterLayer(grid))


def test_render_legend(regions):
    fig = render(
        [(regions, Style(fill_by="name", color_table=COLORS, label="region"))],
        title="Regions",
        legend=True,
    )
    legend = fig.axes[0].get_legend()
    labels = [text.get_text() for text in legend.get_texts()]
    assert labels == ["region: west", "region: middle", "region: east"]


def test_render_on_existing_axes(regions):
    fig, ax = plt.subplots()
    result = render([regions], ax=ax)
    assert result is fig
    assert ax.get_xlim() == (0.0, 3.0)
    assert ax.get_ylim() == (0.0, 1.0)


def test_save(regions, tmp_path):
    fig = render([regions])
    path = tmp_path / "maps" / "regions.png"
    save(fig, path)
    assert path.is_file()
    assert path.stat().st_size > 0


def test_fill_by_na_attribute():
    table = FeatureTable(
        {"kind": pd.Series(["a", None], dtype=object)},
        [point((0, 0)), point((1, 1))],
        schema={"kind": "string"},
    )
    resolved = resolve_vector(
        VectorLayer(table, Style(fill_by="kind", color_table={"a": "red"}))
    )
    assert list(resolved.points["_color"])[1] == TRANSPARENT
