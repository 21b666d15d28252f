import pandas as pd
import pytest

from geofund.errors import UnreadableFile
from geofund.formats import read_vector_file, write_vector_file
from geofund.schemata import ColumnType


def test_saveopen_geopackage(regions, tmp_path):
    path = tmp_path / "regions.gpkg"
    write_vector_file(path, regions)
    back = read_vector_file(path)

    assert len(back) == 3
    assert back.columns == ("name", "population")
    assert back.crs.to_epsg() == 4326
    assert list(back.column("name")) == ["west", "middle", "east"]
    assert back.extract_geometry().geometries == regions.extract_geometry().geometries


def test_saveopen_layer(regions, tmp_path):
    path = tmp_path / "layers.gpkg"
    write_vector_file(path, regions, layer="regions")
    back = read_vector_file(path, layer="regions")
    assert len(back) == 3


def test_saveopen_schema(regions, tmp_path):
    path = tmp_path / "regions.geojson"
    write_vector_file(path, regions, driver="GeoJSON")
    back = read_vector_file(path, schema={"name": "string", "population": "numeric"})
    assert back.schema == regions.schema


def test_saveopen_categorical(regions, tmp_path):
    derived = regions.derive_column(
        "size", "population", [0, 10, 30], ["small", "large"]
    )
    path = tmp_path / "derived.gpkg"
    write_vector_file(path, derived)
    back = read_vector_file(path)
    assert back.schema["size"] == ColumnType.STRING
    assert list(back.column("size")) == ["small", "large", "large"]


def test_read_missing_file(tmp_path):
    with pytest.raises(UnreadableFile, match="Could not find"):
        read_vector_file(tmp_path / "missing.gpkg")


def test_read_corrupt_file(tmp_path):
    path = tmp_path / "corrupt.geojson"
    path.write_text("{not json")
    with pytest.raises(UnreadableFile, match="Could not read"):
        read_vector_file(path)


def test_saveopen_datetime(regions, tmp_path):
    gdf = regions.to_geodataframe()
    gdf["surveyed"] = pd.to_datetime(["2020-01-01", "2020-06-15", None])
    path = tmp_path / "surveyed.gpkg"
    gdf.to_file(path)

    back = read_vector_file(path)
    assert back.schema["surveyed"] == ColumnType.DATETIME
    # GeoPackage may hand the values back as UTC.
    surveyed = back.column("surveyed").dt.strftime("%Y-%m-%d")
    assert list(surveyed.iloc[:2]) == ["2020-01-01", "2020-06-15"]
    assert pd.isna(surveyed.iloc[2])

    # And written back through geofund itself.
    path = tmp_path / "rewritten.gpkg"
    write_vector_file(path, back)
    assert read_vector_file(path).schema["surveyed"] == ColumnType.DATETIME
