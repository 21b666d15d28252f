# exports
from geofund import logging  # isort:skip
from geofund import (
    classify,
    collection,
    data,
    errors,
    geometry,
    raster,
    schemata,
    table,
    util,
    visualize,
)
from geofund.collection import GeometryCollection
from geofund.data import fetch_reference_dataset
from geofund.formats import (
    read_raster_file,
    read_vector_file,
    write_raster_file,
    write_vector_file,
)
from geofund.geometry import Geometry, GeometryKind, construct, recast
from geofund.raster import RasterGrid, crop, reclassify, reproject
from geofund.table import FeatureTable
from geofund.visualize import (
    RasterLayer,
    Renderer,
    Style,
    VectorLayer,
    render,
    save,
)

__version__ = "0.1.0"
