import numpy as np
import pandas as pd
import pytest

from geofund.collection import GeometryCollection
from geofund.geometry import point, polygon
from geofund.table import FeatureTable


def square(xmin, ymin, size=1.0):
    xmax = xmin + size
    ymax = ymin + size
    return polygon(
        [[(xmin, ymin), (xmax, ymin), (xmax, ymax), (xmin, ymax), (xmin, ymin)]]
    )


@pytest.fixture(scope="function")
def regions():
    """Three unit squares along the x axis, with a name and population."""
    attributes = pd.DataFrame(
        {
            "name": ["west", "middle", "east"],
            "population": [5.0, 15.0, 25.0],
        }
    )
    geometry = GeometryCollection(
        [square(0.0, 0.0), square(1.0, 0.0), square(2.0, 0.0)], crs="EPSG:4326"
    )
    return FeatureTable(
        attributes, geometry, schema={"name": "string", "population": "numeric"}
    )


@pytest.fixture(scope="function")
def cities():
    attributes = {
        "city": ["a", "b", "c", "d"],
        "elevation": [-2.0, 0.0, np.nan, 120.0],
    }
    geometry = [point((0.5, 0.5)), point((1.5, 0.5)), point((2.5, 0.5)), point((9, 9))]
    return FeatureTable(attributes, geometry, crs="EPSG:4326")
