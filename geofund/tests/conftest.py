import matplotlib
import pytest

import geofund
from geofund.logging import LoggerType

from .fixtures.geometry_fixture import square_with_hole, unit_square, zigzag
from .fixtures.raster_fixture import multiband_grid, small_grid, square_grid
from .fixtures.table_fixture import cities, regions

# Never open windows while testing.
matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    geofund.logging.configure(LoggerType.NULL)
