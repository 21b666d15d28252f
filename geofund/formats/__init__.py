from geofund.formats.rasterio import read_raster_file, write_raster_file
from geofund.formats.vector import read_vector_file, write_vector_file
