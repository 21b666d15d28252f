"""
Miscellaneous Utilities.
"""

from geofund.util.spatial import coord_reference, spatial_reference, transform, xycoords
