"""
Exceptions raised by geofund.

All errors derive from :class:`GeofundError`, so callers can catch the whole
family at once. Nothing in geofund substitutes defaults for invalid input:
every error is raised at the point the problem is detected.
"""


class GeofundError(Exception):
    pass


class InvalidGeometry(GeofundError):
    """Coordinates do not describe a valid geometry of the requested kind."""


class UnsupportedCast(GeofundError):
    """Source and target geometry kinds are not structurally compatible."""


class BreakpointError(GeofundError):
    """Breakpoints or labels for binning are malformed."""


class EmptyCropError(GeofundError):
    """The crop mask does not cover a single cell centre of the grid."""


class UnmappedCategory(GeofundError):
    """A value to be drawn has no entry in the colour table."""


class UnreadableFile(GeofundError):
    pass


class FetchError(GeofundError):
    pass


class SchemaError(GeofundError):
    pass


class CRSMismatchError(GeofundError):
    pass


class RendererStateError(GeofundError):
    pass
