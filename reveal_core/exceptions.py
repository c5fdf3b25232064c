"""Exception types raised by the reveal core."""


class RevealError(Exception):
    """Base class for errors raised by this package."""


class DataSourceError(RevealError):
    """The graph data could not be read or is malformed.

    Raised during loading only; a view is never built from a partial graph.
    """
