"""Exceptions raised by azarchgen."""


class AzArchGenError(Exception):
    """Base class for all azarchgen errors."""


class MalformedInputError(AzArchGenError, ValueError):
    """The architecture record is missing or structurally invalid.

    Raised before any hierarchy is built, so no partial document is produced.
    """


class CatalogError(AzArchGenError, ValueError):
    """The resource catalog file could not be loaded."""


class LayoutError(AzArchGenError, RuntimeError):
    """Layout was asked to position a node that already has geometry."""
