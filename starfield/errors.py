"""Exceptions raised while reading the catalog or projecting a view."""


class StarfieldError(Exception):
    """Base class for every error raised by the starfield package."""


class CatalogError(StarfieldError):
    """A problem with the catalog file itself."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class CatalogNotFound(CatalogError):
    """The catalog file could not be opened."""


class CatalogCorrupt(CatalogError):
    """The catalog size is not a whole number of records."""

    def __init__(self, message: str, path: str | None = None, size: int | None = None):
        super().__init__(message, path)
        self.size = size


class RecordReadFailure(CatalogError):
    """Seek or read of a single record failed. Callers skip the star."""

    def __init__(self, message: str, path: str | None = None, index: int | None = None):
        super().__init__(message, path)
        self.index = index


class ProjectionDomainError(StarfieldError, ValueError):
    """The view cannot be projected (field of view must be > 0)."""
