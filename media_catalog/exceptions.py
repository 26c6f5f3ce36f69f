# media_catalog/exceptions.py


class CatalogError(Exception):
    """Base class for all catalog errors"""


class ValidationError(CatalogError, ValueError):
    """Input is malformed (empty title, negative quantity, missing ISBN, ...)"""


class DuplicateError(CatalogError):
    """ISBN, title/author or lookup name collides with an existing record"""


class NotFoundError(CatalogError, LookupError):
    """Write operation targets an unknown or inactive record"""


class ConstraintViolation(CatalogError):
    """Uniqueness constraint rejected a write at commit time.

    Raised by the repositories only. Services translate it into
    DuplicateError so raw storage errors never reach callers.
    """

    def __init__(self, message: str, original: Exception | None = None):
        super().__init__(message)
        self.original = original
