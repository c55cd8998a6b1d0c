"""
Error taxonomy for catalog operations.

Client faults (identifier and payload errors) map to 400, missing records to
404 and store failures to 500.
"""


class CatalogError(Exception):
    """Base class for errors surfaced by the catalog handlers."""

    code = "CatalogError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIdentifierError(CatalogError):
    """Raised when a book identifier is not well formed."""

    code = "InvalidIdentifier"
    status_code = 400


class MissingRequiredFieldError(CatalogError):
    """Raised when title or author is missing or empty."""

    code = "MissingRequiredField"
    status_code = 400


class InvalidYearError(CatalogError):
    code = "InvalidYear"
    status_code = 400


class InvalidRatingError(CatalogError):
    code = "InvalidRating"
    status_code = 400


class InvalidGenresError(CatalogError):
    code = "InvalidGenres"
    status_code = 400


class ImmutableFieldError(CatalogError):
    """Raised when an update tries to set the identifier."""

    code = "ImmutableField"
    status_code = 400


class NotFoundError(CatalogError):
    """Raised when no record matches a lookup, filter or delete."""

    code = "NotFound"
    status_code = 404


class StoreFailureError(CatalogError):
    """Raised when the document store reports an error."""

    code = "StoreFailure"
    status_code = 500
