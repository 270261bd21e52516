"""Error taxonomy for the document store.

Every pymongo failure is mapped to exactly one of these and re-raised with the
driver exception chained. A record that does not exist is not an error:
lookups return ``None``.
"""

from pymongo.errors import OperationFailure

# MongoDB server error codes for authorization failures
UNAUTHORIZED = 13
AUTHENTICATION_FAILED = 18
PERMISSION_CODES = {UNAUTHORIZED, AUTHENTICATION_FAILED}


class StoreError(Exception):
    """Base class for document store failures."""


class FetchError(StoreError):
    """Listing or reading documents failed."""


class CreateError(StoreError):
    """Inserting a document failed."""


class UpdateError(StoreError):
    """Updating a document failed."""


class DeleteError(StoreError):
    """Deleting a document failed."""


class StorePermissionError(StoreError):
    """The database refused the caller (not signed in or not allowed).

    Raised instead of the per-operation error so callers can send the user
    back through sign-in.
    """


def is_permission_failure(exc: Exception) -> bool:
    return isinstance(exc, OperationFailure) and exc.code in PERMISSION_CODES
