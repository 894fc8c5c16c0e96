from __future__ import annotations


class StoreError(Exception):
    """Base error for the user store. `message` is safe to log, never sent to clients as-is."""

    message = "store error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class OpenFailed(StoreError):
    message = "Could not open db file"


class CreateTableFailed(StoreError):
    message = "Could not create table"


class InsertFailed(StoreError):
    message = "Could not insert user"


class RetrieveFailed(StoreError):
    message = "Could not retrieve users"


# client-caused errors: routes map ValueError to 400
class InvalidOrder(StoreError, ValueError):
    message = "Invalid order direction"


class MissingParameter(StoreError, ValueError):
    message = "Missing parameter"


class InvalidPagination(StoreError, ValueError):
    message = "Invalid pagination parameters"
