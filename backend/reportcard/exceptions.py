"""Domain errors raised by services and repositories.

Services raise `NotFoundError` and `ConflictError`; the repository
raises `UniqueViolation`/`ReferenceViolation` for integrity failures it
can classify and `PersistenceError` for everything else. Mapping these
to HTTP responses happens once, in `reportcard.main`.
"""

from typing import Any, Iterable, Optional, Sequence


class ReportCardError(Exception):
    """Base class for errors that carry an HTTP status."""
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ReportCardError):
    """A referenced entity or relationship tuple does not exist."""
    status_code = 404
    error = "Not Found"

    @classmethod
    def for_id(cls, entity: str, ident: Any) -> "NotFoundError":
        return cls(f"{entity} with ID {ident} not found")


class ConflictError(ReportCardError):
    """An insert or update would break a uniqueness rule."""
    status_code = 409
    error = "Conflict"

    def __init__(self, message: str, fields: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class ReferenceViolation(ConflictError):
    """A write or delete broke a foreign-key constraint."""

    def __init__(self, table: str):
        super().__init__(f"{table} record is still referenced or references a missing record")
        self.table = table


class UniqueViolation(Exception):
    """Raised by the repository when a unique constraint rejects a write.

    `fields` holds the colliding column names when the driver reports
    them (empty otherwise).
    """

    def __init__(self, table: str, fields: Iterable[str]):
        self.table = table
        self.fields = list(fields)
        super().__init__(f"unique constraint violated on {table}({', '.join(self.fields)})")


class PersistenceError(ReportCardError):
    """Any persistence failure the repository could not classify."""

    def __init__(self, operation: str, table: str, key: Any = None):
        detail = f" key={key!r}" if key is not None else ""
        super().__init__(f"{operation} on {table} failed{detail}")
        self.operation = operation
        self.table = table
        self.key = key
