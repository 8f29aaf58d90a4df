"""Repository encapsulating database operations.

`Repository` is the single persistence interface every service talks
to. It wraps one SQLModel `Session` and offers point lookup, filtered
listing, insert, partial update, delete and an all-or-nothing `batch`
block. Writes commit immediately unless they run inside `batch()`, in
which case they are only flushed and the block commits once at the end.

Integrity failures are classified here: unique-constraint violations
become `UniqueViolation` (with the colliding column names when the
driver reports them), foreign-key violations become
`ReferenceViolation`, and any other SQLAlchemy failure is wrapped in
`PersistenceError` naming the operation, table and key.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select

from .exceptions import PersistenceError, ReferenceViolation, UniqueViolation

ModelT = TypeVar("ModelT", bound=SQLModel)

logger = logging.getLogger("reportcard.repositories")

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<cols>[^\n]+)")
_POSTGRES_KEY = re.compile(r"Key \((?P<cols>[^)]+)\)=")
_MYSQL_KEY = re.compile(r"for key '(?:[\w]+\.)?(?P<cols>[^']+)'")


def unique_fields(exc: IntegrityError) -> Optional[List[str]]:
    """Return the columns named by a unique violation, or None if `exc` is not one.

    SQLite reports ``table.col, table.col``; PostgreSQL reports
    ``Key (col, col)=(...)`` with SQLSTATE 23505; MySQL only names the
    index. An empty list means "unique violation, columns unknown".
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)
    sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    match = _SQLITE_UNIQUE.search(message)
    if match:
        return [c.strip().split(".")[-1] for c in match.group("cols").split(",")]
    if sqlstate == "23505" or "duplicate key" in message.lower():
        match = _POSTGRES_KEY.search(message)
        return [c.strip() for c in match.group("cols").split(",")] if match else []
    if "Duplicate entry" in message:
        match = _MYSQL_KEY.search(message)
        return [match.group("cols")] if match else []
    return None


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    return sqlstate == "23503" or "FOREIGN KEY constraint failed" in message or "foreign key constraint" in message.lower()


def loader_options(model: Type[SQLModel], paths: Iterable[str]) -> list:
    """Build `selectinload` options from dotted relation paths.

    ``("user.role", "grade")`` on `Student` loads ``Student.user``,
    ``User.role`` and ``Student.grade`` eagerly.
    """
    options = []
    for path in paths:
        current = model
        loader = None
        for name in path.split("."):
            attr = getattr(current, name)
            loader = selectinload(attr) if loader is None else loader.selectinload(attr)
            current = attr.property.mapper.class_
        options.append(loader)
    return options


def _table_name(model) -> str:
    return getattr(model, "__tablename__", model.__name__)


class Repository:
    """Persistence operations over one `Session`."""

    def __init__(self, session: Session):
        self.session = session
        self._batch_depth = 0

    # -- reads ------------------------------------------------------------

    def get(self, model: Type[ModelT], key: Any, options: Sequence = ()) -> Optional[ModelT]:
        """Fetch a row by primary key (scalar or ``{column: value}``) or return None."""
        return self.session.get(model, key, options=list(options) or None, populate_existing=True)

    def list(
        self,
        model: Type[ModelT],
        filters: Optional[Dict[str, Any]] = None,
        order_by: Sequence = (),
        options: Sequence = (),
    ) -> List[ModelT]:
        """Return rows whose columns equal every value in `filters`."""
        stmt = select(model)
        for field, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, field) == value)
        if options:
            stmt = stmt.options(*options)
        if order_by:
            stmt = stmt.order_by(*order_by)
        return self.all(stmt)

    def all(self, stmt) -> list:
        """Execute a prebuilt statement and return every row."""
        return list(self.session.exec(stmt.execution_options(populate_existing=True)).all())

    def one(self, stmt):
        """Execute a prebuilt statement expected to return exactly one row."""
        return self.session.exec(stmt).one()

    # -- writes -----------------------------------------------------------

    def insert(self, obj: ModelT) -> ModelT:
        """Persist a new row and return the managed instance."""
        self.session.add(obj)
        self._write("insert", obj)
        return obj

    def update(self, obj: ModelT, data: Dict[str, Any]) -> ModelT:
        """Apply `data` onto an already loaded row and persist it."""
        for field, value in data.items():
            setattr(obj, field, value)
        self.session.add(obj)
        self._write("update", obj)
        return obj

    def delete(self, obj: ModelT) -> ModelT:
        """Delete a loaded row; the instance keeps its last loaded state."""
        self.session.delete(obj)
        self._write("delete", obj)
        return obj

    @contextmanager
    def batch(self):
        """Group writes so they succeed or fail together.

        Inside the block writes are flushed, not committed; leaving the
        block normally commits, leaving it with an exception rolls back.
        Nested blocks join the outermost transaction.
        """
        self._batch_depth += 1
        try:
            yield self
            if self._batch_depth == 1:
                self._commit("batch", None)
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._batch_depth -= 1

    def _write(self, operation: str, obj) -> None:
        if self._batch_depth:
            self._flush(operation, obj)
        else:
            self._commit(operation, obj)

    def _flush(self, operation: str, obj) -> None:
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise self._classify(exc, operation, obj) from exc

    def _commit(self, operation: str, obj) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise self._classify(exc, operation, obj) from exc

    def _classify(self, exc: SQLAlchemyError, operation: str, obj) -> Exception:
        table = _table_name(type(obj)) if obj is not None else "batch"
        if isinstance(exc, IntegrityError):
            fields = unique_fields(exc)
            if fields is not None:
                logger.info("unique violation on %s(%s) during %s", table, ", ".join(fields), operation)
                return UniqueViolation(table, fields)
            if is_foreign_key_violation(exc):
                logger.info("foreign key violation on %s during %s", table, operation)
                return ReferenceViolation(table)
        key = inspect(obj).identity if obj is not None else None
        logger.error("%s on %s failed: %s", operation, table, exc)
        return PersistenceError(operation, table, key)
