"""Business logic services used by HTTP controllers.

Every single-key resource is described by a `Resource` (which table,
which primary-key field, which relations to eager-load, which parent
rows its foreign keys point to) and served by `CrudService`, which
implements find/list/create/update/remove once for all of them.
Services that need extra behaviour (password hashing, soft delete,
bulk writes, statistics) subclass it and override the small
`_prepare_create`/`_prepare_update` hooks or add methods.

Two rules hold across all services:

- update, remove and toggle operations always load the row first, so a
  missing row raises `NotFoundError` before anything is written;
- foreign keys present in a create/update payload are checked before
  writing. When several parents are referenced the lookups run
  concurrently, each on its own session (`run_concurrently`).

`StudentTeacherSubjectService` manages assignments identified by the
(student, teacher, subject, academic period) tuple and therefore takes
a `StudentTeacherSubjectKey` wherever other services take an id.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, replace
from functools import partial
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Type, TypeVar, Union

from passlib.context import CryptContext
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy import func
from sqlalchemy.orm import aliased
from sqlmodel import Session, SQLModel, select

from . import models
from .exceptions import ConflictError, NotFoundError, UniqueViolation
from .repositories import Repository, loader_options
from .utils.dates import safe_parse_date, safe_parse_datetime
from .utils.query import build_pagination, build_search, build_sort, build_status_filter, total_pages

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

logger = logging.getLogger("reportcard.services")

ModelT = TypeVar("ModelT", bound=SQLModel)
Payload = Union[BaseModel, Mapping[str, Any]]

# columns whose API alias is not plain camelCase
API_NAMES = {"user_ci": "userCI"}


@dataclass(frozen=True)
class Resource:
    """Static description of a table served by a service.

    `relations` are dotted relationship paths loaded with every returned
    row; `references` maps foreign-key fields to the parent resource
    that must exist before a write.
    """
    name: str
    model: Type[SQLModel]
    id_field: Optional[str]
    relations: Tuple[str, ...] = ()
    status_field: Optional[str] = None
    references: Tuple[Tuple[str, "Resource"], ...] = ()
    conflict_message: Optional[str] = None

    @property
    def id_column(self):
        return getattr(self.model, self.id_field)

    def options(self) -> list:
        return loader_options(self.model, self.relations)


ROLES = Resource("Role", models.Role, "role_id", status_field="role_status")
GRADES = Resource("Grade", models.Grade, "grade_id", status_field="grade_status")
SUBJECTS = Resource("Subject", models.Subject, "subject_id", status_field="subject_status")
USERS = Resource(
    "User", models.User, "user_id",
    relations=("role",),
    status_field="user_status",
    references=(("user_role_id", ROLES),),
)
STUDENTS = Resource(
    "Student", models.Student, "student_id",
    relations=("user.role", "grade"),
    references=(("user_id", USERS), ("grade_id", GRADES)),
)
TEACHERS = Resource(
    "Teacher", models.Teacher, "teacher_id",
    relations=("user.role",),
    references=(("user_id", USERS),),
)
GRADE_RECORDS = Resource(
    "Grade record", models.GradeRecord, "grade_record_id",
    relations=("student", "subject", "grade"),
    references=(("student_id", STUDENTS), ("subject_id", SUBJECTS), ("grade_id", GRADES)),
)
TEACHER_SUBJECTS = Resource(
    "Teacher Subject assignment", models.TeacherSubject, "teacher_subject_id",
    relations=("teacher.user.role", "subject"),
    references=(("teacher_id", TEACHERS), ("subject_id", SUBJECTS)),
    conflict_message="This teacher is already assigned to this subject",
)
TEACHER_GRADES = Resource(
    "Teacher Grade assignment", models.TeacherGrade, "teacher_grade_id",
    relations=("teacher.user.role", "grade"),
    references=(("teacher_id", TEACHERS), ("grade_id", GRADES)),
    conflict_message="This teacher is already assigned to this grade",
)
GRADE_SUBJECTS = Resource(
    "Grade Subject assignment", models.GradeSubject, "grade_subject_id",
    relations=("grade", "subject"),
    references=(("grade_id", GRADES), ("subject_id", SUBJECTS)),
    conflict_message="This subject is already assigned to this grade",
)
STUDENT_TEACHER_SUBJECTS = Resource(
    "Student-teacher-subject assignment", models.StudentTeacherSubject, None,
    relations=("student.user.role", "student.grade", "teacher.user.role", "subject", "grade"),
    references=(("student_id", STUDENTS), ("teacher_id", TEACHERS), ("subject_id", SUBJECTS), ("grade_id", GRADES)),
)


def _as_dict(data: Payload, partial: bool = False, model: Optional[Type[SQLModel]] = None) -> Dict[str, Any]:
    """Turn a DTO (or plain mapping) into column values, dropping nulls.

    With `partial`, fields the caller did not send are left out too, and
    an explicit null is kept for the nullable columns of `model` so a
    partial update can clear them.
    """
    if isinstance(data, BaseModel):
        values = data.model_dump(exclude_unset=partial)
    else:
        values = dict(data)
    keep_null = _nullable_columns(model) if partial and model is not None else set()
    return {k: v for k, v in values.items() if v is not None or k in keep_null}


def _nullable_columns(model: Type[SQLModel]) -> Set[str]:
    return {column.name for column in model.__table__.columns if column.nullable and not column.primary_key}


def _api_name(field: str) -> str:
    """Name of a column as it appears in request and response bodies."""
    return API_NAMES.get(field) or to_camel(field)


def run_concurrently(session: Session, queries: Sequence[Callable[[Session], Any]]) -> list:
    """Run each ``query(session)`` concurrently and return results in order.

    Every query gets its own short-lived session on the same engine so
    the lookups really overlap; a single query just uses `session`. All
    queries are waited for; the first exception (in order) propagates.
    """
    if not queries:
        return []
    if len(queries) == 1:
        return [queries[0](session)]
    bind = session.get_bind()

    def run(query):
        with Session(bind) as probe:
            return query(probe)

    with ThreadPoolExecutor(max_workers=len(queries)) as pool:
        return list(pool.map(run, queries))


def _exists(model: Type[SQLModel], ident: Any, session: Session) -> bool:
    return session.get(model, ident) is not None


def _existing_ids(resource: Resource, idents: Iterable[Any], session: Session) -> Set[Any]:
    stmt = select(resource.id_column).where(resource.id_column.in_(list(idents)))
    return set(session.exec(stmt).all())


def ensure_exists(session: Session, references: Sequence[Tuple[Resource, Any]]) -> None:
    """Raise `NotFoundError` for the first `(resource, id)` pair that has no row.

    The lookups are issued concurrently; the error names the first
    missing parent in the order given.
    """
    found = run_concurrently(session, [partial(_exists, resource.model, ident) for resource, ident in references])
    for (resource, ident), exists in zip(references, found):
        if not exists:
            raise NotFoundError.for_id(resource.name, ident)


class CrudService(Generic[ModelT]):
    """Create/read/update/delete for one surrogate-keyed `Resource`."""

    resource: Resource

    def __init__(self, session: Session, resource: Optional[Resource] = None):
        self.session = session
        self.repo = Repository(session)
        if resource is not None:
            self.resource = resource

    def find_one(self, id: int) -> ModelT:
        """Fetch by primary key with relations; raise `NotFoundError` when absent."""
        item = self.repo.get(self.resource.model, id, self.resource.options())
        if item is None:
            raise NotFoundError.for_id(self.resource.name, id)
        return item

    def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[ModelT]:
        """List rows equal to every filter value, ascending by primary key."""
        return self.repo.list(
            self.resource.model,
            filters,
            order_by=[self.resource.id_column.asc()],
            options=self.resource.options(),
        )

    def create(self, data: Payload) -> ModelT:
        values = self._prepare_create(_as_dict(data))
        self._check_references(values)
        item = self._insert(values)
        logger.info("created %s %s", self.resource.name, getattr(item, self.resource.id_field))
        return self.find_one(getattr(item, self.resource.id_field))

    def update(self, id: int, data: Payload) -> ModelT:
        item = self.find_one(id)
        values = self._prepare_update(_as_dict(data, partial=True, model=self.resource.model))
        self._check_references(values)
        self._apply(item, values)
        logger.info("updated %s %s (%s)", self.resource.name, id, ", ".join(sorted(values)))
        return self.find_one(id)

    def remove(self, id: int) -> ModelT:
        """Delete the row and return its last representation."""
        item = self.find_one(id)
        self.repo.delete(item)
        logger.info("deleted %s %s", self.resource.name, id)
        return item

    def find_all_by_status(self, status: Optional[str] = None) -> List[ModelT]:
        """List rows filtered by ``active``/``inactive``; anything else lists all."""
        return self.find_all(build_status_filter(status, self._status_field()))

    def toggle_status(self, id: int) -> ModelT:
        item = self.find_one(id)
        field = self._status_field()
        self._apply(item, {field: not getattr(item, field)})
        return self.find_one(id)

    # -- hooks and helpers ------------------------------------------------

    def _prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    def _prepare_update(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    def _status_field(self) -> str:
        if not self.resource.status_field:
            raise TypeError(f"{self.resource.name} has no status field")
        return self.resource.status_field

    def _check_references(self, values: Mapping[str, Any]) -> None:
        ensure_exists(
            self.session,
            [(parent, values[field]) for field, parent in self.resource.references if field in values],
        )

    def _check_references_bulk(self, rows: Sequence[Mapping[str, Any]]) -> None:
        """Validate the foreign keys of many rows with one query per parent table."""
        wanted = [
            (field, parent, {row[field] for row in rows if field in row})
            for field, parent in self.resource.references
        ]
        wanted = [(field, parent, idents) for field, parent, idents in wanted if idents]
        found = run_concurrently(self.session, [partial(_existing_ids, parent, idents) for _, parent, idents in wanted])
        existing = {field: ids for (field, _, _), ids in zip(wanted, found)}
        for row in rows:
            for field, parent in self.resource.references:
                if field in row and row[field] not in existing[field]:
                    raise NotFoundError.for_id(parent.name, row[field])

    def _insert(self, values: Dict[str, Any]) -> ModelT:
        try:
            return self.repo.insert(self.resource.model(**values))
        except UniqueViolation as exc:
            raise self._conflict(exc) from exc

    def _apply(self, item: ModelT, values: Dict[str, Any]) -> ModelT:
        try:
            return self.repo.update(item, values)
        except UniqueViolation as exc:
            raise self._conflict(exc) from exc

    def _conflict(self, exc: UniqueViolation) -> ConflictError:
        message = self.resource.conflict_message
        if message is None:
            names = ", ".join(_api_name(f) for f in exc.fields)
            message = f"{self.resource.name} with this {names or 'value'} already exists"
        return ConflictError(message, exc.fields)

    def _load_many(self, ids: Sequence[int]) -> List[ModelT]:
        column = self.resource.id_column
        stmt = select(self.resource.model).where(column.in_(list(ids))).options(*self.resource.options())
        by_id = {getattr(row, self.resource.id_field): row for row in self.repo.all(stmt)}
        return [by_id[i] for i in ids]

    def _page(self, conditions: Sequence, page: int, limit: int, sort_by: Optional[str], sort_order: str, join=None) -> dict:
        """Run a filtered, sorted, paginated query and return ``{data, meta}``."""
        model = self.resource.model
        stmt = select(model)
        count_stmt = select(func.count()).select_from(model)
        if join is not None:
            stmt = stmt.join(*join)
            count_stmt = count_stmt.join(*join)
        for condition in conditions:
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)
        offset, limit = build_pagination(page, limit)
        stmt = (
            stmt.options(*self.resource.options())
            .order_by(build_sort(model, sort_by, sort_order, self.resource.id_field, joined=join[:1] if join else ()))
            .offset(offset)
            .limit(limit)
        )
        total = self.repo.one(count_stmt)
        return {
            "data": self.repo.all(stmt),
            "meta": {"total": total, "page": max(1, page), "limit": limit, "total_pages": total_pages(total, limit)},
        }


class RoleService(CrudService[models.Role]):
    resource = ROLES


class SubjectService(CrudService[models.Subject]):
    resource = SUBJECTS


class GradeService(CrudService[models.Grade]):
    resource = GRADES

    def remove(self, id: int) -> models.Grade:
        """Soft delete: mark the grade inactive instead of deleting it.

        Students, records and assignments keep pointing at the grade.
        """
        item = self.find_one(id)
        self._apply(item, {"grade_status": False})
        logger.info("deactivated Grade %s", id)
        return self.find_one(id)


class UserService(CrudService[models.User]):
    """Users: hashes passwords and normalizes the date of birth."""
    resource = USERS

    def _prepare_create(self, values):
        values["user_password"] = PWD_CTX.hash(values["user_password"])
        values["user_date_of_birth"] = safe_parse_date(values["user_date_of_birth"])
        return values

    def _prepare_update(self, values):
        if "user_password" in values:
            values["user_password"] = PWD_CTX.hash(values["user_password"])
        if "user_date_of_birth" in values:
            values["user_date_of_birth"] = safe_parse_date(values["user_date_of_birth"])
        return values

    def search(self, search: Optional[str] = None, status: Optional[str] = None, page: int = 1, limit: int = 10,
               sort_by: Optional[str] = None, sort_order: str = "asc") -> dict:
        """Paginated user listing matching `search` on names and email."""
        user = models.User
        conditions = [getattr(user, f) == v for f, v in build_status_filter(status, "user_status").items()]
        term = build_search([user.user_first_name, user.user_first_last_name, user.user_email], search)
        if term is not None:
            conditions.append(term)
        return self._page(conditions, page, limit, sort_by, sort_order)


class StudentService(CrudService[models.Student]):
    resource = STUDENTS

    def find_by_grade(self, grade_id: int) -> List[models.Student]:
        return self.find_all({"grade_id": grade_id})

    def find_by_user(self, user_id: int) -> models.Student:
        found = self.find_all({"user_id": user_id})
        if not found:
            raise NotFoundError(f"Student for user ID {user_id} not found")
        return found[0]


class TeacherService(CrudService[models.Teacher]):
    resource = TEACHERS

    def search(self, search: Optional[str] = None, page: int = 1, limit: int = 10,
               sort_by: Optional[str] = None, sort_order: str = "asc") -> dict:
        """Paginated teacher listing matching `search` on the linked user's names and email."""
        user = models.User
        conditions = []
        term = build_search([user.user_first_name, user.user_first_last_name, user.user_email], search)
        if term is not None:
            conditions.append(term)
        join = (user, models.Teacher.user_id == user.user_id)
        return self._page(conditions, page, limit, sort_by, sort_order, join=join)

    def find_by_user(self, user_id: int) -> models.Teacher:
        found = self.find_all({"user_id": user_id})
        if not found:
            raise NotFoundError(f"Teacher for user ID {user_id} not found")
        return found[0]


class GradeRecordService(CrudService[models.GradeRecord]):
    """Evaluation scores, including bulk writes and aggregates."""
    resource = GRADE_RECORDS

    def _prepare_create(self, values):
        values["evaluation_date"] = safe_parse_datetime(values.get("evaluation_date"))
        return values

    def _prepare_update(self, values):
        if "evaluation_date" in values:
            values["evaluation_date"] = safe_parse_datetime(values["evaluation_date"])
        return values

    def create_many(self, items: Sequence[Payload]) -> List[models.GradeRecord]:
        """Insert several records in one transaction.

        All foreign keys are validated up front (one concurrent query per
        parent table); if any is missing nothing is written.
        """
        rows = [self._prepare_create(_as_dict(item)) for item in items]
        if not rows:
            return []
        self._check_references_bulk(rows)
        created = []
        try:
            with self.repo.batch():
                for values in rows:
                    created.append(self.repo.insert(models.GradeRecord(**values)))
        except UniqueViolation as exc:
            raise self._conflict(exc) from exc
        logger.info("created %d grade records", len(created))
        return self._load_many([r.grade_record_id for r in created])

    def update_many(self, updates: Sequence[Tuple[int, Payload]]) -> List[models.GradeRecord]:
        """Apply several partial updates in one transaction.

        Every id is loaded (and every changed foreign key checked) before
        the first write.
        """
        pending = [
            (self.find_one(id), self._prepare_update(_as_dict(data, partial=True, model=self.resource.model)))
            for id, data in updates
        ]
        for _, values in pending:
            self._check_references(values)
        try:
            with self.repo.batch():
                for item, values in pending:
                    self.repo.update(item, values)
        except UniqueViolation as exc:
            raise self._conflict(exc) from exc
        return self._load_many([id for id, _ in updates])

    def find_all_filtered(self, student_id: Optional[int] = None, subject_id: Optional[int] = None,
                          grade_id: Optional[int] = None, academic_period: Optional[str] = None):
        filters = {
            "student_id": student_id,
            "subject_id": subject_id,
            "grade_id": grade_id,
            "academic_period": academic_period,
        }
        return self.find_all({k: v for k, v in filters.items() if v})

    def find_by_student(self, student_id: int, academic_period: Optional[str] = None):
        """Records of a student, newest period and evaluation first."""
        return self._find_by_parent("student_id", STUDENTS, student_id, academic_period)

    def find_by_subject(self, subject_id: int, academic_period: Optional[str] = None):
        return self._find_by_parent("subject_id", SUBJECTS, subject_id, academic_period)

    def _find_by_parent(self, field: str, parent: Resource, parent_id: int, academic_period: Optional[str]):
        record = models.GradeRecord
        filters = {field: parent_id}
        if academic_period:
            filters["academic_period"] = academic_period
        records = self.repo.list(
            record,
            filters,
            order_by=[record.academic_period.desc(), record.evaluation_date.desc()],
            options=self.resource.options(),
        )
        # an empty result is only an error when the parent itself is missing
        if not records:
            ensure_exists(self.session, [(parent, parent_id)])
        return records

    def statistics(self, academic_period: Optional[str] = None) -> dict:
        """Count, average, minimum and maximum score plus a per-grade distribution."""
        record = models.GradeRecord
        totals = select(func.count(record.grade_record_id), func.avg(record.score), func.min(record.score), func.max(record.score))
        distribution = (
            select(record.grade_id, func.count(record.grade_record_id), func.avg(record.score))
            .group_by(record.grade_id)
            .order_by(record.grade_id.asc())
        )
        if academic_period:
            totals = totals.where(record.academic_period == academic_period)
            distribution = distribution.where(record.academic_period == academic_period)
        count, average, minimum, maximum = self.repo.one(totals)
        return {
            "total_records": count or 0,
            "average_score": average or 0,
            "minimum_score": minimum or 0,
            "maximum_score": maximum or 0,
            "distribution": [
                {"grade_id": grade_id, "count": n, "average_score": avg or 0}
                for grade_id, n, avg in self.repo.all(distribution)
            ],
        }

    def student_summary(self, student_id: int, academic_period: Optional[str] = None) -> List[dict]:
        """Per-subject score aggregates for one student."""
        ensure_exists(self.session, [(STUDENTS, student_id)])
        record = models.GradeRecord
        stmt = (
            select(record.subject_id, func.count(record.grade_record_id), func.avg(record.score),
                   func.min(record.score), func.max(record.score))
            .where(record.student_id == student_id)
            .group_by(record.subject_id)
            .order_by(record.subject_id.asc())
        )
        if academic_period:
            stmt = stmt.where(record.academic_period == academic_period)
        return [
            {"subject_id": subject_id, "count": n, "average_score": avg or 0, "minimum_score": lo or 0, "maximum_score": hi or 0}
            for subject_id, n, avg, lo, hi in self.repo.all(stmt)
        ]


class PairAssignmentService(CrudService[ModelT]):
    """Surrogate-keyed link tables between two parents (teacher/subject, ...)."""

    def find_all_filtered(self, **filters) -> List[ModelT]:
        return self.find_all({k: v for k, v in filters.items() if v})

    def find_by(self, field: str, parent_id: int) -> List[ModelT]:
        """List links of one parent; the parent must exist."""
        parent = dict(self.resource.references)[field]
        ensure_exists(self.session, [(parent, parent_id)])
        return self.find_all({field: parent_id})


class TeacherSubjectService(PairAssignmentService[models.TeacherSubject]):
    resource = TEACHER_SUBJECTS

    def find_active_assignments(self) -> List[models.TeacherSubject]:
        """All teacher-subject links ordered by teacher surname, then subject name."""
        link = models.TeacherSubject
        stmt = (
            select(link)
            .join(models.Teacher, link.teacher_id == models.Teacher.teacher_id)
            .join(models.User, models.Teacher.user_id == models.User.user_id)
            .join(models.Subject, link.subject_id == models.Subject.subject_id)
            .options(*self.resource.options())
            .order_by(models.User.user_first_last_name.asc(), models.Subject.subject_name.asc())
        )
        return self.repo.all(stmt)


class TeacherGradeService(PairAssignmentService[models.TeacherGrade]):
    resource = TEACHER_GRADES


class GradeSubjectService(PairAssignmentService[models.GradeSubject]):
    resource = GRADE_SUBJECTS


@dataclass(frozen=True)
class StudentTeacherSubjectKey:
    """Identity of a student-teacher-subject assignment."""
    student_id: int
    teacher_id: int
    subject_id: int
    academic_period: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> "StudentTeacherSubjectKey":
        return cls(values["student_id"], values["teacher_id"], values["subject_id"], values["academic_period"])

    def __str__(self):
        return (f"studentId={self.student_id}, teacherId={self.teacher_id}, "
                f"subjectId={self.subject_id}, academicPeriod={self.academic_period}")


KEY_FIELDS = ("student_id", "teacher_id", "subject_id", "academic_period")

# ORDER BY column names understood by StudentTeacherSubjectService._listing
DEFAULT_ORDER = ("grade", "student_name", "teacher_surname", "subject_name")
STUDENT_ORDER = ("subject_name", "academic_period")
TEACHER_ORDER = ("grade", "student_name", "subject_name")
SUBJECT_ORDER = ("grade", "student_name", "teacher_surname")
GRADE_ORDER = ("student_name", "subject_name", "academic_period")


class StudentTeacherSubjectService:
    """Assignments keyed by (student, teacher, subject, academic period).

    Every mutation reads the assignment by its full key first, so a
    missing tuple is reported as `NotFoundError` rather than inferred
    from an update touching zero rows.
    """

    resource = STUDENT_TEACHER_SUBJECTS
    create_conflict = "This student-teacher-subject assignment already exists for the given academic period"
    update_conflict = "Cannot update: this would create a duplicate assignment"

    def __init__(self, session: Session):
        self.session = session
        self.repo = Repository(session)

    def create(self, data: Payload) -> models.StudentTeacherSubject:
        """Validate the four parents concurrently, apply defaults and insert."""
        values = _as_dict(data)
        key = StudentTeacherSubjectKey.from_values(values)
        self._check_references(values)
        values["assignment_date"] = safe_parse_date(values.get("assignment_date"))
        values.setdefault("is_active", True)
        # a row created earlier in this session sits in the identity map and
        # would make the flush fail before the database could object
        if self.repo.get(self.resource.model, key.as_dict()) is not None:
            raise ConflictError(self.create_conflict, list(KEY_FIELDS))
        try:
            self.repo.insert(self.resource.model(**values))
        except UniqueViolation as exc:
            raise ConflictError(self.create_conflict, exc.fields) from exc
        logger.info("created assignment %s", key)
        return self.find_one(key)

    def find_all(self) -> List[models.StudentTeacherSubject]:
        return self._listing({}, DEFAULT_ORDER)

    def find_one(self, key: StudentTeacherSubjectKey) -> models.StudentTeacherSubject:
        item = self.repo.get(self.resource.model, key.as_dict(), self.resource.options())
        if item is None:
            raise NotFoundError(f"Student-teacher-subject assignment not found for the given key ({key})")
        return item

    def find_by_student(self, student_id: int):
        ensure_exists(self.session, [(STUDENTS, student_id)])
        return self._listing({"student_id": student_id}, STUDENT_ORDER)

    def find_by_teacher(self, teacher_id: int):
        ensure_exists(self.session, [(TEACHERS, teacher_id)])
        return self._listing({"teacher_id": teacher_id}, TEACHER_ORDER)

    def find_by_subject(self, subject_id: int):
        ensure_exists(self.session, [(SUBJECTS, subject_id)])
        return self._listing({"subject_id": subject_id}, SUBJECT_ORDER)

    def find_by_grade(self, grade_id: int):
        ensure_exists(self.session, [(GRADES, grade_id)])
        return self._listing({"grade_id": grade_id}, GRADE_ORDER)

    def find_by_academic_period(self, academic_period: str):
        return self._listing({"academic_period": academic_period}, DEFAULT_ORDER)

    def find_active_assignments(self):
        return self._listing({"is_active": True}, DEFAULT_ORDER)

    def update(self, key: StudentTeacherSubjectKey, data: Payload) -> models.StudentTeacherSubject:
        """Apply a partial update; changing key fields moves the assignment to a new key."""
        item = self.find_one(key)
        values = _as_dict(data, partial=True, model=self.resource.model)
        self._check_references(values)
        if "assignment_date" in values:
            values["assignment_date"] = safe_parse_date(values["assignment_date"])
        new_key = replace(key, **{f: values[f] for f in KEY_FIELDS if f in values})
        if new_key != key and self.repo.get(self.resource.model, new_key.as_dict()) is not None:
            raise ConflictError(self.update_conflict, list(KEY_FIELDS))
        try:
            self.repo.update(item, values)
        except UniqueViolation as exc:
            raise ConflictError(self.update_conflict, exc.fields) from exc
        logger.info("updated assignment %s -> %s", key, new_key)
        return self.find_one(new_key)

    def remove(self, key: StudentTeacherSubjectKey) -> models.StudentTeacherSubject:
        item = self.find_one(key)
        self.repo.delete(item)
        logger.info("deleted assignment %s", key)
        return item

    def toggle_active(self, key: StudentTeacherSubjectKey) -> models.StudentTeacherSubject:
        item = self.find_one(key)
        self.repo.update(item, {"is_active": not item.is_active})
        return self.find_one(key)

    def _check_references(self, values: Mapping[str, Any]) -> None:
        ensure_exists(
            self.session,
            [(parent, values[field]) for field, parent in self.resource.references if field in values],
        )

    def _listing(self, filters: Dict[str, Any], ordering: Sequence[str]) -> List[models.StudentTeacherSubject]:
        assignment = models.StudentTeacherSubject
        student_user = aliased(models.User)
        teacher_user = aliased(models.User)
        columns = {
            "grade": assignment.grade_id,
            "student_name": student_user.user_first_name,
            "teacher_surname": teacher_user.user_first_last_name,
            "subject_name": models.Subject.subject_name,
            "academic_period": assignment.academic_period,
        }
        stmt = (
            select(assignment)
            .join(models.Student, assignment.student_id == models.Student.student_id)
            .join(student_user, models.Student.user_id == student_user.user_id)
            .join(models.Teacher, assignment.teacher_id == models.Teacher.teacher_id)
            .join(teacher_user, models.Teacher.user_id == teacher_user.user_id)
            .join(models.Subject, assignment.subject_id == models.Subject.subject_id)
        )
        for field, value in filters.items():
            stmt = stmt.where(getattr(assignment, field) == value)
        stmt = stmt.options(*self.resource.options()).order_by(*[columns[name].asc() for name in ordering])
        return self.repo.all(stmt)
