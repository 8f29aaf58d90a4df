"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Python attributes are snake_case and the
JSON representation is camelCase (``role_name`` <-> ``roleName``);
both spellings are accepted on input.

Input models (`*Create`, `*Update`) reject unknown fields. Output models
(`*Read`) are built from ORM rows with ``from_attributes``.
"""

from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class APIModel(BaseModel):
    """Base for every schema: camelCase aliases, ORM-friendly."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class InputModel(APIModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# ---------- Roles ----------
class RoleCreate(InputModel):
    role_name: str = Field(min_length=1, max_length=255, examples=["Administrator"])
    role_status: bool = True


class RoleUpdate(InputModel):
    role_name: Optional[str] = Field(None, min_length=1, max_length=255)
    role_status: Optional[bool] = None


class RoleRead(APIModel):
    role_id: int
    role_name: str
    role_status: bool


# ---------- Grades ----------
class GradeCreate(InputModel):
    grade_level: str = Field(min_length=1, max_length=255, examples=["1st Grade"])
    grade_description: str = Field(min_length=1, max_length=255)
    grade_status: bool = True


class GradeUpdate(InputModel):
    grade_level: Optional[str] = Field(None, min_length=1, max_length=255)
    grade_description: Optional[str] = Field(None, min_length=1, max_length=255)
    grade_status: Optional[bool] = None


class GradeRead(APIModel):
    grade_id: int
    grade_level: str
    grade_description: str
    grade_status: bool


# ---------- Subjects ----------
class SubjectCreate(InputModel):
    subject_name: str = Field(min_length=1, max_length=255, examples=["Mathematics"])
    subject_description: str = Field(min_length=1, max_length=255)
    subject_status: bool = True


class SubjectUpdate(InputModel):
    subject_name: Optional[str] = Field(None, min_length=1, max_length=255)
    subject_description: Optional[str] = Field(None, min_length=1, max_length=255)
    subject_status: Optional[bool] = None


class SubjectRead(APIModel):
    subject_id: int
    subject_name: str
    subject_description: str
    subject_status: bool


# ---------- Users ----------
class UserCreate(InputModel):
    user_first_name: str = Field(min_length=1, max_length=255, examples=["Juan"])
    user_second_name: Optional[str] = Field(None, max_length=255)
    user_first_last_name: str = Field(min_length=1, max_length=255, examples=["Pérez"])
    user_second_last_name: Optional[str] = Field(None, max_length=255)
    user_email: str = Field(max_length=255, pattern=EMAIL_PATTERN, examples=["juan.perez@example.com"])
    user_ci: int = Field(alias="userCI", ge=1000000, le=999999999, description="National identity number")
    user_password: str = Field(min_length=8, max_length=255)
    user_date_of_birth: date
    user_address: Optional[str] = None
    user_phone_number: Optional[str] = Field(None, max_length=20)
    user_role_id: int = Field(gt=0)


class UserUpdate(InputModel):
    user_first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    user_second_name: Optional[str] = Field(None, max_length=255)
    user_first_last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    user_second_last_name: Optional[str] = Field(None, max_length=255)
    user_email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    user_ci: Optional[int] = Field(None, alias="userCI", ge=1000000, le=999999999)
    user_password: Optional[str] = Field(None, min_length=8, max_length=255)
    user_date_of_birth: Optional[date] = None
    user_address: Optional[str] = None
    user_phone_number: Optional[str] = Field(None, max_length=20)
    user_role_id: Optional[int] = Field(None, gt=0)
    user_status: Optional[bool] = None


class UserRead(APIModel):
    """A user as returned by the API (the password hash is never exposed)."""
    user_id: int
    user_first_name: str
    user_second_name: Optional[str] = None
    user_first_last_name: str
    user_second_last_name: Optional[str] = None
    user_email: str
    user_ci: int = Field(alias="userCI")
    user_date_of_birth: date
    user_address: Optional[str] = None
    user_phone_number: Optional[str] = None
    user_role_id: int
    user_status: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    role: Optional[RoleRead] = None


# ---------- Students ----------
class StudentCreate(InputModel):
    user_id: int = Field(gt=0)
    grade_id: int = Field(gt=0)


class StudentUpdate(InputModel):
    user_id: Optional[int] = Field(None, gt=0)
    grade_id: Optional[int] = Field(None, gt=0)


class StudentBrief(APIModel):
    student_id: int
    user_id: int
    grade_id: int


class StudentRead(StudentBrief):
    user: Optional[UserRead] = None
    grade: Optional[GradeRead] = None


# ---------- Teachers ----------
class TeacherCreate(InputModel):
    user_id: int = Field(gt=0)
    teacher_experience_years: int = Field(ge=0, le=50)
    teacher_license_number: str = Field(min_length=1, max_length=50, examples=["LIC-2024-001"])
    teacher_hours: int = Field(ge=1, le=60, description="Weekly teaching hours")


class TeacherUpdate(InputModel):
    teacher_experience_years: Optional[int] = Field(None, ge=0, le=50)
    teacher_license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    teacher_hours: Optional[int] = Field(None, ge=1, le=60)


class TeacherRead(APIModel):
    teacher_id: int
    user_id: int
    teacher_experience_years: int
    teacher_license_number: str
    teacher_hours: int
    user: Optional[UserRead] = None


# ---------- Grade records ----------
class GradeRecordCreate(InputModel):
    student_id: int = Field(gt=0)
    subject_id: int = Field(gt=0)
    grade_id: int = Field(gt=0)
    score: float = Field(ge=0, le=999.99)
    max_score: float = Field(100.0, ge=0, le=999.99)
    grade_type: str = Field(min_length=1, max_length=50, examples=["Exam"])
    evaluation_date: Optional[datetime] = None
    academic_period: str = Field(min_length=1, max_length=50, examples=["2024-1"])
    comments: Optional[str] = None


class GradeRecordUpdate(InputModel):
    student_id: Optional[int] = Field(None, gt=0)
    subject_id: Optional[int] = Field(None, gt=0)
    grade_id: Optional[int] = Field(None, gt=0)
    score: Optional[float] = Field(None, ge=0, le=999.99)
    max_score: Optional[float] = Field(None, ge=0, le=999.99)
    grade_type: Optional[str] = Field(None, min_length=1, max_length=50)
    evaluation_date: Optional[datetime] = None
    academic_period: Optional[str] = Field(None, min_length=1, max_length=50)
    comments: Optional[str] = None
    record_status: Optional[bool] = None


class GradeRecordBulkUpdateItem(InputModel):
    id: int = Field(gt=0)
    data: GradeRecordUpdate


class GradeRecordRead(APIModel):
    grade_record_id: int
    student_id: int
    subject_id: int
    grade_id: int
    score: float
    max_score: float
    grade_type: str
    evaluation_date: datetime
    academic_period: str
    comments: Optional[str] = None
    record_status: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    student: Optional[StudentBrief] = None
    subject: Optional[SubjectRead] = None
    grade: Optional[GradeRead] = None


class GradeDistribution(APIModel):
    grade_id: int
    count: int
    average_score: float


class GradeStatistics(APIModel):
    total_records: int
    average_score: float
    minimum_score: float
    maximum_score: float
    distribution: List[GradeDistribution]


class SubjectScoreSummary(APIModel):
    subject_id: int
    count: int
    average_score: float
    minimum_score: float
    maximum_score: float


# ---------- Teacher / grade / subject pairs ----------
class TeacherSubjectCreate(InputModel):
    teacher_id: int = Field(gt=0)
    subject_id: int = Field(gt=0)


class TeacherSubjectUpdate(InputModel):
    teacher_id: Optional[int] = Field(None, gt=0)
    subject_id: Optional[int] = Field(None, gt=0)


class TeacherSubjectRead(APIModel):
    teacher_subject_id: int
    teacher_id: int
    subject_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    teacher: Optional[TeacherRead] = None
    subject: Optional[SubjectRead] = None


class TeacherGradeCreate(InputModel):
    teacher_id: int = Field(gt=0)
    grade_id: int = Field(gt=0)


class TeacherGradeUpdate(InputModel):
    teacher_id: Optional[int] = Field(None, gt=0)
    grade_id: Optional[int] = Field(None, gt=0)


class TeacherGradeRead(APIModel):
    teacher_grade_id: int
    teacher_id: int
    grade_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    teacher: Optional[TeacherRead] = None
    grade: Optional[GradeRead] = None


class GradeSubjectCreate(InputModel):
    grade_id: int = Field(gt=0)
    subject_id: int = Field(gt=0)


class GradeSubjectUpdate(InputModel):
    grade_id: Optional[int] = Field(None, gt=0)
    subject_id: Optional[int] = Field(None, gt=0)


class GradeSubjectRead(APIModel):
    grade_subject_id: int
    grade_id: int
    subject_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    grade: Optional[GradeRead] = None
    subject: Optional[SubjectRead] = None


# ---------- Student / teacher / subject assignments ----------
class StudentTeacherSubjectCreate(InputModel):
    student_id: int = Field(gt=0)
    teacher_id: int = Field(gt=0)
    subject_id: int = Field(gt=0)
    grade_id: int = Field(gt=0)
    academic_period: str = Field(min_length=1, max_length=50, examples=["2024-1"])
    assignment_date: Optional[date] = None
    is_active: Optional[bool] = None


class StudentTeacherSubjectUpdate(InputModel):
    student_id: Optional[int] = Field(None, gt=0)
    teacher_id: Optional[int] = Field(None, gt=0)
    subject_id: Optional[int] = Field(None, gt=0)
    grade_id: Optional[int] = Field(None, gt=0)
    academic_period: Optional[str] = Field(None, min_length=1, max_length=50)
    assignment_date: Optional[date] = None
    is_active: Optional[bool] = None


class StudentTeacherSubjectRead(APIModel):
    student_id: int
    teacher_id: int
    subject_id: int
    academic_period: str
    grade_id: int
    assignment_date: date
    is_active: bool
    student: Optional[StudentRead] = None
    teacher: Optional[TeacherRead] = None
    subject: Optional[SubjectRead] = None
    grade: Optional[GradeRead] = None


# ---------- Envelopes ----------
ItemT = TypeVar("ItemT")


class PageMeta(APIModel):
    total: int
    page: int
    limit: int
    total_pages: int


class Page(APIModel, Generic[ItemT]):
    """One page of a paginated search."""
    data: List[ItemT]
    meta: PageMeta


class ErrorResponse(APIModel):
    """Body of every error response."""
    success: bool = False
    message: Union[str, List[str]]
    error: str
    status_code: int
    timestamp: datetime
    path: str
