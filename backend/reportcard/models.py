"""SQLModel data models.

This module defines the school-records tables using SQLModel. Every
table except `StudentTeacherSubject` has a single integer surrogate
key; the student-teacher-subject assignment is identified by the
(student, teacher, subject, academic period) tuple instead.

Relationships are declared one-way (child -> parent) because responses
only ever embed parents.
"""

from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, date, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(SQLModel, table=True):
    """A system role (administrator, teacher, student, ...)."""
    __tablename__ = "roles"

    role_id: Optional[int] = Field(default=None, primary_key=True)
    role_name: str = Field(max_length=255, unique=True)
    role_status: bool = True


class Grade(SQLModel, table=True):
    """An academic grade level such as "1st Grade"."""
    __tablename__ = "grades"

    grade_id: Optional[int] = Field(default=None, primary_key=True)
    grade_level: str = Field(max_length=255, unique=True)
    grade_description: str = Field(max_length=255)
    grade_status: bool = True


class Subject(SQLModel, table=True):
    """A subject of the curriculum."""
    __tablename__ = "subjects"

    subject_id: Optional[int] = Field(default=None, primary_key=True)
    subject_name: str = Field(max_length=255, unique=True)
    subject_description: str = Field(max_length=255)
    subject_status: bool = True


class User(SQLModel, table=True):
    """A person with an account.

    Fields:
    - `user_email` and `user_ci` (national identity number) are unique
    - `user_password` stores a passlib hash, never plaintext
    """
    __tablename__ = "users"

    user_id: Optional[int] = Field(default=None, primary_key=True)
    user_first_name: str = Field(max_length=255)
    user_second_name: Optional[str] = Field(default=None, max_length=255)
    user_first_last_name: str = Field(max_length=255, index=True)
    user_second_last_name: Optional[str] = Field(default=None, max_length=255)
    user_email: str = Field(max_length=255, unique=True)
    user_ci: int = Field(unique=True)
    user_password: str
    user_date_of_birth: date
    user_address: Optional[str] = None
    user_phone_number: Optional[str] = Field(default=None, max_length=20)
    user_role_id: int = Field(foreign_key="roles.role_id")
    user_status: bool = True
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    role: Optional[Role] = Relationship()


class Student(SQLModel, table=True):
    """Student profile attached to a `User` and enrolled in a `Grade`."""
    __tablename__ = "students"

    student_id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.user_id", unique=True)
    grade_id: int = Field(foreign_key="grades.grade_id", index=True)

    user: Optional[User] = Relationship()
    grade: Optional[Grade] = Relationship()


class Teacher(SQLModel, table=True):
    """Teacher profile attached to a `User`."""
    __tablename__ = "teachers"

    teacher_id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.user_id", unique=True)
    teacher_experience_years: int = 0
    teacher_license_number: str = Field(max_length=50, unique=True)
    teacher_hours: int = 1

    user: Optional[User] = Relationship()


class GradeRecord(SQLModel, table=True):
    """A single evaluation score of a student in a subject."""
    __tablename__ = "grade_records"

    grade_record_id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="students.student_id", index=True)
    subject_id: int = Field(foreign_key="subjects.subject_id", index=True)
    grade_id: int = Field(foreign_key="grades.grade_id", index=True)
    score: float
    max_score: float = 100.0
    grade_type: str = Field(max_length=50)
    evaluation_date: datetime = Field(default_factory=utcnow)
    academic_period: str = Field(max_length=50, index=True)
    comments: Optional[str] = None
    record_status: bool = True
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    student: Optional[Student] = Relationship()
    subject: Optional[Subject] = Relationship()
    grade: Optional[Grade] = Relationship()


class TeacherSubject(SQLModel, table=True):
    """Subjects a teacher is qualified to teach."""
    __tablename__ = "teacher_subjects"
    __table_args__ = (UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),)

    teacher_subject_id: Optional[int] = Field(default=None, primary_key=True)
    teacher_id: int = Field(foreign_key="teachers.teacher_id")
    subject_id: int = Field(foreign_key="subjects.subject_id")
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    teacher: Optional[Teacher] = Relationship()
    subject: Optional[Subject] = Relationship()


class TeacherGrade(SQLModel, table=True):
    """Grade levels a teacher works with."""
    __tablename__ = "teacher_grades"
    __table_args__ = (UniqueConstraint("teacher_id", "grade_id", name="uq_teacher_grade"),)

    teacher_grade_id: Optional[int] = Field(default=None, primary_key=True)
    teacher_id: int = Field(foreign_key="teachers.teacher_id")
    grade_id: int = Field(foreign_key="grades.grade_id")
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    teacher: Optional[Teacher] = Relationship()
    grade: Optional[Grade] = Relationship()


class GradeSubject(SQLModel, table=True):
    """Subjects that make up the curriculum of a grade level."""
    __tablename__ = "grade_subjects"
    __table_args__ = (UniqueConstraint("grade_id", "subject_id", name="uq_grade_subject"),)

    grade_subject_id: Optional[int] = Field(default=None, primary_key=True)
    grade_id: int = Field(foreign_key="grades.grade_id")
    subject_id: int = Field(foreign_key="subjects.subject_id")
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    grade: Optional[Grade] = Relationship()
    subject: Optional[Subject] = Relationship()


class StudentTeacherSubject(SQLModel, table=True):
    """A student assigned to a teacher for a subject in an academic period.

    The primary key is the full (student_id, teacher_id, subject_id,
    academic_period) tuple. `grade_id` records the grade the student was
    in for that period and is not cross-checked against `Student.grade_id`.
    """
    __tablename__ = "student_teacher_subjects"

    student_id: int = Field(foreign_key="students.student_id", primary_key=True)
    teacher_id: int = Field(foreign_key="teachers.teacher_id", primary_key=True)
    subject_id: int = Field(foreign_key="subjects.subject_id", primary_key=True)
    academic_period: str = Field(max_length=50, primary_key=True)
    grade_id: int = Field(foreign_key="grades.grade_id", index=True)
    assignment_date: date = Field(default_factory=date.today)
    is_active: bool = True

    student: Optional[Student] = Relationship()
    teacher: Optional[Teacher] = Relationship()
    subject: Optional[Subject] = Relationship()
    grade: Optional[Grade] = Relationship()
