"""Controllers for the relationship tables.

Endpoints implemented:
- /teacher-subjects, /teacher-grades, /grade-subjects: CRUD, listing
  filtered by either side, GET /<resource>/<side>/{id};
  GET /teacher-subjects/active
- /student-teacher-subjects: POST, GET (all), GET by student, teacher,
  subject or grade, GET /academic-period?period=, GET /active, and
  GET /find, PATCH /update, PATCH /toggle-active, DELETE /remove, which
  take the assignment key as query parameters
  (``studentId``, ``teacherId``, ``subjectId``, ``academicPeriod``).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .. import services
from ..dependencies import (
    get_assignment_service,
    get_grade_subject_service,
    get_teacher_grade_service,
    get_teacher_subject_service,
)
from ..schemas import (
    GradeSubjectCreate,
    GradeSubjectRead,
    GradeSubjectUpdate,
    StudentTeacherSubjectCreate,
    StudentTeacherSubjectRead,
    StudentTeacherSubjectUpdate,
    TeacherGradeCreate,
    TeacherGradeRead,
    TeacherGradeUpdate,
    TeacherSubjectCreate,
    TeacherSubjectRead,
    TeacherSubjectUpdate,
)
from . import read_all

teacher_subjects = APIRouter(prefix="/teacher-subjects", tags=["Teacher Subjects"])
teacher_grades = APIRouter(prefix="/teacher-grades", tags=["Teacher Grades"])
grade_subjects = APIRouter(prefix="/grade-subjects", tags=["Grade Subjects"])
assignments = APIRouter(prefix="/student-teacher-subjects", tags=["Student Teacher Subjects"])


def assignment_key(
    student_id: int = Query(alias="studentId", gt=0),
    teacher_id: int = Query(alias="teacherId", gt=0),
    subject_id: int = Query(alias="subjectId", gt=0),
    academic_period: str = Query(alias="academicPeriod", min_length=1),
) -> services.StudentTeacherSubjectKey:
    """Read the assignment key from the query string."""
    return services.StudentTeacherSubjectKey(student_id, teacher_id, subject_id, academic_period)


# ---------- Teacher subjects ----------
@teacher_subjects.post("", response_model=TeacherSubjectRead, status_code=201)
def create_teacher_subject(payload: TeacherSubjectCreate, svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    return TeacherSubjectRead.model_validate(svc.create(payload))


@teacher_subjects.get("", response_model=List[TeacherSubjectRead])
def list_teacher_subjects(
    teacher_id: Optional[int] = Query(None, alias="teacherId"),
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    svc: services.TeacherSubjectService = Depends(get_teacher_subject_service),
):
    return read_all(TeacherSubjectRead, svc.find_all_filtered(teacher_id=teacher_id, subject_id=subject_id))


@teacher_subjects.get("/active", response_model=List[TeacherSubjectRead])
def active_teacher_subjects(svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    """All assignments ordered by teacher surname, then subject name."""
    return read_all(TeacherSubjectRead, svc.find_active_assignments())


@teacher_subjects.get("/teacher/{teacher_id}", response_model=List[TeacherSubjectRead])
def teacher_subjects_by_teacher(teacher_id: int, svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    return read_all(TeacherSubjectRead, svc.find_by("teacher_id", teacher_id))


@teacher_subjects.get("/subject/{subject_id}", response_model=List[TeacherSubjectRead])
def teacher_subjects_by_subject(subject_id: int, svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    return read_all(TeacherSubjectRead, svc.find_by("subject_id", subject_id))


@teacher_subjects.get("/{id}", response_model=TeacherSubjectRead)
def get_teacher_subject(id: int, svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    return TeacherSubjectRead.model_validate(svc.find_one(id))


@teacher_subjects.patch("/{id}", response_model=TeacherSubjectRead)
def update_teacher_subject(id: int, payload: TeacherSubjectUpdate, svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    return TeacherSubjectRead.model_validate(svc.update(id, payload))


@teacher_subjects.delete("/{id}", response_model=TeacherSubjectRead)
def delete_teacher_subject(id: int, svc: services.TeacherSubjectService = Depends(get_teacher_subject_service)):
    return TeacherSubjectRead.model_validate(svc.remove(id))


# ---------- Teacher grades ----------
@teacher_grades.post("", response_model=TeacherGradeRead, status_code=201)
def create_teacher_grade(payload: TeacherGradeCreate, svc: services.TeacherGradeService = Depends(get_teacher_grade_service)):
    return TeacherGradeRead.model_validate(svc.create(payload))


@teacher_grades.get("", response_model=List[TeacherGradeRead])
def list_teacher_grades(
    teacher_id: Optional[int] = Query(None, alias="teacherId"),
    grade_id: Optional[int] = Query(None, alias="gradeId"),
    svc: services.TeacherGradeService = Depends(get_teacher_grade_service),
):
    return read_all(TeacherGradeRead, svc.find_all_filtered(teacher_id=teacher_id, grade_id=grade_id))


@teacher_grades.get("/teacher/{teacher_id}", response_model=List[TeacherGradeRead])
def teacher_grades_by_teacher(teacher_id: int, svc: services.TeacherGradeService = Depends(get_teacher_grade_service)):
    return read_all(TeacherGradeRead, svc.find_by("teacher_id", teacher_id))


@teacher_grades.get("/grade/{grade_id}", response_model=List[TeacherGradeRead])
def teacher_grades_by_grade(grade_id: int, svc: services.TeacherGradeService = Depends(get_teacher_grade_service)):
    return read_all(TeacherGradeRead, svc.find_by("grade_id", grade_id))


@teacher_grades.get("/{id}", response_model=TeacherGradeRead)
def get_teacher_grade(id: int, svc: services.TeacherGradeService = Depends(get_teacher_grade_service)):
    return TeacherGradeRead.model_validate(svc.find_one(id))


@teacher_grades.patch("/{id}", response_model=TeacherGradeRead)
def update_teacher_grade(id: int, payload: TeacherGradeUpdate, svc: services.TeacherGradeService = Depends(get_teacher_grade_service)):
    return TeacherGradeRead.model_validate(svc.update(id, payload))


@teacher_grades.delete("/{id}", response_model=TeacherGradeRead)
def delete_teacher_grade(id: int, svc: services.TeacherGradeService = Depends(get_teacher_grade_service)):
    return TeacherGradeRead.model_validate(svc.remove(id))


# ---------- Grade subjects ----------
@grade_subjects.post("", response_model=GradeSubjectRead, status_code=201)
def create_grade_subject(payload: GradeSubjectCreate, svc: services.GradeSubjectService = Depends(get_grade_subject_service)):
    return GradeSubjectRead.model_validate(svc.create(payload))


@grade_subjects.get("", response_model=List[GradeSubjectRead])
def list_grade_subjects(
    grade_id: Optional[int] = Query(None, alias="gradeId"),
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    svc: services.GradeSubjectService = Depends(get_grade_subject_service),
):
    return read_all(GradeSubjectRead, svc.find_all_filtered(grade_id=grade_id, subject_id=subject_id))


@grade_subjects.get("/grade/{grade_id}", response_model=List[GradeSubjectRead])
def grade_subjects_by_grade(grade_id: int, svc: services.GradeSubjectService = Depends(get_grade_subject_service)):
    """Curriculum of one grade level."""
    return read_all(GradeSubjectRead, svc.find_by("grade_id", grade_id))


@grade_subjects.get("/subject/{subject_id}", response_model=List[GradeSubjectRead])
def grade_subjects_by_subject(subject_id: int, svc: services.GradeSubjectService = Depends(get_grade_subject_service)):
    return read_all(GradeSubjectRead, svc.find_by("subject_id", subject_id))


@grade_subjects.get("/{id}", response_model=GradeSubjectRead)
def get_grade_subject(id: int, svc: services.GradeSubjectService = Depends(get_grade_subject_service)):
    return GradeSubjectRead.model_validate(svc.find_one(id))


@grade_subjects.patch("/{id}", response_model=GradeSubjectRead)
def update_grade_subject(id: int, payload: GradeSubjectUpdate, svc: services.GradeSubjectService = Depends(get_grade_subject_service)):
    return GradeSubjectRead.model_validate(svc.update(id, payload))


@grade_subjects.delete("/{id}", response_model=GradeSubjectRead)
def delete_grade_subject(id: int, svc: services.GradeSubjectService = Depends(get_grade_subject_service)):
    return GradeSubjectRead.model_validate(svc.remove(id))


# ---------- Student / teacher / subject assignments ----------
@assignments.post("", response_model=StudentTeacherSubjectRead, status_code=201)
def create_assignment(
    payload: StudentTeacherSubjectCreate,
    svc: services.StudentTeacherSubjectService = Depends(get_assignment_service),
):
    """Assign a student to a teacher for a subject in an academic period.

    Student, teacher, subject and grade are looked up concurrently; a
    missing one yields 404. ``assignmentDate`` defaults to today and
    ``isActive`` to true. Repeating an existing key yields 409.
    """
    return StudentTeacherSubjectRead.model_validate(svc.create(payload))


@assignments.get("", response_model=List[StudentTeacherSubjectRead])
def list_assignments(svc: services.StudentTeacherSubjectService = Depends(get_assignment_service)):
    return read_all(StudentTeacherSubjectRead, svc.find_all())


@assignments.get("/student/{student_id}", response_model=List[StudentTeacherSubjectRead])
def assignments_by_student(student_id: int, svc: services.StudentTeacherSubjectService = Depends(get_assignment_service)):
    return read_all(StudentTeacherSubjectRead, svc.find_by_student(student_id))


@assignments.get("/teacher/{teacher_id}", response_model=List[StudentTeacherSubjectRead])
def assignments_by_teacher(teacher_id: int, svc: services.StudentTeacherSubjectService = Depends(get_assignment_service)):
    return read_all(StudentTeacherSubjectRead, svc.find_by_teacher(teacher_id))


@assignments.get("/subject/{subject_id}", response_model=List[StudentTeacherSubjectRead])
def assignments_by_subject(subject_id: int, svc: services.StudentTeacherSubjectService = Depends(get_assignment_service)):
    return read_all(StudentTeacherSubjectRead, svc.find_by_subject(subject_id))


@assignments.get("/grade/{grade_id}", response_model=List[StudentTeacherSubjectRead])
def assignments_by_grade(grade_id: int, svc: services.StudentTeacherSubjectService = Depends(get_assignment_service)):
    return read_all(StudentTeacherSubjectRead, svc.find_by_grade(grade_id))


@assignments.get("/academic-period", response_model=List[StudentTeacherSubjectRead])
def assignments_by_period(
    period: str = Query(min_length=1),
    svc: services.StudentTeacherSubjectService = Depends(get_assignment_service),
):
    return read_all(StudentTeacherSubjectRead, svc.find_by_academic_period(period))


@assignments.get("/active", response_model=List[StudentTeacherSubjectRead])
def active_assignments(svc: services.StudentTeacherSubjectService = Depends(get_assignment_service)):
    return read_all(StudentTeacherSubjectRead, svc.find_active_assignments())


@assignments.get("/find", response_model=StudentTeacherSubjectRead)
def find_assignment(
    key: services.StudentTeacherSubjectKey = Depends(assignment_key),
    svc: services.StudentTeacherSubjectService = Depends(get_assignment_service),
):
    return StudentTeacherSubjectRead.model_validate(svc.find_one(key))


@assignments.patch("/update", response_model=StudentTeacherSubjectRead)
def update_assignment(
    payload: StudentTeacherSubjectUpdate,
    key: services.StudentTeacherSubjectKey = Depends(assignment_key),
    svc: services.StudentTeacherSubjectService = Depends(get_assignment_service),
):
    """Partially update an assignment; moving it onto an existing key yields 409."""
    return StudentTeacherSubjectRead.model_validate(svc.update(key, payload))


@assignments.patch("/toggle-active", response_model=StudentTeacherSubjectRead)
def toggle_assignment(
    key: services.StudentTeacherSubjectKey = Depends(assignment_key),
    svc: services.StudentTeacherSubjectService = Depends(get_assignment_service),
):
    return StudentTeacherSubjectRead.model_validate(svc.toggle_active(key))


@assignments.delete("/remove", response_model=StudentTeacherSubjectRead)
def remove_assignment(
    key: services.StudentTeacherSubjectKey = Depends(assignment_key),
    svc: services.StudentTeacherSubjectService = Depends(get_assignment_service),
):
    return StudentTeacherSubjectRead.model_validate(svc.remove(key))
