"""Controllers for grades, subjects and grade records.

Endpoints implemented:
- /grades: CRUD (DELETE deactivates the grade), ``?status=`` filter
- /subjects: CRUD, ``?status=`` filter, PATCH /subjects/{id}/toggle-status
- /grade-records: CRUD, POST/PATCH /grade-records/bulk, filtered listing,
  GET /grade-records/student/{studentId}[/summary],
  GET /grade-records/subject/{subjectId}, GET /grade-records/statistics
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from .. import services
from ..dependencies import get_grade_record_service, get_grade_service, get_subject_service
from ..schemas import (
    GradeCreate,
    GradeRead,
    GradeRecordBulkUpdateItem,
    GradeRecordCreate,
    GradeRecordRead,
    GradeRecordUpdate,
    GradeStatistics,
    GradeUpdate,
    SubjectCreate,
    SubjectRead,
    SubjectScoreSummary,
    SubjectUpdate,
)
from . import read_all

grades = APIRouter(prefix="/grades", tags=["Grades"])
subjects = APIRouter(prefix="/subjects", tags=["Subjects"])
grade_records = APIRouter(prefix="/grade-records", tags=["Grade Records"])


# ---------- Grades ----------
@grades.post("", response_model=GradeRead, status_code=201)
def create_grade(payload: GradeCreate, svc: services.GradeService = Depends(get_grade_service)):
    return GradeRead.model_validate(svc.create(payload))


@grades.get("", response_model=List[GradeRead])
def list_grades(status: Optional[str] = None, svc: services.GradeService = Depends(get_grade_service)):
    return read_all(GradeRead, svc.find_all_by_status(status))


@grades.get("/{id}", response_model=GradeRead)
def get_grade(id: int, svc: services.GradeService = Depends(get_grade_service)):
    return GradeRead.model_validate(svc.find_one(id))


@grades.patch("/{id}", response_model=GradeRead)
def update_grade(id: int, payload: GradeUpdate, svc: services.GradeService = Depends(get_grade_service)):
    return GradeRead.model_validate(svc.update(id, payload))


@grades.delete("/{id}", response_model=GradeRead)
def delete_grade(id: int, svc: services.GradeService = Depends(get_grade_service)):
    """Deactivate a grade (``gradeStatus`` becomes false); the row is kept."""
    return GradeRead.model_validate(svc.remove(id))


# ---------- Subjects ----------
@subjects.post("", response_model=SubjectRead, status_code=201)
def create_subject(payload: SubjectCreate, svc: services.SubjectService = Depends(get_subject_service)):
    return SubjectRead.model_validate(svc.create(payload))


@subjects.get("", response_model=List[SubjectRead])
def list_subjects(status: Optional[str] = None, svc: services.SubjectService = Depends(get_subject_service)):
    return read_all(SubjectRead, svc.find_all_by_status(status))


@subjects.get("/{id}", response_model=SubjectRead)
def get_subject(id: int, svc: services.SubjectService = Depends(get_subject_service)):
    return SubjectRead.model_validate(svc.find_one(id))


@subjects.patch("/{id}", response_model=SubjectRead)
def update_subject(id: int, payload: SubjectUpdate, svc: services.SubjectService = Depends(get_subject_service)):
    return SubjectRead.model_validate(svc.update(id, payload))


@subjects.delete("/{id}", response_model=SubjectRead)
def delete_subject(id: int, svc: services.SubjectService = Depends(get_subject_service)):
    return SubjectRead.model_validate(svc.remove(id))


@subjects.patch("/{id}/toggle-status", response_model=SubjectRead)
def toggle_subject_status(id: int, svc: services.SubjectService = Depends(get_subject_service)):
    return SubjectRead.model_validate(svc.toggle_status(id))


# ---------- Grade records ----------
@grade_records.post("", response_model=GradeRecordRead, status_code=201)
def create_grade_record(payload: GradeRecordCreate, svc: services.GradeRecordService = Depends(get_grade_record_service)):
    """Record a score. Student, subject and grade are validated before insert."""
    return GradeRecordRead.model_validate(svc.create(payload))


@grade_records.post("/bulk", response_model=List[GradeRecordRead], status_code=201)
def create_grade_records(
    payload: List[GradeRecordCreate] = Body(...),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    """Insert many records in one transaction; nothing is written if any reference is missing."""
    return read_all(GradeRecordRead, svc.create_many(payload))


@grade_records.patch("/bulk", response_model=List[GradeRecordRead])
def update_grade_records(
    payload: List[GradeRecordBulkUpdateItem] = Body(...),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    return read_all(GradeRecordRead, svc.update_many([(item.id, item.data) for item in payload]))


@grade_records.get("", response_model=List[GradeRecordRead])
def list_grade_records(
    student_id: Optional[int] = Query(None, alias="studentId"),
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    grade_id: Optional[int] = Query(None, alias="gradeId"),
    academic_period: Optional[str] = Query(None, alias="academicPeriod"),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    return read_all(GradeRecordRead, svc.find_all_filtered(student_id, subject_id, grade_id, academic_period))


@grade_records.get("/statistics", response_model=GradeStatistics)
def grade_statistics(
    academic_period: Optional[str] = Query(None, alias="academicPeriod"),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    return GradeStatistics.model_validate(svc.statistics(academic_period))


@grade_records.get("/student/{student_id}", response_model=List[GradeRecordRead])
def grade_records_by_student(
    student_id: int,
    academic_period: Optional[str] = Query(None, alias="academicPeriod"),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    return read_all(GradeRecordRead, svc.find_by_student(student_id, academic_period))


@grade_records.get("/student/{student_id}/summary", response_model=List[SubjectScoreSummary])
def grade_summary_by_student(
    student_id: int,
    academic_period: Optional[str] = Query(None, alias="academicPeriod"),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    return read_all(SubjectScoreSummary, svc.student_summary(student_id, academic_period))


@grade_records.get("/subject/{subject_id}", response_model=List[GradeRecordRead])
def grade_records_by_subject(
    subject_id: int,
    academic_period: Optional[str] = Query(None, alias="academicPeriod"),
    svc: services.GradeRecordService = Depends(get_grade_record_service),
):
    return read_all(GradeRecordRead, svc.find_by_subject(subject_id, academic_period))


@grade_records.get("/{id}", response_model=GradeRecordRead)
def get_grade_record(id: int, svc: services.GradeRecordService = Depends(get_grade_record_service)):
    return GradeRecordRead.model_validate(svc.find_one(id))


@grade_records.patch("/{id}", response_model=GradeRecordRead)
def update_grade_record(id: int, payload: GradeRecordUpdate, svc: services.GradeRecordService = Depends(get_grade_record_service)):
    return GradeRecordRead.model_validate(svc.update(id, payload))


@grade_records.delete("/{id}", response_model=GradeRecordRead)
def delete_grade_record(id: int, svc: services.GradeRecordService = Depends(get_grade_record_service)):
    return GradeRecordRead.model_validate(svc.remove(id))
