"""FastAPI dependency providers.

Each provider builds a service bound to the request's database session.
"""

from fastapi import Depends
from sqlmodel import Session

from . import services
from .database import get_session


def get_role_service(db: Session = Depends(get_session)) -> services.RoleService:
    return services.RoleService(db)


def get_grade_service(db: Session = Depends(get_session)) -> services.GradeService:
    return services.GradeService(db)


def get_subject_service(db: Session = Depends(get_session)) -> services.SubjectService:
    return services.SubjectService(db)


def get_user_service(db: Session = Depends(get_session)) -> services.UserService:
    return services.UserService(db)


def get_student_service(db: Session = Depends(get_session)) -> services.StudentService:
    return services.StudentService(db)


def get_teacher_service(db: Session = Depends(get_session)) -> services.TeacherService:
    return services.TeacherService(db)


def get_grade_record_service(db: Session = Depends(get_session)) -> services.GradeRecordService:
    return services.GradeRecordService(db)


def get_teacher_subject_service(db: Session = Depends(get_session)) -> services.TeacherSubjectService:
    return services.TeacherSubjectService(db)


def get_teacher_grade_service(db: Session = Depends(get_session)) -> services.TeacherGradeService:
    return services.TeacherGradeService(db)


def get_grade_subject_service(db: Session = Depends(get_session)) -> services.GradeSubjectService:
    return services.GradeSubjectService(db)


def get_assignment_service(db: Session = Depends(get_session)) -> services.StudentTeacherSubjectService:
    return services.StudentTeacherSubjectService(db)
