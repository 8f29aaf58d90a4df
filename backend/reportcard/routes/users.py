"""Controllers for roles, users, students and teachers.

Endpoints implemented:
- /roles: CRUD, ``?status=`` filter, PATCH /roles/{id}/toggle-status
- /users: CRUD, ``?status=`` filter, GET /users/search (paginated),
  PATCH /users/{id}/toggle-status
- /students: CRUD, GET /students/grade/{gradeId}, GET /students/user/{userId}
- /teachers: CRUD, GET /teachers/search (paginated), GET /teachers/user/{userId}
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from .. import services
from ..dependencies import get_role_service, get_student_service, get_teacher_service, get_user_service
from ..schemas import (
    Page,
    PageMeta,
    RoleCreate,
    RoleRead,
    RoleUpdate,
    StudentCreate,
    StudentRead,
    StudentUpdate,
    TeacherCreate,
    TeacherRead,
    TeacherUpdate,
    UserCreate,
    UserRead,
    UserUpdate,
)
from . import read_all

roles = APIRouter(prefix="/roles", tags=["Roles"])
users = APIRouter(prefix="/users", tags=["Users"])
students = APIRouter(prefix="/students", tags=["Students"])
teachers = APIRouter(prefix="/teachers", tags=["Teachers"])


# ---------- Roles ----------
@roles.post("", response_model=RoleRead, status_code=201)
def create_role(payload: RoleCreate, svc: services.RoleService = Depends(get_role_service)):
    """Create a role; ``roleStatus`` defaults to true."""
    return RoleRead.model_validate(svc.create(payload))


@roles.get("", response_model=List[RoleRead])
def list_roles(status: Optional[str] = None, svc: services.RoleService = Depends(get_role_service)):
    return read_all(RoleRead, svc.find_all_by_status(status))


@roles.get("/{id}", response_model=RoleRead)
def get_role(id: int, svc: services.RoleService = Depends(get_role_service)):
    return RoleRead.model_validate(svc.find_one(id))


@roles.patch("/{id}", response_model=RoleRead)
def update_role(id: int, payload: RoleUpdate, svc: services.RoleService = Depends(get_role_service)):
    return RoleRead.model_validate(svc.update(id, payload))


@roles.delete("/{id}", response_model=RoleRead)
def delete_role(id: int, svc: services.RoleService = Depends(get_role_service)):
    return RoleRead.model_validate(svc.remove(id))


@roles.patch("/{id}/toggle-status", response_model=RoleRead)
def toggle_role_status(id: int, svc: services.RoleService = Depends(get_role_service)):
    return RoleRead.model_validate(svc.toggle_status(id))


# ---------- Users ----------
@users.post("", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, svc: services.UserService = Depends(get_user_service)):
    """Create a user. The password is stored hashed and never returned."""
    return UserRead.model_validate(svc.create(payload))


@users.get("", response_model=List[UserRead])
def list_users(status: Optional[str] = None, svc: services.UserService = Depends(get_user_service)):
    return read_all(UserRead, svc.find_all_by_status(status))


@users.get("/search", response_model=Page[UserRead])
def search_users(
    search: Optional[str] = None,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    svc: services.UserService = Depends(get_user_service),
):
    """Paginated search on first name, first surname and email."""
    result = svc.search(search, status, page, limit, sort_by, sort_order)
    return Page[UserRead](data=read_all(UserRead, result["data"]), meta=PageMeta(**result["meta"]))


@users.get("/{id}", response_model=UserRead)
def get_user(id: int, svc: services.UserService = Depends(get_user_service)):
    return UserRead.model_validate(svc.find_one(id))


@users.patch("/{id}", response_model=UserRead)
def update_user(id: int, payload: UserUpdate, svc: services.UserService = Depends(get_user_service)):
    return UserRead.model_validate(svc.update(id, payload))


@users.delete("/{id}", response_model=UserRead)
def delete_user(id: int, svc: services.UserService = Depends(get_user_service)):
    return UserRead.model_validate(svc.remove(id))


@users.patch("/{id}/toggle-status", response_model=UserRead)
def toggle_user_status(id: int, svc: services.UserService = Depends(get_user_service)):
    return UserRead.model_validate(svc.toggle_status(id))


# ---------- Students ----------
@students.post("", response_model=StudentRead, status_code=201)
def create_student(payload: StudentCreate, svc: services.StudentService = Depends(get_student_service)):
    """Create a student profile; the user and the grade must exist."""
    return StudentRead.model_validate(svc.create(payload))


@students.get("", response_model=List[StudentRead])
def list_students(svc: services.StudentService = Depends(get_student_service)):
    return read_all(StudentRead, svc.find_all())


@students.get("/grade/{grade_id}", response_model=List[StudentRead])
def students_by_grade(grade_id: int, svc: services.StudentService = Depends(get_student_service)):
    return read_all(StudentRead, svc.find_by_grade(grade_id))


@students.get("/user/{user_id}", response_model=StudentRead)
def student_by_user(user_id: int, svc: services.StudentService = Depends(get_student_service)):
    return StudentRead.model_validate(svc.find_by_user(user_id))


@students.get("/{id}", response_model=StudentRead)
def get_student(id: int, svc: services.StudentService = Depends(get_student_service)):
    return StudentRead.model_validate(svc.find_one(id))


@students.patch("/{id}", response_model=StudentRead)
def update_student(id: int, payload: StudentUpdate, svc: services.StudentService = Depends(get_student_service)):
    return StudentRead.model_validate(svc.update(id, payload))


@students.delete("/{id}", response_model=StudentRead)
def delete_student(id: int, svc: services.StudentService = Depends(get_student_service)):
    return StudentRead.model_validate(svc.remove(id))


# ---------- Teachers ----------
@teachers.post("", response_model=TeacherRead, status_code=201)
def create_teacher(payload: TeacherCreate, svc: services.TeacherService = Depends(get_teacher_service)):
    return TeacherRead.model_validate(svc.create(payload))


@teachers.get("", response_model=List[TeacherRead])
def list_teachers(svc: services.TeacherService = Depends(get_teacher_service)):
    return read_all(TeacherRead, svc.find_all())


@teachers.get("/search", response_model=Page[TeacherRead])
def search_teachers(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    svc: services.TeacherService = Depends(get_teacher_service),
):
    """Paginated search on the teacher's user names and email.

    ``sortBy`` may name a teacher column or a column of the linked user.
    """
    result = svc.search(search, page, limit, sort_by, sort_order)
    return Page[TeacherRead](data=read_all(TeacherRead, result["data"]), meta=PageMeta(**result["meta"]))


@teachers.get("/user/{user_id}", response_model=TeacherRead)
def teacher_by_user(user_id: int, svc: services.TeacherService = Depends(get_teacher_service)):
    return TeacherRead.model_validate(svc.find_by_user(user_id))


@teachers.get("/{id}", response_model=TeacherRead)
def get_teacher(id: int, svc: services.TeacherService = Depends(get_teacher_service)):
    return TeacherRead.model_validate(svc.find_one(id))


@teachers.patch("/{id}", response_model=TeacherRead)
def update_teacher(id: int, payload: TeacherUpdate, svc: services.TeacherService = Depends(get_teacher_service)):
    return TeacherRead.model_validate(svc.update(id, payload))


@teachers.delete("/{id}", response_model=TeacherRead)
def delete_teacher(id: int, svc: services.TeacherService = Depends(get_teacher_service)):
    return TeacherRead.model_validate(svc.remove(id))
