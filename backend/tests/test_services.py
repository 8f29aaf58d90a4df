import pytest
from sqlmodel import select

from reportcard import models, services
from reportcard.exceptions import ConflictError, NotFoundError, ReferenceViolation
from reportcard.repositories import Repository
from factories import make_grade, make_role, make_school, make_subject


def test_update_and_remove_fail_exactly_when_find_one_fails(session):
    svc = services.RoleService(session)
    role = svc.create({"role_name": "Administrator"})
    for op in (lambda: svc.find_one(999), lambda: svc.update(999, {"role_name": "X"}), lambda: svc.remove(999)):
        with pytest.raises(NotFoundError) as err:
            op()
        assert err.value.message == "Role with ID 999 not found"
    assert svc.update(role.role_id, {"role_name": "Admin"}).role_name == "Admin"
    assert svc.remove(role.role_id).role_name == "Admin"
    assert svc.find_all() == []


def test_find_all_orders_by_id_and_filters_by_equality(session):
    svc = services.SubjectService(session)
    ids = [svc.create({"subject_name": n, "subject_description": n}).subject_id for n in ("Zoology", "Art", "Music")]
    svc.toggle_status(ids[1])
    assert [s.subject_id for s in svc.find_all()] == ids
    assert [s.subject_id for s in svc.find_all({"subject_status": True})] == [ids[0], ids[2]]
    assert svc.find_all({"subject_name": "Nope"}) == []


def test_partial_update_clears_nullable_columns_only(session):
    school = make_school(session)
    updated = services.GradeService(session).update(school.grade, {"grade_description": "Renamed", "grade_level": None})
    assert updated.grade_level == "1st Grade"
    assert updated.grade_description == "Renamed"
    records = services.GradeRecordService(session)
    record = records.create({"student_id": school.ana, "subject_id": school.math, "grade_id": school.grade,
                             "score": 70, "grade_type": "Quiz", "academic_period": "2024-1", "comments": "late"})
    cleared = records.update(record.grade_record_id, {"comments": None, "score": None})
    assert cleared.comments is None
    assert cleared.score == 70


def test_ensure_exists_reports_first_missing_in_order(session):
    grade = make_grade(session)
    subject = make_subject(session)
    services.ensure_exists(session, [(services.GRADES, grade.grade_id), (services.SUBJECTS, subject.subject_id)])
    with pytest.raises(NotFoundError) as err:
        services.ensure_exists(session, [
            (services.GRADES, grade.grade_id),
            (services.SUBJECTS, 41),
            (services.ROLES, 42),
        ])
    assert err.value.message == "Subject with ID 41 not found"


def test_run_concurrently_keeps_result_order(session):
    make_role(session, "A")
    make_role(session, "B")
    queries = [lambda s, n=n: s.exec(select(models.Role).where(models.Role.role_name == n)).first() is not None
               for n in ("A", "missing", "B")]
    assert services.run_concurrently(session, queries) == [True, False, True]
    assert services.run_concurrently(session, []) == []


def test_create_many_validates_every_row_before_writing(session):
    school = make_school(session)
    svc = services.GradeRecordService(session)
    row = {"student_id": school.ana, "subject_id": school.math, "grade_id": school.grade,
           "score": 50, "grade_type": "Quiz", "academic_period": "2024-1"}
    with pytest.raises(NotFoundError) as err:
        svc.create_many([row, dict(row, subject_id=77)])
    assert err.value.message == "Subject with ID 77 not found"
    assert svc.find_all() == []
    created = svc.create_many([row, dict(row, student_id=school.bruno)])
    assert [r.student_id for r in created] == [school.ana, school.bruno]
    assert svc.create_many([]) == []


def test_assignment_duplicate_in_same_session_is_conflict(session):
    school = make_school(session)
    svc = services.StudentTeacherSubjectService(session)
    data = {"student_id": school.ana, "teacher_id": school.mendez, "subject_id": school.math,
            "grade_id": school.grade, "academic_period": "2024-1"}
    created = svc.create(data)
    assert created.is_active is True
    with pytest.raises(ConflictError):
        svc.create(dict(data, is_active=False))
    assert len(svc.find_all()) == 1
    key = services.StudentTeacherSubjectKey(school.ana, school.mendez, school.math, "2024-1")
    assert svc.find_one(key).is_active is True


def test_assignment_toggle_is_an_involution(session):
    school = make_school(session)
    svc = services.StudentTeacherSubjectService(session)
    svc.create({"student_id": school.ana, "teacher_id": school.mendez, "subject_id": school.math,
                "grade_id": school.grade, "academic_period": "2024-1", "is_active": False})
    key = services.StudentTeacherSubjectKey(school.ana, school.mendez, school.math, "2024-1")
    assert svc.toggle_active(key).is_active is True
    assert svc.toggle_active(key).is_active is False


def test_assignment_key_equality_is_structural():
    a = services.StudentTeacherSubjectKey(1, 2, 3, "2024-1")
    assert a == services.StudentTeacherSubjectKey(1, 2, 3, "2024-1")
    assert a != services.StudentTeacherSubjectKey(1, 2, 3, "2024-2")
    assert a.as_dict() == {"student_id": 1, "teacher_id": 2, "subject_id": 3, "academic_period": "2024-1"}


def test_repository_batch_rolls_back_on_error(session):
    repo = Repository(session)
    with pytest.raises(RuntimeError):
        with repo.batch():
            repo.insert(models.Role(role_name="Temp"))
            raise RuntimeError("boom")
    assert repo.list(models.Role) == []


def test_repository_translates_foreign_key_violation(session):
    repo = Repository(session)
    with pytest.raises(ReferenceViolation):
        repo.insert(models.Student(user_id=123, grade_id=456))
    assert repo.list(models.Student) == []


def test_status_operations_need_a_status_field(session):
    with pytest.raises(TypeError):
        services.StudentService(session).find_all_by_status("active")
