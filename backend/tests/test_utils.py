from datetime import date, datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from reportcard import models
from reportcard.config import Settings
from reportcard.repositories import is_foreign_key_violation, unique_fields
from reportcard.utils.dates import safe_parse_date, safe_parse_datetime
from reportcard.utils.query import build_pagination, build_sort, build_status_filter, normalize_status, total_pages


class _PgError(Exception):
    pgcode = "23505"


def _integrity(orig):
    return IntegrityError("INSERT ...", {}, orig)


def test_status_filter():
    assert build_status_filter("active", "role_status") == {"role_status": True}
    assert build_status_filter("inactive", "role_status") == {"role_status": False}
    assert build_status_filter("all", "role_status") == {}
    assert build_status_filter(None, "role_status") == {}
    assert normalize_status("ACTIVE") == "all"


def test_pagination():
    assert build_pagination(1, 10) == (0, 10)
    assert build_pagination(3, 25) == (50, 25)
    assert build_pagination(0, 0) == (0, 1)
    assert total_pages(0, 10) == 0
    assert total_pages(21, 10) == 3


def test_sort_accepts_camel_case_and_falls_back():
    assert str(build_sort(models.User, "userFirstName", "desc", "user_id")) == str(models.User.__table__.c.user_first_name.desc())
    assert str(build_sort(models.User, "password; drop", "asc", "user_id")) == str(models.User.__table__.c.user_id.asc())
    assert str(build_sort(models.User, None, "asc", "user_id")) == str(models.User.__table__.c.user_id.asc())


def test_sort_looks_up_joined_models():
    teacher_id = str(models.Teacher.__table__.c.teacher_id.asc())
    last_name = str(models.User.__table__.c.user_first_last_name.desc())
    assert str(build_sort(models.Teacher, "userFirstLastName", "desc", "teacher_id", joined=(models.User,))) == last_name
    assert str(build_sort(models.Teacher, "userFirstLastName", "asc", "teacher_id")) == teacher_id
    assert str(build_sort(models.Teacher, "teacherHours", "asc", "teacher_id", joined=(models.User,))) == \
        str(models.Teacher.__table__.c.teacher_hours.asc())


def test_parse_datetime():
    parsed = safe_parse_datetime("2024-01-15T10:30:00Z")
    assert parsed == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert safe_parse_datetime(date(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert safe_parse_datetime(None).tzinfo is not None
    with pytest.raises(ValueError, match="Invalid date"):
        safe_parse_datetime("yesterday")


def test_parse_date():
    assert safe_parse_date("2010-05-01") == date(2010, 5, 1)
    assert safe_parse_date(date(2010, 5, 1)) == date(2010, 5, 1)
    assert safe_parse_date(None) == date.today()


def test_unique_fields_from_driver_messages():
    sqlite = _integrity(Exception("UNIQUE constraint failed: teacher_subjects.teacher_id, teacher_subjects.subject_id"))
    assert unique_fields(sqlite) == ["teacher_id", "subject_id"]
    pg = _integrity(_PgError('duplicate key value violates unique constraint "users_user_email_key"\n'
                             'DETAIL:  Key (user_email)=(a@b.co) already exists.'))
    assert unique_fields(pg) == ["user_email"]
    mysql = _integrity(Exception("(1062, \"Duplicate entry 'x' for key 'roles.role_name'\")"))
    assert unique_fields(mysql) == ["role_name"]
    assert unique_fields(_integrity(Exception("NOT NULL constraint failed: roles.role_name"))) is None


def test_foreign_key_detection():
    assert is_foreign_key_violation(_integrity(Exception("FOREIGN KEY constraint failed")))
    assert not is_foreign_key_violation(_integrity(Exception("UNIQUE constraint failed: roles.role_name")))


def test_settings_require_database_url_outside_dev(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        Settings()
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/reportcard")
    settings = Settings()
    assert not settings.is_sqlite
