"""CLI script to seed the default roles (and optionally grade levels).
Usage: python scripts/seed_defaults.py [--grades "1st Grade" "2nd Grade" ...]

Running it twice is harmless: existing rows are left untouched.
"""
import sys
import argparse
import pathlib
from typing import Sequence
# Ensure `backend/` is on sys.path so `reportcard` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from reportcard.database import create_db_and_tables, open_session
from reportcard import services

DEFAULT_ROLES = ("Administrador", "Profesor", "Estudiante")


def seed(session, roles: Sequence[str] = DEFAULT_ROLES, grades: Sequence[str] = ()) -> dict:
    """Create missing roles and grades; return the names that were created."""
    created = {"roles": [], "grades": []}
    role_svc = services.RoleService(session)
    for name in roles:
        if not role_svc.find_all({"role_name": name}):
            role_svc.create({"role_name": name, "role_status": True})
            created["roles"].append(name)
    grade_svc = services.GradeService(session)
    for level in grades:
        if not grade_svc.find_all({"grade_level": level}):
            grade_svc.create({"grade_level": level, "grade_description": level, "grade_status": True})
            created["grades"].append(level)
    return created


def main(grades: Sequence[str] = ()):
    create_db_and_tables()
    with open_session() as session:
        created = seed(session, grades=grades)
    print(f'Created roles: {", ".join(created["roles"]) or "none"}')
    print(f'Created grades: {", ".join(created["grades"]) or "none"}')


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--grades', nargs='*', default=[], help='Grade levels to create if missing')
    args = parser.parse_args()
    main(grades=args.grades)
