from fastapi.testclient import TestClient
from reportcard.main import app
from factories import make_school

client = TestClient(app)


def test_teacher_subject_lifecycle(session):
    school = make_school(session)
    r = client.post('/teacher-subjects', json={'teacherId': school.mendez, 'subjectId': school.math})
    assert r.status_code == 201
    link = r.json()
    assert link['teacher']['user']['userFirstLastName'] == 'Mendez'
    assert link['subject']['subjectName'] == 'Mathematics'
    dup = client.post('/teacher-subjects', json={'teacherId': school.mendez, 'subjectId': school.math})
    assert dup.status_code == 409
    assert dup.json()['message'] == 'This teacher is already assigned to this subject'
    moved = client.patch(f"/teacher-subjects/{link['teacherSubjectId']}", json={'subjectId': school.history})
    assert moved.json()['subject']['subjectName'] == 'History'
    assert client.delete(f"/teacher-subjects/{link['teacherSubjectId']}").status_code == 200
    assert client.get(f"/teacher-subjects/{link['teacherSubjectId']}").status_code == 404


def test_teacher_subject_requires_parents(session):
    school = make_school(session)
    r = client.post('/teacher-subjects', json={'teacherId': 900, 'subjectId': school.math})
    assert r.status_code == 404
    assert r.json()['message'] == 'Teacher with ID 900 not found'
    r = client.post('/teacher-subjects', json={'teacherId': school.mendez, 'subjectId': 901})
    assert r.json()['message'] == 'Subject with ID 901 not found'


def test_teacher_subject_listings(session):
    school = make_school(session)
    client.post('/teacher-subjects', json={'teacherId': school.mendez, 'subjectId': school.math})
    client.post('/teacher-subjects', json={'teacherId': school.mendez, 'subjectId': school.history})
    client.post('/teacher-subjects', json={'teacherId': school.alvarez, 'subjectId': school.math})
    by_teacher = client.get(f'/teacher-subjects/teacher/{school.mendez}').json()
    assert [link['subjectId'] for link in by_teacher] == [school.math, school.history]
    assert len(client.get(f'/teacher-subjects/subject/{school.math}').json()) == 2
    assert client.get('/teacher-subjects/teacher/999').status_code == 404
    filtered = client.get('/teacher-subjects', params={'teacherId': school.alvarez}).json()
    assert [link['subjectId'] for link in filtered] == [school.math]
    active = client.get('/teacher-subjects/active').json()
    assert [(link['teacher']['user']['userFirstLastName'], link['subject']['subjectName']) for link in active] == [
        ('Alvarez', 'Mathematics'), ('Mendez', 'History'), ('Mendez', 'Mathematics'),
    ]


def test_teacher_grades(session):
    school = make_school(session)
    other = client.post('/grades', json={'gradeLevel': '2nd Grade', 'gradeDescription': 'Primary'}).json()['gradeId']
    first = client.post('/teacher-grades', json={'teacherId': school.mendez, 'gradeId': school.grade}).json()
    second = client.post('/teacher-grades', json={'teacherId': school.mendez, 'gradeId': other}).json()
    assert first['grade']['gradeLevel'] == '1st Grade'
    r = client.patch(f"/teacher-grades/{second['teacherGradeId']}", json={'gradeId': school.grade})
    assert r.status_code == 409
    assert r.json()['message'] == 'This teacher is already assigned to this grade'
    assert client.get(f"/teacher-grades/{second['teacherGradeId']}").json()['gradeId'] == other
    assert len(client.get(f'/teacher-grades/teacher/{school.mendez}').json()) == 2
    assert client.get('/teacher-grades/grade/999').status_code == 404


def test_grade_subjects(session):
    school = make_school(session)
    r = client.post('/grade-subjects', json={'gradeId': school.grade, 'subjectId': school.math})
    assert r.status_code == 201
    assert r.json()['grade']['gradeLevel'] == '1st Grade'
    dup = client.post('/grade-subjects', json={'gradeId': school.grade, 'subjectId': school.math})
    assert dup.status_code == 409
    assert dup.json()['message'] == 'This subject is already assigned to this grade'
    client.post('/grade-subjects', json={'gradeId': school.grade, 'subjectId': school.history})
    curriculum = client.get(f'/grade-subjects/grade/{school.grade}').json()
    assert [link['subject']['subjectName'] for link in curriculum] == ['Mathematics', 'History']
    assert client.get('/grade-subjects/subject/999').status_code == 404
    assert client.get('/grade-subjects', params={'subjectId': school.history}).json()[0]['subjectId'] == school.history
