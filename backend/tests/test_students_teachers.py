from fastapi.testclient import TestClient
from reportcard.main import app

client = TestClient(app)


def _setup():
    role_id = client.post('/roles', json={'roleName': 'Estudiante'}).json()['roleId']
    grade_id = client.post('/grades', json={'gradeLevel': '1st Grade', 'gradeDescription': 'Primary'}).json()['gradeId']
    return role_id, grade_id


def _user(role_id, n, first='Ana', last='Rojas'):
    return client.post('/users', json={
        'userFirstName': first, 'userFirstLastName': last, 'userEmail': f'user{n}@example.com',
        'userCI': 2000000 + n, 'userPassword': 'secret123', 'userDateOfBirth': '2011-02-03',
        'userRoleId': role_id,
    }).json()['userId']


def test_student_crud_embeds_user_and_grade():
    role_id, grade_id = _setup()
    user_id = _user(role_id, 1)
    r = client.post('/students', json={'userId': user_id, 'gradeId': grade_id})
    assert r.status_code == 201
    student = r.json()
    assert student['user']['userFirstName'] == 'Ana'
    assert student['user']['role']['roleName'] == 'Estudiante'
    assert student['grade']['gradeLevel'] == '1st Grade'
    assert client.get('/students').json()[0]['studentId'] == student['studentId']
    removed = client.delete(f"/students/{student['studentId']}")
    assert removed.status_code == 200
    assert removed.json()['user']['userId'] == user_id
    assert client.get(f"/students/{student['studentId']}").status_code == 404


def test_student_requires_existing_user_and_grade():
    role_id, grade_id = _setup()
    user_id = _user(role_id, 1)
    r = client.post('/students', json={'userId': user_id, 'gradeId': 404})
    assert r.status_code == 404
    assert r.json()['message'] == 'Grade with ID 404 not found'
    r = client.post('/students', json={'userId': 505, 'gradeId': 404})
    assert r.json()['message'] == 'User with ID 505 not found'


def test_one_student_profile_per_user():
    role_id, grade_id = _setup()
    user_id = _user(role_id, 1)
    client.post('/students', json={'userId': user_id, 'gradeId': grade_id})
    assert client.post('/students', json={'userId': user_id, 'gradeId': grade_id}).status_code == 409


def test_students_by_grade_and_by_user():
    role_id, grade_id = _setup()
    other = client.post('/grades', json={'gradeLevel': '2nd Grade', 'gradeDescription': 'Primary'}).json()['gradeId']
    a = _user(role_id, 1)
    b = _user(role_id, 2)
    lonely = _user(role_id, 3)
    client.post('/students', json={'userId': a, 'gradeId': grade_id})
    client.post('/students', json={'userId': b, 'gradeId': other})
    assert [s['userId'] for s in client.get(f'/students/grade/{grade_id}').json()] == [a]
    assert client.get(f'/students/user/{b}').json()['gradeId'] == other
    r = client.get(f'/students/user/{lonely}')
    assert r.status_code == 404
    assert r.json()['message'] == f'Student for user ID {lonely} not found'


def test_student_grade_can_be_changed():
    role_id, grade_id = _setup()
    other = client.post('/grades', json={'gradeLevel': '2nd Grade', 'gradeDescription': 'Primary'}).json()['gradeId']
    student_id = client.post('/students', json={'userId': _user(role_id, 1), 'gradeId': grade_id}).json()['studentId']
    r = client.patch(f'/students/{student_id}', json={'gradeId': other})
    assert r.status_code == 200
    assert r.json()['grade']['gradeLevel'] == '2nd Grade'


def _teacher(user_id, license_number='LIC-2024-001'):
    return client.post('/teachers', json={
        'userId': user_id, 'teacherExperienceYears': 4,
        'teacherLicenseNumber': license_number, 'teacherHours': 20,
    })


def test_teacher_crud():
    role_id, _ = _setup()
    user_id = _user(role_id, 1, 'Carlos', 'Mendez')
    r = _teacher(user_id)
    assert r.status_code == 201
    teacher = r.json()
    assert teacher['user']['userFirstLastName'] == 'Mendez'
    updated = client.patch(f"/teachers/{teacher['teacherId']}", json={'teacherHours': 30})
    assert updated.json()['teacherHours'] == 30
    assert updated.json()['teacherLicenseNumber'] == 'LIC-2024-001'
    assert client.get(f'/teachers/user/{user_id}').json()['teacherId'] == teacher['teacherId']
    assert client.delete(f"/teachers/{teacher['teacherId']}").status_code == 200
    assert client.get(f'/teachers/user/{user_id}').status_code == 404


def test_teacher_validation_and_conflicts():
    role_id, _ = _setup()
    a = _user(role_id, 1)
    b = _user(role_id, 2)
    assert _teacher(999).status_code == 404
    assert _teacher(a).status_code == 201
    assert _teacher(b).status_code == 409  # same licence number
    assert client.post('/teachers', json={
        'userId': b, 'teacherExperienceYears': 4, 'teacherLicenseNumber': 'LIC-9', 'teacherHours': 0,
    }).status_code == 400


def test_teacher_search_uses_user_names():
    role_id, _ = _setup()
    _teacher(_user(role_id, 1, 'Carlos', 'Mendez'), 'LIC-1')
    _teacher(_user(role_id, 2, 'Diana', 'Alvarez'), 'LIC-2')
    r = client.get('/teachers/search', params={'search': 'alva'})
    assert r.status_code == 200
    body = r.json()
    assert body['meta']['total'] == 1
    assert body['data'][0]['user']['userFirstName'] == 'Diana'
    assert client.get('/teachers/search').json()['meta']['total'] == 2


def test_teacher_search_sorts_by_user_columns():
    role_id, _ = _setup()
    _teacher(_user(role_id, 1, 'Carlos', 'Mendez'), 'LIC-1')
    _teacher(_user(role_id, 2, 'Diana', 'Alvarez'), 'LIC-2')
    _teacher(_user(role_id, 3, 'Elena', 'Zapata'), 'LIC-3')
    r = client.get('/teachers/search', params={'sortBy': 'userFirstLastName', 'sortOrder': 'asc'})
    assert [t['user']['userFirstLastName'] for t in r.json()['data']] == ['Alvarez', 'Mendez', 'Zapata']
    r = client.get('/teachers/search', params={'sortBy': 'userFirstLastName', 'sortOrder': 'desc', 'limit': 1})
    assert r.json()['data'][0]['user']['userFirstName'] == 'Elena'
    assert r.json()['meta']['total'] == 3
