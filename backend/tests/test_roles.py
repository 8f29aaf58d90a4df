from fastapi.testclient import TestClient
from reportcard.main import app

client = TestClient(app)


def test_create_role_defaults_to_active():
    r = client.post('/roles', json={'roleName': 'Administrator'})
    assert r.status_code == 201
    body = r.json()
    assert isinstance(body['roleId'], int)
    assert body['roleName'] == 'Administrator'
    assert body['roleStatus'] is True


def test_duplicate_role_name_is_conflict():
    client.post('/roles', json={'roleName': 'Administrator'})
    r = client.post('/roles', json={'roleName': 'Administrator'})
    assert r.status_code == 409
    body = r.json()
    assert body['success'] is False
    assert body['statusCode'] == 409
    assert body['error'] == 'Conflict'
    assert body['message'] == 'Role with this roleName already exists'
    assert len(client.get('/roles').json()) == 1


def test_missing_role_is_not_found_for_every_operation():
    r = client.get('/roles/999')
    assert r.status_code == 404
    assert r.json()['message'] == 'Role with ID 999 not found'
    assert r.json()['path'] == '/roles/999'
    assert client.patch('/roles/999', json={'roleName': 'x'}).status_code == 404
    assert client.delete('/roles/999').status_code == 404
    assert client.patch('/roles/999/toggle-status').status_code == 404


def test_toggle_status_twice_restores_value():
    role_id = client.post('/roles', json={'roleName': 'Teacher'}).json()['roleId']
    first = client.patch(f'/roles/{role_id}/toggle-status')
    assert first.status_code == 200
    assert first.json()['roleStatus'] is False
    second = client.patch(f'/roles/{role_id}/toggle-status')
    assert second.json()['roleStatus'] is True


def test_list_filters_by_status():
    a = client.post('/roles', json={'roleName': 'A'}).json()['roleId']
    client.post('/roles', json={'roleName': 'B', 'roleStatus': False})
    active = client.get('/roles', params={'status': 'active'}).json()
    inactive = client.get('/roles', params={'status': 'inactive'}).json()
    assert [r['roleId'] for r in active] == [a]
    assert [r['roleName'] for r in inactive] == ['B']
    # unknown values list everything
    assert len(client.get('/roles', params={'status': 'whatever'}).json()) == 2
    assert [r['roleName'] for r in client.get('/roles').json()] == ['A', 'B']


def test_update_and_delete_return_rows():
    role_id = client.post('/roles', json={'roleName': 'Old'}).json()['roleId']
    r = client.patch(f'/roles/{role_id}', json={'roleName': 'New'})
    assert r.status_code == 200
    assert r.json()['roleName'] == 'New'
    assert r.json()['roleStatus'] is True
    d = client.delete(f'/roles/{role_id}')
    assert d.status_code == 200
    assert d.json()['roleName'] == 'New'
    assert client.get(f'/roles/{role_id}').status_code == 404


def test_deleting_referenced_role_is_conflict():
    role_id = client.post('/roles', json={'roleName': 'Estudiante'}).json()['roleId']
    client.post('/users', json={
        'userFirstName': 'Ana', 'userFirstLastName': 'Rojas', 'userEmail': 'ana@example.com',
        'userCI': 1234567, 'userPassword': 'secret123', 'userDateOfBirth': '2010-05-01',
        'userRoleId': role_id,
    })
    r = client.delete(f'/roles/{role_id}')
    assert r.status_code == 409
    assert client.get(f'/roles/{role_id}').status_code == 200


def test_validation_errors_use_error_envelope():
    r = client.post('/roles', json={})
    assert r.status_code == 400
    body = r.json()
    assert body['success'] is False
    assert body['error'] == 'Bad Request'
    assert isinstance(body['message'], list) and body['message']
    r = client.post('/roles', json={'roleName': 'X', 'unexpected': 1})
    assert r.status_code == 400
    assert client.get('/roles/not-a-number').status_code == 400


def test_request_id_is_echoed():
    r = client.get('/roles', headers={'X-Request-ID': 'abc123'})
    assert r.headers['X-Request-ID'] == 'abc123'
    assert client.get('/health').headers.get('X-Request-ID')


def test_unknown_route_uses_error_envelope():
    r = client.get('/nope')
    assert r.status_code == 404
    assert r.json()['error'] == 'Not Found'
