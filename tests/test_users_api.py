def test_list_users_requires_admin(client, db, auth_headers):
    user = db.add_user('plain@example.com')
    assert client.get('/api/users').status_code == 401
    assert client.get('/api/users', headers=auth_headers(user)).status_code == 403


def test_list_users_includes_roles(client, db, admin, admin_headers):
    db.add_user('judge@example.com', roles=[('judge', None)])

    response = client.get('/api/users', headers=admin_headers)

    assert response.status_code == 200
    users = {user['email']: user for user in response.get_json()['data']}
    assert [role['role_key'] for role in users['judge@example.com']['roles']] == ['judge']
    assert [role['role_key'] for role in users['admin@example.com']['roles']] == ['admin']


def test_deactivate_and_reactivate_user(client, db, admin_headers):
    user = db.add_user('plain@example.com')
    url = f'/api/users/{user.user_id}/status'

    response = client.patch(url, json={'is_active': False}, headers=admin_headers)
    assert response.status_code == 200
    assert db.get_user_by_id(user.user_id).is_active is False

    client.patch(url, json={'is_active': True}, headers=admin_headers)
    assert db.get_user_by_id(user.user_id).is_active is True


def test_admin_cannot_deactivate_self(client, admin, admin_headers):
    response = client.patch(f'/api/users/{admin.user_id}/status', json={'is_active': False}, headers=admin_headers)
    assert response.status_code == 400


def test_status_of_unknown_user_is_404(client, admin_headers):
    assert client.patch('/api/users/999/status', json={'is_active': False}, headers=admin_headers).status_code == 404


def test_grant_role_is_idempotent(client, db, admin_headers, event):
    user = db.add_user('judge@example.com')
    url = f'/api/users/{user.user_id}/roles'
    body = {'role_key': 'judge', 'event_id': event.event_id}

    first = client.post(url, json=body, headers=admin_headers)
    second = client.post(url, json=body, headers=admin_headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert len(db.get_user_roles(user.user_id)) == 1


def test_grant_unknown_role_is_400(client, db, admin_headers):
    user = db.add_user('judge@example.com')
    response = client.post(f'/api/users/{user.user_id}/roles', json={'role_key': 'stage_manager'},
                           headers=admin_headers)
    assert response.status_code == 400


def test_grant_role_for_unknown_event_is_404(client, db, admin_headers):
    user = db.add_user('judge@example.com')
    response = client.post(f'/api/users/{user.user_id}/roles', json={'role_key': 'judge', 'event_id': 999},
                           headers=admin_headers)
    assert response.status_code == 404


def test_revoke_role(client, db, admin_headers):
    user = db.add_user('judge@example.com', roles=[('judge', None)])
    user_role_id = db.get_user_roles(user.user_id)[0].user_role_id
    url = f'/api/users/{user.user_id}/roles/{user_role_id}'

    assert client.delete(url, headers=admin_headers).status_code == 200
    assert db.get_user_roles(user.user_id) == []
    assert client.delete(url, headers=admin_headers).status_code == 404
