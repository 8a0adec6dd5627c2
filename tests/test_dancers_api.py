from models import EventStage, RegistrationStatus


DANCER_BODY = {'first_name': 'Olga', 'last_name': 'Petrova', 'birth_date': '2012-06-01'}


def test_representative_adds_dancer_to_approved_studio(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)

    response = client.post(f'/api/studios/{studio.studio_id}/dancers', json=DANCER_BODY,
                           headers=auth_headers(representative))

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['birth_date'] == '2012-06-01'
    assert data['studio_id'] == studio.studio_id


def test_pending_studio_cannot_manage_dancers(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative, status=RegistrationStatus.PENDING)
    headers = auth_headers(representative)

    assert client.post(f'/api/studios/{studio.studio_id}/dancers', json=DANCER_BODY,
                       headers=headers).status_code == 403
    assert client.get(f'/api/studios/{studio.studio_id}/dancers', headers=headers).status_code == 403


def test_review_stage_blocks_dancer_changes_without_override(client, db, representative, auth_headers):
    event = db.add_event(stage=EventStage.DATA_REVIEW)
    locked = db.add_studio(event, representative, name='Locked')
    unlocked = db.add_studio(event, representative, can_edit_during_review=True, name='Unlocked')
    headers = auth_headers(representative)

    response = client.post(f'/api/studios/{locked.studio_id}/dancers', json=DANCER_BODY, headers=headers)
    assert response.status_code == 403
    assert response.get_json()['error'] == 'stage_restricted'

    assert client.post(f'/api/studios/{unlocked.studio_id}/dancers', json=DANCER_BODY,
                       headers=headers).status_code == 201


def test_finalized_event_blocks_representative_but_not_admin(client, db, representative, auth_headers,
                                                            admin_headers):
    event = db.add_event(stage=EventStage.FINALIZED)
    studio = db.add_studio(event, representative, can_edit_during_review=True)
    url = f'/api/studios/{studio.studio_id}/dancers'

    assert client.post(url, json=DANCER_BODY, headers=auth_headers(representative)).status_code == 403
    assert client.post(url, json=DANCER_BODY, headers=admin_headers).status_code == 201


def test_representative_needs_dancer_permission(client, db, event, auth_headers):
    # 舞团代表身份但没有任何角色（报名尚未通过时的常见情况）
    user = db.add_user('no-role@example.com')
    studio = db.add_studio(event, user)

    response = client.post(f'/api/studios/{studio.studio_id}/dancers', json=DANCER_BODY,
                           headers=auth_headers(user))
    assert response.status_code == 403
    assert response.get_json()['error'] == 'forbidden'


def test_other_studio_representative_is_forbidden(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    outsider = db.add_user('outsider@example.com', roles=[('representative', event.event_id)])

    response = client.get(f'/api/studios/{studio.studio_id}/dancers', headers=auth_headers(outsider))
    assert response.status_code == 403


def test_future_birth_date_is_rejected(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    body = dict(DANCER_BODY, birth_date='2999-01-01')

    response = client.post(f'/api/studios/{studio.studio_id}/dancers', json=body,
                           headers=auth_headers(representative))
    assert response.status_code == 400
    assert 'birth_date' in response.get_json()['details']


def test_update_dancer(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    dancer = db.add_dancer(studio)

    response = client.patch(f'/api/dancers/{dancer.dancer_id}', json={'last_name': 'Smirnova'},
                            headers=auth_headers(representative))

    assert response.status_code == 200
    assert response.get_json()['data']['last_name'] == 'Smirnova'
    assert response.get_json()['data']['first_name'] == 'Anna'


def test_deleted_dancer_disappears(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    kept = db.add_dancer(studio, first_name='Kept')
    removed = db.add_dancer(studio, first_name='Removed')
    headers = auth_headers(representative)

    assert client.delete(f'/api/dancers/{removed.dancer_id}', headers=headers).status_code == 200

    listed = client.get(f'/api/studios/{studio.studio_id}/dancers', headers=headers).get_json()['data']
    assert [dancer['dancer_id'] for dancer in listed] == [kept.dancer_id]
    assert client.patch(f'/api/dancers/{removed.dancer_id}', json={'first_name': 'Back'},
                        headers=headers).status_code == 404
    assert client.delete(f'/api/dancers/{removed.dancer_id}', headers=headers).status_code == 404


def test_dancers_of_deleted_studio_are_not_found(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    db.soft_delete_studio(studio.studio_id)

    response = client.get(f'/api/studios/{studio.studio_id}/dancers', headers=auth_headers(representative))
    assert response.status_code == 404
