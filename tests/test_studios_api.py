from models import EventStage, RegistrationStatus


STUDIO_BODY = {
    'name': '星光舞团',
    'city': 'Shanghai',
    'representative_name': 'Rep One',
    'representative_email': 'rep@example.com',
}


def test_representative_registers_studio_as_pending(client, event, representative, auth_headers):
    response = client.post(f'/api/events/{event.event_id}/studios', json=STUDIO_BODY,
                           headers=auth_headers(representative))

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['registration']['status'] == 'PENDING'
    assert data['representatives'][0]['user_id'] == representative.user_id
    assert data['representatives'][0]['email'] == 'rep@example.com'


def test_registration_closed_stage_is_restricted(client, db, representative, auth_headers):
    event = db.add_event(stage=EventStage.DATA_REVIEW)
    response = client.post(f'/api/events/{event.event_id}/studios', json=STUDIO_BODY,
                           headers=auth_headers(representative))

    assert response.status_code == 403
    assert response.get_json()['error'] == 'stage_restricted'


def test_representative_details_are_required(client, event, representative, auth_headers):
    response = client.post(f'/api/events/{event.event_id}/studios', json={'name': 'No Rep'},
                           headers=auth_headers(representative))
    assert response.status_code == 400
    assert set(response.get_json()['details']) == {'representative_name', 'representative_email'}


def test_admin_created_studio_is_approved_without_representative(client, db, admin_headers):
    event = db.add_event(stage=EventStage.FINALIZED)
    response = client.post(f'/api/events/{event.event_id}/studios', json={'name': 'Admin Studio'},
                           headers=admin_headers)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['registration']['status'] == 'APPROVED'
    assert data['representatives'] == []


def test_user_without_studio_permission_cannot_register(client, db, event, auth_headers):
    user = db.add_user('nobody@example.com')
    response = client.post(f'/api/events/{event.event_id}/studios', json=STUDIO_BODY, headers=auth_headers(user))
    assert response.status_code == 403
    assert response.get_json()['error'] == 'forbidden'


def test_studio_list_is_filtered_for_representatives(client, db, event, representative, admin_headers,
                                                     auth_headers):
    db.add_studio(event, representative, name='Mine')
    db.add_studio(event, db.add_user('other@example.com'), name='Theirs')

    mine = client.get(f'/api/events/{event.event_id}/studios', headers=auth_headers(representative))
    everything = client.get(f'/api/events/{event.event_id}/studios', headers=admin_headers)

    assert [studio['name'] for studio in mine.get_json()['data']] == ['Mine']
    assert len(everything.get_json()['data']) == 2


def test_get_studio_requires_membership(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    stranger = db.add_user('stranger@example.com', roles=[('representative', None)])

    assert client.get(f'/api/studios/{studio.studio_id}', headers=auth_headers(representative)).status_code == 200
    assert client.get(f'/api/studios/{studio.studio_id}', headers=auth_headers(stranger)).status_code == 403


def test_inactive_representative_loses_access(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    studio.representatives[0].is_active = False
    assert client.get(f'/api/studios/{studio.studio_id}', headers=auth_headers(representative)).status_code == 403


def test_soft_deleted_studio_is_not_found(client, db, event, representative, admin_headers, auth_headers):
    studio = db.add_studio(event, representative)

    assert client.delete(f'/api/studios/{studio.studio_id}', headers=admin_headers).status_code == 200
    assert client.get(f'/api/studios/{studio.studio_id}', headers=admin_headers).status_code == 404
    assert client.get(f'/api/studios/{studio.studio_id}', headers=auth_headers(representative)).status_code == 404
    assert client.get(f'/api/events/{event.event_id}/studios', headers=admin_headers).get_json()['data'] == []


def test_representative_updates_studio_during_open_registration(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative, status=RegistrationStatus.PENDING)

    response = client.patch(f'/api/studios/{studio.studio_id}',
                            json={'city': 'Beijing', 'invoice_details': {'tax_id': '91310000'}},
                            headers=auth_headers(representative))

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['city'] == 'Beijing'
    assert data['invoice_details'] == {'tax_id': '91310000'}
    assert data['name'] == '星光舞团'


def test_studio_edit_is_stage_gated(client, db, representative, auth_headers, admin_headers):
    event = db.add_event(stage=EventStage.FINALIZED)
    studio = db.add_studio(event, representative)

    response = client.patch(f'/api/studios/{studio.studio_id}', json={'city': 'X'},
                            headers=auth_headers(representative))
    assert response.status_code == 403
    assert response.get_json()['error'] == 'stage_restricted'

    assert client.patch(f'/api/studios/{studio.studio_id}', json={'city': 'X'},
                        headers=admin_headers).status_code == 200


def test_rejected_studio_cannot_be_edited(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative, status=RegistrationStatus.REJECTED)
    response = client.patch(f'/api/studios/{studio.studio_id}', json={'city': 'X'},
                            headers=auth_headers(representative))
    assert response.status_code == 403
    assert response.get_json()['error'] == 'forbidden'


def test_approval_grants_event_scoped_representative_role(client, db, event, admin_headers, auth_headers):
    rep = db.add_user('fresh@example.com')
    studio = db.add_studio(event, rep, status=RegistrationStatus.PENDING)
    url = f'/api/events/{event.event_id}/studios/{studio.studio_id}/registration'

    response = client.patch(url, json={'status': 'APPROVED'}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'APPROVED'

    roles = db.get_user_roles(rep.user_id)
    assert [(role.role_key, role.event_id) for role in roles] == [('representative', event.event_id)]

    # 再次审核通过不会产生重复的角色分配
    client.patch(url, json={'status': 'APPROVED'}, headers=admin_headers)
    assert len(db.get_user_roles(rep.user_id)) == 1

    # 新角色在下一个请求即生效
    me = client.get('/api/auth/me', headers=auth_headers(rep)).get_json()['data']
    assert 'dancer.manage' in me['permissions'][f'event:{event.event_id}']


def test_approval_without_representative_role_still_updates_status(client, db, event, admin_headers):
    rep = db.add_user('fresh@example.com')
    studio = db.add_studio(event, rep, status=RegistrationStatus.PENDING)
    del db.roles['representative']

    response = client.patch(f'/api/events/{event.event_id}/studios/{studio.studio_id}/registration',
                            json={'status': 'APPROVED'}, headers=admin_headers)

    assert response.status_code == 200
    assert db.get_user_roles(rep.user_id) == []


def test_review_flag_is_kept_unless_supplied(client, db, event, admin_headers):
    studio = db.add_studio(event, status=RegistrationStatus.PENDING)
    url = f'/api/events/{event.event_id}/studios/{studio.studio_id}/registration'

    client.patch(url, json={'status': 'PENDING', 'can_edit_during_review': True}, headers=admin_headers)
    response = client.patch(url, json={'status': 'APPROVED'}, headers=admin_headers)

    assert response.get_json()['data']['can_edit_during_review'] is True


def test_registration_update_requires_admin(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative, status=RegistrationStatus.PENDING)
    response = client.patch(f'/api/events/{event.event_id}/studios/{studio.studio_id}/registration',
                            json={'status': 'APPROVED'}, headers=auth_headers(representative))
    assert response.status_code == 403


def test_registration_for_studio_of_other_event_is_404(client, db, event, admin_headers):
    other = db.add_event(name='Other')
    studio = db.add_studio(other)
    response = client.patch(f'/api/events/{event.event_id}/studios/{studio.studio_id}/registration',
                            json={'status': 'APPROVED'}, headers=admin_headers)
    assert response.status_code == 404


def test_withdraw_pending_registration(client, db, event, representative, auth_headers):
    pending = db.add_studio(event, representative, status=RegistrationStatus.PENDING, name='Pending')
    approved = db.add_studio(event, representative, name='Approved')
    headers = auth_headers(representative)

    url = f'/api/events/{event.event_id}/studios/{{}}/registration'
    assert client.delete(url.format(approved.studio_id), headers=headers).status_code == 409
    assert client.delete(url.format(pending.studio_id), headers=headers).status_code == 200
    assert db.get_registration(pending.studio_id, event.event_id) is None


def test_representative_updates_own_contact_details(client, db, event, representative, auth_headers):
    studio = db.add_studio(event, representative)
    rep_id = studio.representatives[0].representative_id
    url = f'/api/studios/{studio.studio_id}/representatives/{rep_id}'

    response = client.patch(url, json={'name': 'Renamed Rep'}, headers=auth_headers(representative))
    assert response.status_code == 200
    assert response.get_json()['data']['name'] == 'Renamed Rep'

    colleague = db.add_user('colleague@example.com')
    assert client.patch(url, json={'name': 'Hijack'}, headers=auth_headers(colleague)).status_code == 403
    assert client.patch(f'/api/studios/{studio.studio_id}/representatives/999', json={'name': 'X'},
                        headers=auth_headers(representative)).status_code == 404
