from datetime import datetime

from models import EventStage


EVENT_BODY = {'name': '秋季舞蹈公开赛', 'starts_at': '2026-10-01T09:00:00', 'ends_at': '2026-10-02T20:00:00'}


def test_event_list_is_public_and_ordered(client, db):
    db.create_event('Later', datetime(2026, 9, 1), datetime(2026, 9, 2))
    db.create_event('Earlier', datetime(2026, 3, 1), datetime(2026, 3, 2))

    response = client.get('/api/events')

    assert response.status_code == 200
    assert [event['name'] for event in response.get_json()['data']] == ['Earlier', 'Later']


def test_event_list_filters_by_stage(client, db):
    db.add_event(stage=EventStage.FINALIZED, name='Done')
    db.add_event(stage=EventStage.REGISTRATION_OPEN, name='Open')

    data = client.get('/api/events?stage=finalized').get_json()['data']
    assert [event['name'] for event in data] == ['Done']
    assert client.get('/api/events?stage=LATER').status_code == 400


def test_get_event(client, event):
    response = client.get(f'/api/events/{event.event_id}')
    assert response.status_code == 200
    assert response.get_json()['data']['stage'] == 'REGISTRATION_OPEN'
    assert client.get('/api/events/999').status_code == 404


def test_create_event_defaults_stage(client, admin_headers):
    response = client.post('/api/events', json=EVENT_BODY, headers=admin_headers)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['stage'] == 'PRE_REGISTRATION'
    assert data['starts_at'] == '2026-10-01T09:00:00'


def test_create_event_requires_admin(client, db, auth_headers):
    assert client.post('/api/events', json=EVENT_BODY).status_code == 401
    user = db.add_user('rep@example.com', roles=[('representative', None)])
    assert client.post('/api/events', json=EVENT_BODY, headers=auth_headers(user)).status_code == 403


def test_create_event_rejects_inverted_dates(client, admin_headers):
    body = dict(EVENT_BODY, ends_at='2026-09-30T09:00:00')
    response = client.post('/api/events', json=body, headers=admin_headers)
    assert response.status_code == 400
    assert 'ends_at' in response.get_json()['details']


def test_update_event_stage_moves_freely(client, event, admin_headers):
    url = f'/api/events/{event.event_id}'

    assert client.patch(url, json={'stage': 'ENDED'}, headers=admin_headers).get_json()['data']['stage'] == 'ENDED'
    response = client.patch(url, json={'stage': 'PRE_REGISTRATION'}, headers=admin_headers)
    assert response.get_json()['data']['stage'] == 'PRE_REGISTRATION'


def test_update_event_partial_dates_checked_against_existing(client, event, admin_headers):
    url = f'/api/events/{event.event_id}'
    response = client.patch(url, json={'starts_at': '2026-06-01T00:00:00'}, headers=admin_headers)
    assert response.status_code == 400

    response = client.patch(url, json={'name': 'Renamed'}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['name'] == 'Renamed'


def test_update_unknown_event_is_404(client, admin_headers):
    assert client.patch('/api/events/999', json={'name': 'X'}, headers=admin_headers).status_code == 404
