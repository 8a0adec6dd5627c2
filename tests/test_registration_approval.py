from contextlib import contextmanager
from datetime import datetime, timedelta

import pytest
from mysql.connector import Error

from db_modules.db_invitations import InvitationDbMixin
from db_modules.db_performances import PerformanceDbMixin
from db_modules.db_studios import StudioDbMixin, distinct_active_user_ids
from models import Invitation, Performance, RegistrationStatus, StudioRepresentative
from utils.errors import Conflict, ValidationFailed


class ScriptedCursor:
    """按顺序返回预设查询结果，并记录执行过的语句"""

    def __init__(self, fetchone=(), fetchall=(), rowcounts=(), fail_on=None):
        self._fetchone = list(fetchone)
        self._fetchall = list(fetchall)
        self._rowcounts = list(rowcounts)
        self.fail_on = fail_on
        self.executed = []
        self.rowcount = 1
        self.lastrowid = 100

    def _record(self, kind, sql, params):
        normalized = ' '.join(sql.split())
        self.executed.append((kind, normalized, params))
        if self.fail_on and self.fail_on in normalized:
            raise Error(msg=f'simulated failure: {self.fail_on}')
        self.rowcount = self._rowcounts.pop(0) if self._rowcounts else 1

    def execute(self, sql, params=None):
        self._record('execute', sql, params)

    def executemany(self, sql, seq_params):
        self._record('executemany', sql, list(seq_params))

    def fetchone(self):
        return self._fetchone.pop(0)

    def fetchall(self):
        return self._fetchall.pop(0)

    def statements(self, fragment):
        return [entry for entry in self.executed if fragment in entry[1]]


class TransactionHost:
    """提供 transaction() 的最小宿主，记录提交和回滚"""

    def __init__(self, cursor):
        self.cursor = cursor
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        try:
            yield self.cursor
            self.commits += 1
        except Exception:
            self.rollbacks += 1
            raise


class StudioStore(TransactionHost, StudioDbMixin):
    pass


class InvitationStore(TransactionHost, InvitationDbMixin):
    pass


def registration_row(status, can_edit=False):
    return {
        'registration_id': 1, 'studio_id': 10, 'event_id': 7, 'status': status,
        'can_edit_during_review': can_edit, 'created_at': None, 'updated_at': None,
    }


# ==================== distinct_active_user_ids ====================

def test_distinct_active_user_ids_skips_inactive_and_duplicates():
    reps = [
        {'user_id': 3, 'is_active': True},
        {'user_id': 4, 'is_active': False},
        {'user_id': 3, 'is_active': True},
        {'user_id': 5, 'is_active': 1},
    ]
    assert distinct_active_user_ids(reps) == [3, 5]


def test_distinct_active_user_ids_accepts_model_objects():
    reps = [
        StudioRepresentative(user_id=8, is_active=True),
        StudioRepresentative(user_id=2, is_active=False),
        StudioRepresentative(user_id=8, is_active=True),
    ]
    assert distinct_active_user_ids(reps) == [8]


def test_distinct_active_user_ids_empty():
    assert distinct_active_user_ids([]) == []


# ==================== set_registration_status ====================

def test_approval_grants_event_scoped_role_to_each_active_representative():
    cursor = ScriptedCursor(
        fetchone=[{'role_id': 2}, registration_row('APPROVED')],
        fetchall=[[{'user_id': 3, 'is_active': 1}, {'user_id': 5, 'is_active': 1}, {'user_id': 3, 'is_active': 1}]],
    )
    store = StudioStore(cursor)

    registration = store.set_registration_status(10, 7, RegistrationStatus.APPROVED)

    assert registration.status == RegistrationStatus.APPROVED
    grants = cursor.statements('INSERT IGNORE INTO user_roles')
    assert len(grants) == 1
    assert grants[0][0] == 'executemany'
    assert grants[0][2] == [(3, 2, 7), (5, 2, 7)]
    assert store.commits == 1
    assert store.rollbacks == 0


def test_approval_uses_insert_ignore_so_repeats_do_not_duplicate():
    cursor = ScriptedCursor(
        fetchone=[{'role_id': 2}, registration_row('APPROVED')],
        fetchall=[[{'user_id': 3, 'is_active': 1}]],
    )
    StudioStore(cursor).set_registration_status(10, 7, 'APPROVED')

    grant_sql = cursor.statements('user_roles')[0][1]
    assert grant_sql.startswith('INSERT IGNORE INTO user_roles')


def test_approval_without_representative_role_skips_grant(caplog):
    cursor = ScriptedCursor(fetchone=[None, registration_row('APPROVED')])
    store = StudioStore(cursor)

    with caplog.at_level('WARNING'):
        registration = store.set_registration_status(10, 7, RegistrationStatus.APPROVED)

    assert registration.status == RegistrationStatus.APPROVED
    assert cursor.statements('INSERT IGNORE INTO user_roles') == []
    assert cursor.statements('FROM studio_representatives') == []
    assert store.commits == 1
    assert any('representative' in record.getMessage() for record in caplog.records)


def test_approval_with_no_active_representatives_grants_nothing():
    cursor = ScriptedCursor(fetchone=[{'role_id': 2}, registration_row('APPROVED')], fetchall=[[]])
    StudioStore(cursor).set_registration_status(10, 7, RegistrationStatus.APPROVED)

    assert cursor.statements('INSERT IGNORE INTO user_roles') == []


@pytest.mark.parametrize('status', [RegistrationStatus.PENDING, RegistrationStatus.REJECTED])
def test_non_approval_status_grants_nothing(status):
    cursor = ScriptedCursor(fetchone=[registration_row(status.value)])
    registration = StudioStore(cursor).set_registration_status(10, 7, status)

    assert registration.status == status
    assert cursor.statements('FROM roles') == []
    assert cursor.statements('user_roles') == []


def test_failed_grant_rolls_back_status_change():
    cursor = ScriptedCursor(
        fetchone=[{'role_id': 2}],
        fetchall=[[{'user_id': 3, 'is_active': 1}]],
        fail_on='INSERT IGNORE INTO user_roles',
    )
    store = StudioStore(cursor)

    with pytest.raises(Error):
        store.set_registration_status(10, 7, RegistrationStatus.APPROVED)

    assert store.commits == 0
    assert store.rollbacks == 1


def test_can_edit_flag_is_preserved_when_not_supplied():
    cursor = ScriptedCursor(fetchone=[registration_row('REJECTED', can_edit=True)])
    StudioStore(cursor).set_registration_status(10, 7, RegistrationStatus.REJECTED)

    upsert = cursor.statements('ON DUPLICATE KEY UPDATE')[0]
    assert upsert[2] == (10, 7, 'REJECTED', False, False)


def test_can_edit_flag_is_written_when_supplied():
    cursor = ScriptedCursor(fetchone=[registration_row('PENDING', can_edit=True)])
    registration = StudioStore(cursor).set_registration_status(10, 7, RegistrationStatus.PENDING, True)

    upsert = cursor.statements('ON DUPLICATE KEY UPDATE')[0]
    assert upsert[2] == (10, 7, 'PENDING', True, True)
    assert registration.can_edit_during_review is True


# ==================== accept_invitation ====================

def make_invitation(role_key='judge', event_id=7):
    return Invitation(invitation_id=21, email='new@example.com', role_key=role_key, event_id=event_id,
                      token='t' * 64, created_by=1, expires_at=datetime.now() + timedelta(days=1))


def test_accept_invitation_creates_user_and_grants_role():
    cursor = ScriptedCursor(fetchone=[None, {'role_id': 3}])
    store = InvitationStore(cursor)

    user_id = store.accept_invitation(make_invitation(), 'New Judge', 'hash')

    assert user_id == 100
    assert cursor.statements('INSERT INTO users')
    grant = cursor.statements('INSERT IGNORE INTO user_roles')[0]
    assert grant[2] == (100, 3, 7)
    assert store.commits == 1


def test_accept_invitation_keeps_existing_password():
    cursor = ScriptedCursor(fetchone=[{'user_id': 40, 'password_hash': 'existing'}, {'role_id': 3}])
    user_id = InvitationStore(cursor).accept_invitation(make_invitation(), 'Someone', 'new-hash')

    assert user_id == 40
    assert cursor.statements('UPDATE users') == []
    assert cursor.statements('INSERT INTO users') == []


def test_accept_invitation_with_unknown_role_rolls_back():
    cursor = ScriptedCursor(fetchone=[None, None])
    store = InvitationStore(cursor)

    with pytest.raises(ValidationFailed):
        store.accept_invitation(make_invitation(role_key='stage_manager'), 'Name', 'hash')

    assert store.commits == 0
    assert store.rollbacks == 1


def test_concurrently_used_invitation_conflicts():
    # INSERT users, INSERT user_roles 正常；标记邀请时已被其他请求使用
    cursor = ScriptedCursor(fetchone=[None, {'role_id': 3}], rowcounts=[1, 1, 1, 1, 0])
    store = InvitationStore(cursor)

    with pytest.raises(Conflict):
        store.accept_invitation(make_invitation(), 'Name', 'hash')

    assert store.rollbacks == 1


def test_performance_participants_exclude_deleted_dancers():
    cursor = ScriptedCursor(fetchall=[[]])
    performance = Performance(performance_id=3, event_id=7, studio_id=10, title='Duo')

    PerformanceDbMixin()._attach_dancers(cursor, [performance])

    [(_, sql, params)] = cursor.statements('FROM performance_participants')
    assert 'd.deleted_at IS NULL' in sql
    assert params == (3,)
    assert performance.dancers == []
