from copy import copy
from datetime import datetime, date
from itertools import count

import pytest

from app import create_app
from db_modules.db_studios import distinct_active_user_ids
from db_modules.db_users import group_role_rows
from models import (
    User, UserRole, Event, EventStage, DanceCategory, AgeGroup, DanceFormat, Judge,
    Studio, StudioRepresentative, StudioEventRegistration, RegistrationStatus,
    Dancer, Performance, Invitation, RoleKey, ROLE_SEED, ROLE_PERMISSIONS,
)
from utils.errors import Conflict, ValidationFailed
from utils.helpers import generate_password_hash
from utils.storage import LocalStorage


PASSWORD = 'secret-password'


def _apply(target, update):
    for field, value in update.changes().items():
        setattr(target, field, value)
    return target


class FakeDatabase:
    """内存实现的 DatabaseManager，接口与 db_modules 中的 mixin 一致"""

    REFERENCE_ATTRS = {
        'dance_categories': 'category_id',
        'age_groups': 'age_group_id',
        'dance_formats': 'format_id',
    }

    def __init__(self, seed_roles=True):
        self._ids = count(1)
        self.users = {}
        self.roles = {}
        self.user_roles = []
        self.events = {}
        self.categories = {}
        self.age_groups = {}
        self.formats = {}
        self.judges = {}
        self.studios = {}
        self.registrations = {}
        self.dancers = {}
        self.performances = {}
        self.invitations = {}
        if seed_roles:
            for role_key, name, _ in ROLE_SEED:
                self.roles[role_key] = {'role_id': next(self._ids), 'role_key': role_key, 'name': name}

    def _next_id(self):
        return next(self._ids)

    def ping(self):
        return True

    # ==================== 用户 ====================

    def create_user(self, email, name, password_hash=None, is_active=True,
                    email_verified=False, email_verification_token=None):
        user = User(user_id=self._next_id(), email=email, name=name, password_hash=password_hash,
                    is_active=is_active, email_verified=email_verified,
                    email_verification_token=email_verification_token)
        self.users[user.user_id] = user
        return user

    def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    def get_user_by_email(self, email):
        return next((user for user in self.users.values() if user.email == email), None)

    def get_user_by_verification_token(self, token):
        return next((user for user in self.users.values()
                     if token and user.email_verification_token == token), None)

    def mark_email_verified(self, user_id):
        user = self.users[user_id]
        user.email_verified = True
        user.email_verification_token = None
        return True

    def list_users(self):
        return list(self.users.values())

    def set_user_active(self, user_id, is_active):
        self.users[user_id].is_active = bool(is_active)
        return self.users[user_id]

    def _role_key(self, role_id):
        return next(key for key, role in self.roles.items() if role['role_id'] == role_id)

    def get_role_assignments(self, user_id):
        rows = []
        for entry in self.user_roles:
            if entry['user_id'] != user_id:
                continue
            role_key = self._role_key(entry['role_id'])
            permissions = ROLE_PERMISSIONS.get(role_key) or [None]
            for permission_key in permissions:
                rows.append({
                    'user_role_id': entry['user_role_id'],
                    'role_key': role_key,
                    'event_id': entry['event_id'],
                    'permission_key': permission_key,
                })
        return group_role_rows(rows)

    def get_user_roles(self, user_id):
        return [
            UserRole(user_role_id=entry['user_role_id'], user_id=user_id,
                     role_key=self._role_key(entry['role_id']), event_id=entry['event_id'])
            for entry in self.user_roles if entry['user_id'] == user_id
        ]

    def get_role_by_key(self, role_key):
        return self.roles.get(role_key)

    def assign_role(self, user_id, role_id, event_id=None):
        for entry in self.user_roles:
            if (entry['user_id'], entry['role_id'], entry['event_id']) == (user_id, role_id, event_id):
                return False
        self.user_roles.append({'user_role_id': self._next_id(), 'user_id': user_id,
                                'role_id': role_id, 'event_id': event_id})
        return True

    def remove_user_role(self, user_id, user_role_id):
        before = len(self.user_roles)
        self.user_roles = [entry for entry in self.user_roles
                           if not (entry['user_role_id'] == user_role_id and entry['user_id'] == user_id)]
        return len(self.user_roles) < before

    # ==================== 赛事 ====================

    def create_event(self, name, starts_at, ends_at, stage=EventStage.PRE_REGISTRATION):
        event = Event(event_id=self._next_id(), name=name, starts_at=starts_at, ends_at=ends_at, stage=stage)
        self.events[event.event_id] = event
        return event

    def get_event(self, event_id):
        return self.events.get(event_id)

    def list_events(self, stage=None):
        events = [event for event in self.events.values() if stage is None or event.stage == stage]
        return sorted(events, key=lambda event: (event.starts_at, event.event_id))

    def update_event(self, event_id, update):
        return _apply(self.events[event_id], update)

    def update_event_image(self, event_id, image_path, image_url):
        event = self.events[event_id]
        event.image_path, event.image_url = image_path, image_url
        return event

    # ==================== 赛事配置 ====================

    def is_reference_in_use(self, table, reference_id):
        attr = self.REFERENCE_ATTRS[table]
        return any(getattr(p, attr) == reference_id for p in self.performances.values())

    def _list(self, store, event_id):
        return [item for item in store.values() if item.event_id == event_id]

    def list_categories(self, event_id):
        return self._list(self.categories, event_id)

    def get_category(self, category_id):
        return self.categories.get(category_id)

    def category_name_exists(self, event_id, name, exclude_id=None):
        return any(c.event_id == event_id and c.name == name and c.category_id != exclude_id
                   for c in self.categories.values())

    def create_category(self, event_id, name):
        category = DanceCategory(category_id=self._next_id(), event_id=event_id, name=name)
        self.categories[category.category_id] = category
        return category

    def update_category(self, category_id, update):
        return _apply(self.categories[category_id], update)

    def delete_category(self, category_id):
        return self.categories.pop(category_id, None) is not None

    def list_age_groups(self, event_id):
        return self._list(self.age_groups, event_id)

    def get_age_group(self, age_group_id):
        return self.age_groups.get(age_group_id)

    def create_age_group(self, event_id, name, min_age, max_age=None):
        age_group = AgeGroup(age_group_id=self._next_id(), event_id=event_id, name=name,
                             min_age=min_age, max_age=max_age)
        self.age_groups[age_group.age_group_id] = age_group
        return age_group

    def update_age_group(self, age_group_id, update):
        return _apply(self.age_groups[age_group_id], update)

    def delete_age_group(self, age_group_id):
        return self.age_groups.pop(age_group_id, None) is not None

    def list_formats(self, event_id):
        return self._list(self.formats, event_id)

    def get_format(self, format_id):
        return self.formats.get(format_id)

    def create_format(self, event_id, name, min_participants, max_participants, max_duration_seconds):
        dance_format = DanceFormat(format_id=self._next_id(), event_id=event_id, name=name,
                                   min_participants=min_participants, max_participants=max_participants,
                                   max_duration_seconds=max_duration_seconds)
        self.formats[dance_format.format_id] = dance_format
        return dance_format

    def update_format(self, format_id, update):
        return _apply(self.formats[format_id], update)

    def delete_format(self, format_id):
        return self.formats.pop(format_id, None) is not None

    def list_judges(self, event_id):
        return self._list(self.judges, event_id)

    def get_judge(self, judge_id):
        return self.judges.get(judge_id)

    def create_judge(self, event_id, name, description=None, country=None, city=None, user_id=None):
        judge = Judge(judge_id=self._next_id(), event_id=event_id, user_id=user_id, name=name,
                      description=description, country=country, city=city)
        self.judges[judge.judge_id] = judge
        return judge

    def update_judge(self, judge_id, update):
        return _apply(self.judges[judge_id], update)

    def delete_judge(self, judge_id):
        return self.judges.pop(judge_id, None) is not None

    # ==================== 舞团 ====================

    def _live_studio(self, studio_id):
        studio = self.studios.get(studio_id)
        if studio is None or studio.deleted_at is not None:
            return None
        studio.event_stage = self.events[studio.event_id].stage
        studio.registration = self.registrations.get((studio.studio_id, studio.event_id))
        return studio

    def get_studio(self, studio_id):
        return self._live_studio(studio_id)

    def list_studios(self, event_id, representative_user_id=None):
        studios = []
        for studio_id in list(self.studios):
            studio = self._live_studio(studio_id)
            if studio is None or studio.event_id != event_id:
                continue
            if representative_user_id is not None and not studio.is_active_representative(representative_user_id):
                continue
            studios.append(studio)
        return studios

    def create_studio(self, event_id, fields, registration_status, representative=None):
        studio = Studio(studio_id=self._next_id(), event_id=event_id, **fields)
        if representative:
            studio.representatives.append(StudioRepresentative(
                representative_id=self._next_id(), studio_id=studio.studio_id, is_active=True, **representative))
        self.studios[studio.studio_id] = studio
        self.registrations[(studio.studio_id, event_id)] = StudioEventRegistration(
            registration_id=self._next_id(), studio_id=studio.studio_id, event_id=event_id,
            status=registration_status)
        return self.get_studio(studio.studio_id)

    def update_studio(self, studio_id, update):
        _apply(self.studios[studio_id], update)
        return self.get_studio(studio_id)

    def soft_delete_studio(self, studio_id):
        self.studios[studio_id].deleted_at = datetime.now()
        return True

    def update_studio_logo(self, studio_id, logo_path, logo_url):
        studio = self.studios[studio_id]
        studio.logo_path, studio.logo_url = logo_path, logo_url
        return self.get_studio(studio_id)

    def get_representative(self, representative_id):
        for studio in self.studios.values():
            for rep in studio.representatives:
                if rep.representative_id == representative_id:
                    return rep
        return None

    def update_representative(self, representative_id, update):
        return _apply(self.get_representative(representative_id), update)

    def get_registration(self, studio_id, event_id):
        return self.registrations.get((studio_id, event_id))

    def delete_registration(self, studio_id, event_id):
        return self.registrations.pop((studio_id, event_id), None) is not None

    def set_registration_status(self, studio_id, event_id, status, can_edit_during_review=None):
        registration = self.registrations.get((studio_id, event_id))
        if registration is None:
            registration = StudioEventRegistration(registration_id=self._next_id(), studio_id=studio_id,
                                                   event_id=event_id)
            self.registrations[(studio_id, event_id)] = registration
        registration.status = RegistrationStatus(status)
        if can_edit_during_review is not None:
            registration.can_edit_during_review = bool(can_edit_during_review)

        role = self.roles.get(RoleKey.REPRESENTATIVE.value)
        if registration.status == RegistrationStatus.APPROVED and role:
            for user_id in distinct_active_user_ids(self.studios[studio_id].representatives):
                self.assign_role(user_id, role['role_id'], event_id)
        return registration

    # ==================== 舞者 ====================

    def create_dancer(self, studio_id, first_name, last_name, birth_date):
        dancer = Dancer(dancer_id=self._next_id(), studio_id=studio_id, first_name=first_name,
                        last_name=last_name, birth_date=birth_date)
        self.dancers[dancer.dancer_id] = dancer
        return dancer

    def get_dancer(self, dancer_id):
        dancer = self.dancers.get(dancer_id)
        return dancer if dancer is not None and dancer.deleted_at is None else None

    def list_dancers(self, studio_id):
        return [d for d in self.dancers.values() if d.studio_id == studio_id and d.deleted_at is None]

    def get_live_dancer_ids(self, studio_id, dancer_ids):
        return {d.dancer_id for d in self.list_dancers(studio_id) if d.dancer_id in dancer_ids}

    def update_dancer(self, dancer_id, update):
        return _apply(self.dancers[dancer_id], update)

    def soft_delete_dancer(self, dancer_id):
        self.dancers[dancer_id].deleted_at = datetime.now()
        return True

    def update_dancer_photo(self, dancer_id, photo_path, photo_url):
        dancer = self.dancers[dancer_id]
        dancer.photo_path, dancer.photo_url = photo_path, photo_url
        return dancer

    # ==================== 节目 ====================

    def _with_live_dancers(self, performance):
        """读取时只带出未删除的参演舞者（参演记录本身保留）"""
        view = copy(performance)
        view.dancers = [dancer for dancer in performance.dancers if dancer.deleted_at is None]
        return view

    def get_performance(self, performance_id):
        performance = self.performances.get(performance_id)
        return self._with_live_dancers(performance) if performance is not None else None

    def list_performances(self, studio_id):
        return [self._with_live_dancers(p) for p in self.performances.values() if p.studio_id == studio_id]

    def create_performance(self, event_id, studio_id, fields, dancer_ids):
        performance = Performance(performance_id=self._next_id(), event_id=event_id, studio_id=studio_id,
                                  dancers=[self.dancers[i] for i in dancer_ids], **fields)
        self.performances[performance.performance_id] = performance
        return self.get_performance(performance.performance_id)

    def update_performance(self, performance_id, update):
        performance = self.performances[performance_id]
        changes = update.changes()
        dancer_ids = changes.pop('dancer_ids', None)
        for field, value in changes.items():
            setattr(performance, field, value)
        if dancer_ids is not None:
            performance.dancers = [self.dancers[i] for i in dancer_ids]
        return self.get_performance(performance_id)

    def delete_performance(self, performance_id):
        return self.performances.pop(performance_id, None) is not None

    # ==================== 邀请 ====================

    def create_invitation(self, email, role_key, event_id, token, created_by, expires_at):
        invitation = Invitation(invitation_id=self._next_id(), email=email, role_key=role_key,
                                event_id=event_id, token=token, created_by=created_by,
                                expires_at=expires_at, created_at=datetime.now())
        self.invitations[token] = invitation
        return invitation

    def get_invitation_by_token(self, token):
        return self.invitations.get(token)

    def list_invitations(self):
        return list(self.invitations.values())

    def find_active_invitation(self, email, role_key, event_id, now):
        return next((i for i in self.invitations.values()
                     if (i.email, i.role_key, i.event_id) == (email, role_key, event_id)
                     and i.used_at is None and i.expires_at > now), None)

    def email_has_role(self, email, role_key, event_id=None):
        user = self.get_user_by_email(email)
        if not user:
            return False
        return any(role.role_key == role_key and role.event_id == event_id
                   for role in self.get_user_roles(user.user_id))

    def accept_invitation(self, invitation, name, password_hash):
        user = self.get_user_by_email(invitation.email)
        if user is None:
            user = self.create_user(invitation.email, name, password_hash, email_verified=True)
        elif not user.password_hash:
            user.password_hash, user.email_verified, user.is_active = password_hash, True, True

        role = self.roles.get(invitation.role_key)
        if not role:
            raise ValidationFailed(f"角色不存在: {invitation.role_key}")
        self.assign_role(user.user_id, role['role_id'], invitation.event_id)

        if invitation.used_at is not None:
            raise Conflict('邀请已被使用')
        invitation.used_at = datetime.now()
        return user.user_id

    # ==================== 测试数据辅助 ====================

    def add_user(self, email, roles=(), password=PASSWORD, is_active=True):
        """创建用户并分配角色；roles 为 (role_key, event_id) 列表"""
        user = self.create_user(email, email.split('@')[0].title(), generate_password_hash(password),
                                is_active=is_active, email_verified=True)
        for role_key, event_id in roles:
            self.assign_role(user.user_id, self.roles[role_key]['role_id'], event_id)
        return user

    def add_event(self, stage=EventStage.REGISTRATION_OPEN, name='春季舞蹈大赛'):
        return self.create_event(name, datetime(2026, 5, 1, 9), datetime(2026, 5, 3, 18), stage)

    def add_studio(self, event, representative_user=None, status=RegistrationStatus.APPROVED,
                   can_edit_during_review=False, name='星光舞团'):
        representative = None
        if representative_user is not None:
            representative = {'user_id': representative_user.user_id, 'name': representative_user.name,
                              'email': representative_user.email}
        studio = self.create_studio(event.event_id, {'name': name}, status, representative)
        studio.registration.can_edit_during_review = can_edit_during_review
        return studio

    def add_dancer(self, studio, first_name='Anna', last_name='Ivanova'):
        return self.create_dancer(studio.studio_id, first_name, last_name, date(2010, 3, 14))

    def add_event_config(self, event, min_participants=1, max_participants=1, max_duration_seconds=180):
        """返回 (category, age_group, format)"""
        return (
            self.create_category(event.event_id, 'Jazz'),
            self.create_age_group(event.event_id, 'Juniors', 10, 15),
            self.create_format(event.event_id, 'Solo', min_participants, max_participants, max_duration_seconds),
        )


@pytest.fixture()
def db():
    return FakeDatabase()


@pytest.fixture()
def app(db, tmp_path):
    app = create_app('testing', db_manager=db, storage=LocalStorage(tmp_path / 'uploads'))
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers(app):
    """为用户签发 Bearer 令牌的请求头"""
    def make(user):
        token = app.extensions['user_manager'].issue_token(user.user_id)
        return {'Authorization': f'Bearer {token}'}
    return make


@pytest.fixture()
def admin(db):
    return db.add_user('admin@example.com', roles=[(RoleKey.ADMIN.value, None)])


@pytest.fixture()
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture()
def event(db):
    return db.add_event()


@pytest.fixture()
def representative(db):
    """全局舞团代表角色（可以为任意赛事报名）"""
    return db.add_user('rep@example.com', roles=[(RoleKey.REPRESENTATIVE.value, None)])
