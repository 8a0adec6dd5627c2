#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 请求数据校验

把 JSON 请求体解析为创建参数字典或局部更新结构（models.PartialUpdate）。
创建时缺少必填字段、或字段格式不正确，统一抛出 ValidationFailed，
details 中按字段列出全部错误。
"""

import re
from datetime import date

from models import (
    UNSET, EventStage, RegistrationStatus,
    EventUpdate, CategoryUpdate, AgeGroupUpdate, FormatUpdate, JudgeUpdate,
    StudioUpdate, RepresentativeUpdate, DancerUpdate, PerformanceUpdate,
)
from utils.errors import ValidationFailed
from utils.helpers import parse_datetime, parse_date, validate_email, normalize_email

ROLE_KEY_PATTERN = re.compile(r'^[a-z_]+$')
PASSWORD_MIN_LENGTH = 8
NAME_MIN_LENGTH = 2


class Payload:
    """逐字段读取请求体并收集错误

    partial=True 时，未提供的字段返回 UNSET；否则必填字段缺失记为错误。
    """

    def __init__(self, data, partial=False):
        self.data = data if isinstance(data, dict) else {}
        self.partial = partial
        self.errors = {}

    def _missing(self, field, required):
        if field in self.data:
            return False, None
        if self.partial:
            return True, UNSET
        if required:
            self.errors[field] = '必填'
        return True, None

    def text(self, field, required=True, min_length=1, nullable=False):
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = self.data[field]
        if value is None and nullable:
            return None
        if not isinstance(value, str) or len(value.strip()) < min_length:
            self.errors[field] = f'至少 {min_length} 个字符' if min_length > 1 else '不能为空'
            return None
        return value.strip()

    def email(self, field='email', required=True):
        value = self.text(field, required=required)
        if value in (None, UNSET):
            return value
        if not validate_email(value):
            self.errors[field] = '邮箱格式不正确'
            return None
        return normalize_email(value)

    def integer(self, field, required=True, minimum=None, nullable=False):
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = self.data[field]
        if value is None and nullable:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            self.errors[field] = '必须是整数'
            return None
        if minimum is not None and value < minimum:
            self.errors[field] = f'不能小于 {minimum}'
            return None
        return value

    def boolean(self, field, required=False):
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = self.data[field]
        if not isinstance(value, bool):
            self.errors[field] = '必须是布尔值'
            return None
        return value

    def datetime(self, field, required=True):
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = parse_datetime(self.data[field])
        if value is None:
            self.errors[field] = '日期时间格式不正确'
        return value

    def date(self, field, required=True):
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = parse_date(self.data[field])
        if value is None:
            self.errors[field] = '日期格式不正确'
        return value

    def choice(self, field, enum_cls, required=True):
        missing, default = self._missing(field, required)
        if missing:
            return default
        try:
            return enum_cls(self.data[field])
        except ValueError:
            allowed = ', '.join(member.value for member in enum_cls)
            self.errors[field] = f'可选值: {allowed}'
            return None

    def mapping(self, field, required=False):
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = self.data[field]
        if value is not None and not isinstance(value, dict):
            self.errors[field] = '必须是对象'
            return None
        return value

    def id_list(self, field, required=True):
        """非空且不重复的正整数ID列表"""
        missing, default = self._missing(field, required)
        if missing:
            return default
        value = self.data[field]
        if not isinstance(value, list) or not value:
            self.errors[field] = '至少包含一个ID'
            return None
        if any(isinstance(item, bool) or not isinstance(item, int) or item < 1 for item in value):
            self.errors[field] = '必须是正整数ID'
            return None
        if len(set(value)) != len(value):
            self.errors[field] = '不能包含重复ID'
            return None
        return value

    def fail(self, field, message):
        self.errors.setdefault(field, message)

    def check(self):
        if self.errors:
            raise ValidationFailed(details=self.errors)


def _present(value):
    return value is not None and value is not UNSET


def _collect(values):
    """去掉未提供的字段"""
    return {key: value for key, value in values.items() if value is not UNSET}


# ==================== 认证 ====================

def parse_registration(data):
    payload = Payload(data)
    values = {
        'email': payload.email(),
        'password': payload.text('password', min_length=PASSWORD_MIN_LENGTH),
        'name': payload.text('name', min_length=NAME_MIN_LENGTH),
    }
    payload.check()
    return values


def parse_login(data):
    payload = Payload(data)
    values = {'email': payload.email(), 'password': payload.text('password')}
    payload.check()
    return values


# ==================== 赛事 ====================

def parse_event(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'name': payload.text('name'),
        'starts_at': payload.datetime('starts_at'),
        'ends_at': payload.datetime('ends_at'),
        'stage': payload.choice('stage', EventStage, required=False),
    }
    if _present(values['starts_at']) and _present(values['ends_at']) \
            and values['starts_at'] >= values['ends_at']:
        payload.fail('ends_at', '结束时间必须晚于开始时间')
    payload.check()
    if partial:
        return EventUpdate(**_collect(values))
    values['stage'] = values['stage'] or EventStage.PRE_REGISTRATION
    return values


def parse_category(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {'name': payload.text('name')}
    payload.check()
    return CategoryUpdate(**_collect(values)) if partial else values


def parse_age_group(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'name': payload.text('name'),
        'min_age': payload.integer('min_age', minimum=0),
        'max_age': payload.integer('max_age', required=False, minimum=0, nullable=True),
    }
    if _present(values['min_age']) and _present(values['max_age']) \
            and values['min_age'] > values['max_age']:
        payload.fail('max_age', '最小年龄不能大于最大年龄')
    payload.check()
    return AgeGroupUpdate(**_collect(values)) if partial else values


def parse_format(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'name': payload.text('name'),
        'min_participants': payload.integer('min_participants', minimum=1),
        'max_participants': payload.integer('max_participants', minimum=1),
        'max_duration_seconds': payload.integer('max_duration_seconds', minimum=1),
    }
    if _present(values['min_participants']) and _present(values['max_participants']) \
            and values['min_participants'] > values['max_participants']:
        payload.fail('max_participants', '最少人数不能大于最多人数')
    payload.check()
    return FormatUpdate(**_collect(values)) if partial else values


def parse_judge(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'name': payload.text('name'),
        'description': payload.text('description', required=False, nullable=True),
        'country': payload.text('country', required=False, nullable=True),
        'city': payload.text('city', required=False, nullable=True),
    }
    if not partial:
        values['user_id'] = payload.integer('user_id', required=False, minimum=1, nullable=True)
    payload.check()
    return JudgeUpdate(**_collect(values)) if partial else values


# ==================== 舞团 ====================

def parse_studio(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'name': payload.text('name'),
        'country': payload.text('country', required=False, nullable=True),
        'city': payload.text('city', required=False, nullable=True),
        'director_name': payload.text('director_name', required=False, nullable=True),
        'director_phone': payload.text('director_phone', required=False, nullable=True),
        'invoice_details': payload.mapping('invoice_details'),
    }
    if not partial:
        values['representative_name'] = payload.text('representative_name', required=False)
        values['representative_email'] = payload.email('representative_email', required=False)
    payload.check()
    if partial:
        return StudioUpdate(**_collect(values))
    return {key: value for key, value in values.items() if value is not None}


def parse_representative_update(data):
    payload = Payload(data, partial=True)
    values = {'name': payload.text('name'), 'email': payload.email()}
    payload.check()
    return RepresentativeUpdate(**_collect(values))


def parse_registration_status(data):
    payload = Payload(data)
    status = payload.choice('status', RegistrationStatus)
    can_edit = payload.boolean('can_edit_during_review')
    payload.check()
    return status, can_edit


# ==================== 舞者 / 节目 ====================

def parse_dancer(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'first_name': payload.text('first_name'),
        'last_name': payload.text('last_name'),
        'birth_date': payload.date('birth_date'),
    }
    if _present(values['birth_date']) and values['birth_date'] > date.today():
        payload.fail('birth_date', '出生日期不能晚于今天')
    payload.check()
    return DancerUpdate(**_collect(values)) if partial else values


def parse_performance(data, partial=False):
    payload = Payload(data, partial=partial)
    values = {
        'title': payload.text('title'),
        'duration_sec': payload.integer('duration_sec', minimum=1),
        'order_on_stage': payload.integer('order_on_stage', required=False, minimum=1, nullable=True),
        'category_id': payload.integer('category_id', minimum=1),
        'age_group_id': payload.integer('age_group_id', minimum=1),
        'format_id': payload.integer('format_id', minimum=1),
        'dancer_ids': payload.id_list('dancer_ids'),
    }
    payload.check()
    return PerformanceUpdate(**_collect(values)) if partial else values


# ==================== 邀请 / 用户管理 ====================

def parse_invitation(data):
    payload = Payload(data)
    email = payload.email()
    role_key = payload.text('role_key')
    if role_key and not ROLE_KEY_PATTERN.match(role_key):
        payload.fail('role_key', '角色键只能包含小写字母和下划线')
    event_id = payload.integer('event_id', required=False, minimum=1, nullable=True)
    payload.check()
    return {'email': email, 'role_key': role_key, 'event_id': event_id}


def parse_invitation_acceptance(data):
    payload = Payload(data)
    values = {
        'token': payload.text('token'),
        'name': payload.text('name', min_length=NAME_MIN_LENGTH),
        'password': payload.text('password', min_length=PASSWORD_MIN_LENGTH),
    }
    payload.check()
    return values


def parse_role_grant(data):
    payload = Payload(data)
    role_key = payload.text('role_key')
    if role_key and not ROLE_KEY_PATTERN.match(role_key):
        payload.fail('role_key', '角色键只能包含小写字母和下划线')
    event_id = payload.integer('event_id', required=False, minimum=1, nullable=True)
    payload.check()
    return role_key, event_id


def parse_user_status(data):
    payload = Payload(data)
    is_active = payload.boolean('is_active', required=True)
    payload.check()
    return is_active
