#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 赛事阶段校验
"""

from enum import Enum

from models import EventStage
from utils.errors import StageRestricted


class StageAction(Enum):
    """受赛事阶段约束的操作"""
    STUDIO_REGISTER = 'studio.register'
    STUDIO_EDIT = 'studio.edit'
    DANCER_MANAGE = 'dancer.manage'
    PERFORMANCE_MANAGE = 'performance.manage'


# 审核阶段中，只有开启了 can_edit_during_review 的报名才允许这些操作
REVIEW_OVERRIDABLE = frozenset({StageAction.DANCER_MANAGE, StageAction.PERFORMANCE_MANAGE})

ALLOWED_ACTIONS = {
    EventStage.PRE_REGISTRATION: frozenset({StageAction.STUDIO_REGISTER, StageAction.STUDIO_EDIT}),
    EventStage.REGISTRATION_OPEN: frozenset(StageAction),
    EventStage.DATA_REVIEW: frozenset(),
    EventStage.FINALIZED: frozenset(),
    EventStage.ENDED: frozenset(),
}

STAGE_MESSAGES = {
    StageAction.STUDIO_REGISTER: '当前赛事阶段不允许舞团报名',
    StageAction.STUDIO_EDIT: '当前赛事阶段不允许修改舞团信息',
    StageAction.DANCER_MANAGE: '当前赛事阶段不允许管理舞者',
    StageAction.PERFORMANCE_MANAGE: '当前赛事阶段不允许管理节目',
}


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def is_action_allowed(stage, action, can_edit_during_review=False):
    """判断在给定赛事阶段下某个操作是否允许；未知阶段或操作一律返回 False"""
    stage = _coerce(EventStage, stage)
    action = _coerce(StageAction, action)
    if stage is None or action is None:
        return False

    if action in ALLOWED_ACTIONS[stage]:
        return True

    if stage == EventStage.DATA_REVIEW:
        return can_edit_during_review is True and action in REVIEW_OVERRIDABLE

    return False


def stage_message(action):
    """阶段不允许时返回给客户端的提示"""
    action = _coerce(StageAction, action)
    return STAGE_MESSAGES.get(action, '当前赛事阶段不允许该操作')


def ensure_action_allowed(stage, action, can_edit_during_review=False):
    """阶段不允许时抛出 StageRestricted"""
    if not is_action_allowed(stage, action, can_edit_during_review):
        raise StageRestricted(stage_message(action))
