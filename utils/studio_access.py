#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 舞团访问校验

舞团、舞者、节目和图片接口共用的校验：
- 不存在或已软删除的实体一律 404，先于任何归属检查；
- 非管理员必须是舞团的活跃代表；
- 管理舞者/节目还要求报名已通过审核，并受赛事阶段约束。
"""

from models import RegistrationStatus
from utils.errors import NotFound, PermissionDenied, error_for_decision
from utils.extensions import get_db
from utils.permissions import authorize
from utils.stage_checks import StageAction, ensure_action_allowed


def load_studio(studio_id):
    studio = get_db().get_studio(studio_id)
    if not studio:
        raise NotFound('舞团不存在')
    return studio


def require_permission(auth, permission, event_id):
    """按舞团所属赛事做权限判定（视图 URL 中没有赛事ID时使用）"""
    decision = authorize(auth, permission, event_id)
    if not decision.allowed:
        raise error_for_decision(decision)


def require_studio_member(auth, studio):
    """管理员，或舞团的活跃代表"""
    if auth.is_admin:
        return
    if not studio.is_active_representative(auth.user_id):
        raise PermissionDenied()


def require_editable_studio(auth, studio):
    """修改舞团信息：代表的报名不能是已拒绝，且赛事阶段允许修改"""
    require_studio_member(auth, studio)
    if auth.is_admin:
        return
    if studio.registration_status == RegistrationStatus.REJECTED:
        raise PermissionDenied('报名已被拒绝，无法修改舞团信息')
    ensure_action_allowed(studio.event_stage, StageAction.STUDIO_EDIT)


def require_approved_studio(auth, studio):
    """读取舞者/节目：管理员，或已通过审核舞团的活跃代表"""
    require_studio_member(auth, studio)
    if auth.is_admin:
        return
    if not studio.is_approved:
        raise PermissionDenied('舞团报名尚未通过审核')


def require_studio_management(auth, studio, action):
    """修改舞者/节目：在 require_approved_studio 基础上检查赛事阶段（审核阶段看报名的放行开关）"""
    require_approved_studio(auth, studio)
    if auth.is_admin:
        return
    ensure_action_allowed(studio.event_stage, action, studio.can_edit_during_review)


def require_dancer_management(auth, studio):
    require_studio_management(auth, studio, StageAction.DANCER_MANAGE)


def require_performance_management(auth, studio):
    require_studio_management(auth, studio, StageAction.PERFORMANCE_MANAGE)
