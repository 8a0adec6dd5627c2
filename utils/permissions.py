#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 权限解析与访问判定

角色分配 -> (是否管理员, 按作用域分组的权限集合)，以及基于该结果的访问判定。
这里只有纯函数，不访问数据库也不依赖 Flask 请求上下文。
"""

from dataclasses import dataclass, field

from models import RoleKey


@dataclass(frozen=True)
class Scope:
    """权限作用域：全局，或某一个赛事"""
    event_id: int = None

    GLOBAL = None  # 在类定义之后赋值

    @classmethod
    def event(cls, event_id):
        """赛事作用域；全局作用域只能用 Scope.GLOBAL 表示"""
        if event_id is None:
            raise ValueError("赛事作用域需要赛事ID")
        return cls(event_id=event_id)

    @property
    def is_global(self):
        return self.event_id is None

    def __str__(self):
        return 'global' if self.is_global else f'event:{self.event_id}'


Scope.GLOBAL = Scope()


@dataclass(frozen=True)
class RoleAssignment:
    """一条角色分配：角色、作用域以及该角色包含的权限"""
    role_key: str
    scope: Scope = Scope.GLOBAL
    permissions: frozenset = frozenset()


@dataclass(frozen=True)
class AuthContext:
    """当前请求的身份与权限"""
    user_id: int
    is_admin: bool = False
    permissions_by_scope: dict = field(default_factory=dict)

    def permissions_in(self, scope):
        return self.permissions_by_scope.get(scope, frozenset())

    def has_permission(self, permission, scope=Scope.GLOBAL):
        return permission in self.permissions_in(scope)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'is_admin': self.is_admin,
            'permissions': {
                str(scope): sorted(permissions)
                for scope, permissions in self.permissions_by_scope.items()
            },
        }


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    status: int = 200
    reason: str = None

    def __bool__(self):
        return self.allowed


ALLOW = AccessDecision(True)
DENY_UNAUTHENTICATED = AccessDecision(False, 401, 'unauthenticated')
DENY_FORBIDDEN = AccessDecision(False, 403, 'forbidden')


def resolve_permissions(assignments):
    """把角色分配解析为 (is_admin, permissions_by_scope)

    遇到第一条 admin 角色即停止累积；此时后续分配的权限不再收集，
    已收集的部分也无关紧要，因为管理员在判定时直接放行。
    """
    is_admin = False
    collected = {}

    for assignment in assignments:
        if assignment.role_key == RoleKey.ADMIN.value:
            is_admin = True
            break
        # 没有权限的分配也会登记其作用域（集合为空）
        collected.setdefault(assignment.scope, set()).update(assignment.permissions)

    return is_admin, {scope: frozenset(keys) for scope, keys in collected.items()}


def build_auth_context(user_id, assignments):
    is_admin, permissions_by_scope = resolve_permissions(assignments)
    return AuthContext(user_id=user_id, is_admin=is_admin, permissions_by_scope=permissions_by_scope)


def normalize_event_param(value):
    """把请求中的赛事参数规范化为赛事ID；缺失或格式不对时返回 None（仅检查全局权限）"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        value = value.strip()
        if value.isdigit() and int(value) > 0:
            return int(value)
    return None


def authorize(context, permission, event_id=None):
    """访问判定

    依次检查: 未登录(401) -> 管理员 -> 赛事作用域 -> 全局作用域 -> 拒绝(403)
    """
    if context is None:
        return DENY_UNAUTHENTICATED

    if context.is_admin:
        return ALLOW

    permission = getattr(permission, 'value', permission)
    event_id = normalize_event_param(event_id)

    if event_id is not None and context.has_permission(permission, Scope.event(event_id)):
        return ALLOW

    if context.has_permission(permission, Scope.GLOBAL):
        return ALLOW

    return DENY_FORBIDDEN
