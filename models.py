#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 数据库模型定义
"""

import json
from datetime import datetime, date
from enum import Enum


class EventStage(Enum):
    """赛事阶段枚举（阶段决定哪些修改操作合法）"""
    PRE_REGISTRATION = 'PRE_REGISTRATION'    # 报名前
    REGISTRATION_OPEN = 'REGISTRATION_OPEN'  # 报名开放
    DATA_REVIEW = 'DATA_REVIEW'              # 数据审核
    FINALIZED = 'FINALIZED'                  # 已定稿
    ENDED = 'ENDED'                          # 已结束


class RegistrationStatus(Enum):
    """舞团报名审核状态枚举"""
    PENDING = 'PENDING'      # 待审核
    APPROVED = 'APPROVED'    # 已通过
    REJECTED = 'REJECTED'    # 已拒绝


class RoleKey(Enum):
    """系统内置角色"""
    ADMIN = 'admin'                    # 管理员
    REPRESENTATIVE = 'representative'  # 舞团代表
    JUDGE = 'judge'                    # 评委
    MODERATOR = 'moderator'            # 主持/场控


class PermissionKey(Enum):
    """系统内置权限"""
    EVENT_MANAGE = 'event.manage'
    STUDIO_MANAGE = 'studio.manage'
    DANCER_MANAGE = 'dancer.manage'
    PERFORMANCE_MANAGE = 'performance.manage'
    EVENT_REGISTER = 'event.register'
    SCORE_SUBMIT = 'score.submit'


def _iso(value):
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class User:
    """用户模型"""
    def __init__(self, user_id=None, email=None, name=None, password_hash=None,
                 is_active=True, email_verified=False, email_verification_token=None,
                 photo_path=None, photo_url=None, created_at=None, updated_at=None):
        self.user_id = user_id
        self.email = email
        self.name = name
        self.password_hash = password_hash
        self.is_active = bool(is_active)
        self.email_verified = bool(email_verified)
        self.email_verification_token = email_verification_token
        self.photo_path = photo_path
        self.photo_url = photo_url
        self.created_at = created_at or datetime.now()
        self.updated_at = updated_at or datetime.now()

    def can_login(self):
        """检查用户是否可以登录"""
        return self.is_active and bool(self.password_hash)

    def to_dict(self):
        """转换为字典（不包含密码哈希和验证令牌）"""
        return {
            'user_id': self.user_id,
            'email': self.email,
            'name': self.name,
            'is_active': self.is_active,
            'email_verified': self.email_verified,
            'photo_url': self.photo_url,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class UserRole:
    """用户角色分配（event_id 为空表示全局）"""
    def __init__(self, user_role_id=None, user_id=None, role_key=None, role_name=None,
                 event_id=None, event_name=None, created_at=None):
        self.user_role_id = user_role_id
        self.user_id = user_id
        self.role_key = role_key
        self.role_name = role_name
        self.event_id = event_id
        self.event_name = event_name
        self.created_at = created_at

    def to_dict(self):
        return {
            'user_role_id': self.user_role_id,
            'user_id': self.user_id,
            'role_key': self.role_key,
            'role_name': self.role_name,
            'event_id': self.event_id,
            'event_name': self.event_name,
            'created_at': _iso(self.created_at),
        }


class Event:
    """赛事模型"""
    def __init__(self, event_id=None, name=None, starts_at=None, ends_at=None,
                 stage=EventStage.PRE_REGISTRATION, image_path=None, image_url=None,
                 created_at=None, updated_at=None):
        self.event_id = event_id
        self.name = name
        self.starts_at = starts_at
        self.ends_at = ends_at
        self.stage = stage if isinstance(stage, EventStage) else EventStage(stage)
        self.image_path = image_path
        self.image_url = image_url
        self.created_at = created_at or datetime.now()
        self.updated_at = updated_at or datetime.now()

    def to_dict(self):
        """转换为字典"""
        return {
            'event_id': self.event_id,
            'name': self.name,
            'starts_at': _iso(self.starts_at),
            'ends_at': _iso(self.ends_at),
            'stage': self.stage.value,
            'image_url': self.image_url,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class DanceCategory:
    """舞种（赛事内的参考数据）"""
    def __init__(self, category_id=None, event_id=None, name=None):
        self.category_id = category_id
        self.event_id = event_id
        self.name = name

    def to_dict(self):
        return {
            'category_id': self.category_id,
            'event_id': self.event_id,
            'name': self.name,
        }


class AgeGroup:
    """年龄组（max_age 为空表示不设上限）"""
    def __init__(self, age_group_id=None, event_id=None, name=None, min_age=0, max_age=None):
        self.age_group_id = age_group_id
        self.event_id = event_id
        self.name = name
        self.min_age = min_age
        self.max_age = max_age

    def to_dict(self):
        return {
            'age_group_id': self.age_group_id,
            'event_id': self.event_id,
            'name': self.name,
            'min_age': self.min_age,
            'max_age': self.max_age,
        }


class DanceFormat:
    """表演形式（独舞/双人舞/群舞），约束人数和时长"""
    def __init__(self, format_id=None, event_id=None, name=None, min_participants=1,
                 max_participants=1, max_duration_seconds=None):
        self.format_id = format_id
        self.event_id = event_id
        self.name = name
        self.min_participants = min_participants
        self.max_participants = max_participants
        self.max_duration_seconds = max_duration_seconds

    def accepts_participants(self, count):
        return self.min_participants <= count <= self.max_participants

    def to_dict(self):
        return {
            'format_id': self.format_id,
            'event_id': self.event_id,
            'name': self.name,
            'min_participants': self.min_participants,
            'max_participants': self.max_participants,
            'max_duration_seconds': self.max_duration_seconds,
        }


class Judge:
    """评委"""
    def __init__(self, judge_id=None, event_id=None, user_id=None, name=None,
                 description=None, country=None, city=None):
        self.judge_id = judge_id
        self.event_id = event_id
        self.user_id = user_id
        self.name = name
        self.description = description
        self.country = country
        self.city = city

    def to_dict(self):
        return {
            'judge_id': self.judge_id,
            'event_id': self.event_id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'country': self.country,
            'city': self.city,
        }


class StudioRepresentative:
    """舞团代表（只有 is_active 的代表参与权限判断）"""
    def __init__(self, representative_id=None, studio_id=None, user_id=None,
                 name=None, email=None, is_active=True):
        self.representative_id = representative_id
        self.studio_id = studio_id
        self.user_id = user_id
        self.name = name
        self.email = email
        self.is_active = bool(is_active)

    def to_dict(self):
        return {
            'representative_id': self.representative_id,
            'studio_id': self.studio_id,
            'user_id': self.user_id,
            'name': self.name,
            'email': self.email,
            'is_active': self.is_active,
        }


class StudioEventRegistration:
    """舞团报名记录（每个舞团+赛事一条）"""
    def __init__(self, registration_id=None, studio_id=None, event_id=None,
                 status=RegistrationStatus.PENDING, can_edit_during_review=False,
                 created_at=None, updated_at=None):
        self.registration_id = registration_id
        self.studio_id = studio_id
        self.event_id = event_id
        self.status = status if isinstance(status, RegistrationStatus) else RegistrationStatus(status)
        self.can_edit_during_review = bool(can_edit_during_review)
        self.created_at = created_at
        self.updated_at = updated_at

    def to_dict(self):
        return {
            'registration_id': self.registration_id,
            'studio_id': self.studio_id,
            'event_id': self.event_id,
            'status': self.status.value,
            'can_edit_during_review': self.can_edit_during_review,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Studio:
    """舞团模型（软删除）"""
    def __init__(self, studio_id=None, event_id=None, name=None, country=None, city=None,
                 director_name=None, director_phone=None, invoice_details=None,
                 logo_path=None, logo_url=None, deleted_at=None, created_at=None,
                 updated_at=None, representatives=None, registration=None, event_stage=None):
        self.studio_id = studio_id
        self.event_id = event_id
        self.name = name
        self.country = country
        self.city = city
        self.director_name = director_name
        self.director_phone = director_phone
        if isinstance(invoice_details, (str, bytes)):
            invoice_details = json.loads(invoice_details)
        self.invoice_details = invoice_details
        self.logo_path = logo_path
        self.logo_url = logo_url
        self.deleted_at = deleted_at
        self.created_at = created_at
        self.updated_at = updated_at
        self.representatives = representatives or []
        self.registration = registration
        # 所属赛事的当前阶段（随舞团一起查询，用于阶段校验）
        if event_stage is not None and not isinstance(event_stage, EventStage):
            event_stage = EventStage(event_stage)
        self.event_stage = event_stage

    def is_active_representative(self, user_id):
        return any(rep.user_id == user_id and rep.is_active for rep in self.representatives)

    @property
    def registration_status(self):
        return self.registration.status if self.registration else None

    @property
    def is_approved(self):
        return self.registration_status == RegistrationStatus.APPROVED

    @property
    def can_edit_during_review(self):
        return bool(self.registration and self.registration.can_edit_during_review)

    def to_dict(self):
        return {
            'studio_id': self.studio_id,
            'event_id': self.event_id,
            'name': self.name,
            'country': self.country,
            'city': self.city,
            'director_name': self.director_name,
            'director_phone': self.director_phone,
            'invoice_details': self.invoice_details,
            'logo_url': self.logo_url,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'representatives': [rep.to_dict() for rep in self.representatives],
            'registration': self.registration.to_dict() if self.registration else None,
        }


class Dancer:
    """舞者模型（软删除）"""
    def __init__(self, dancer_id=None, studio_id=None, first_name=None, last_name=None,
                 birth_date=None, photo_path=None, photo_url=None, deleted_at=None,
                 created_at=None, updated_at=None):
        self.dancer_id = dancer_id
        self.studio_id = studio_id
        self.first_name = first_name
        self.last_name = last_name
        self.birth_date = birth_date
        self.photo_path = photo_path
        self.photo_url = photo_url
        self.deleted_at = deleted_at
        self.created_at = created_at
        self.updated_at = updated_at

    def to_dict(self):
        return {
            'dancer_id': self.dancer_id,
            'studio_id': self.studio_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'birth_date': _iso(self.birth_date),
            'photo_url': self.photo_url,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Performance:
    """表演节目模型"""
    def __init__(self, performance_id=None, event_id=None, studio_id=None, title=None,
                 duration_sec=None, order_on_stage=None, category_id=None,
                 age_group_id=None, format_id=None, dancers=None,
                 created_at=None, updated_at=None):
        self.performance_id = performance_id
        self.event_id = event_id
        self.studio_id = studio_id
        self.title = title
        self.duration_sec = duration_sec
        self.order_on_stage = order_on_stage
        self.category_id = category_id
        self.age_group_id = age_group_id
        self.format_id = format_id
        self.dancers = dancers or []
        self.created_at = created_at
        self.updated_at = updated_at

    def to_dict(self):
        return {
            'performance_id': self.performance_id,
            'event_id': self.event_id,
            'studio_id': self.studio_id,
            'title': self.title,
            'duration_sec': self.duration_sec,
            'order_on_stage': self.order_on_stage,
            'category_id': self.category_id,
            'age_group_id': self.age_group_id,
            'format_id': self.format_id,
            'dancers': [dancer.to_dict() for dancer in self.dancers],
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Invitation:
    """邀请（一次性令牌，绑定邮箱、角色和可选的赛事范围）"""
    def __init__(self, invitation_id=None, email=None, role_key=None, event_id=None,
                 token=None, created_by=None, expires_at=None, used_at=None,
                 created_at=None, event_name=None):
        self.invitation_id = invitation_id
        self.email = email
        self.role_key = role_key
        self.event_id = event_id
        self.token = token
        self.created_by = created_by
        self.expires_at = expires_at
        self.used_at = used_at
        self.created_at = created_at
        self.event_name = event_name

    @property
    def is_used(self):
        return self.used_at is not None

    def is_expired(self, now=None):
        return self.expires_at < (now or datetime.now())

    def is_pending(self, now=None):
        """未使用且未过期"""
        return not self.is_used and not self.is_expired(now)

    def to_dict(self, include_token=False):
        data = {
            'invitation_id': self.invitation_id,
            'email': self.email,
            'role_key': self.role_key,
            'event_id': self.event_id,
            'event_name': self.event_name,
            'created_by': self.created_by,
            'expires_at': _iso(self.expires_at),
            'used_at': _iso(self.used_at),
            'created_at': _iso(self.created_at),
        }
        if include_token:
            data['token'] = self.token
        return data


# ==================== 局部更新结构 ====================

class _Unset:
    """未提供的字段（与显式的 None 区分）"""
    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()


class PartialUpdate:
    """局部更新的基类：只有客户端显式提供的字段才会写入数据库"""

    FIELDS = ()

    def __init__(self, **values):
        unknown = set(values) - set(self.FIELDS)
        if unknown:
            raise TypeError(f"{type(self).__name__} 不支持字段: {', '.join(sorted(unknown))}")
        for field in self.FIELDS:
            setattr(self, field, values.get(field, UNSET))

    def changes(self):
        """返回已设置字段的字典"""
        return {
            field: getattr(self, field)
            for field in self.FIELDS
            if getattr(self, field) is not UNSET
        }

    def __repr__(self):
        return f"{type(self).__name__}({self.changes()!r})"


class EventUpdate(PartialUpdate):
    FIELDS = ('name', 'starts_at', 'ends_at', 'stage')


class CategoryUpdate(PartialUpdate):
    FIELDS = ('name',)


class AgeGroupUpdate(PartialUpdate):
    FIELDS = ('name', 'min_age', 'max_age')


class FormatUpdate(PartialUpdate):
    FIELDS = ('name', 'min_participants', 'max_participants', 'max_duration_seconds')


class JudgeUpdate(PartialUpdate):
    FIELDS = ('name', 'description', 'country', 'city', 'event_id')


class StudioUpdate(PartialUpdate):
    FIELDS = ('name', 'country', 'city', 'director_name', 'director_phone', 'invoice_details')


class RepresentativeUpdate(PartialUpdate):
    FIELDS = ('name', 'email')


class DancerUpdate(PartialUpdate):
    FIELDS = ('first_name', 'last_name', 'birth_date')


class PerformanceUpdate(PartialUpdate):
    FIELDS = ('title', 'duration_sec', 'order_on_stage', 'category_id',
              'age_group_id', 'format_id', 'dancer_ids')


# ==================== 角色/权限基础数据 ====================

PERMISSION_SEED = [
    (PermissionKey.EVENT_MANAGE.value, '管理赛事', '创建、编辑和删除赛事及其配置'),
    (PermissionKey.STUDIO_MANAGE.value, '管理舞团', '维护舞团信息'),
    (PermissionKey.DANCER_MANAGE.value, '管理舞者', '添加、编辑和删除舞者'),
    (PermissionKey.PERFORMANCE_MANAGE.value, '管理节目', '报名和管理表演节目'),
    (PermissionKey.EVENT_REGISTER.value, '赛事报名', '为舞团报名赛事'),
    (PermissionKey.SCORE_SUBMIT.value, '提交评分', '为表演节目打分'),
]

ROLE_SEED = [
    (RoleKey.ADMIN.value, '管理员', '拥有系统全部权限'),
    (RoleKey.REPRESENTATIVE.value, '舞团代表', '管理本舞团的舞者和节目'),
    (RoleKey.JUDGE.value, '评委', '为表演节目打分'),
    (RoleKey.MODERATOR.value, '场控', '控制舞台流程并复核评分'),
]

# 角色 -> 权限（管理员在鉴权时直接放行，这里仍写入全部权限便于展示）
ROLE_PERMISSIONS = {
    RoleKey.ADMIN.value: [key for key, _, _ in PERMISSION_SEED],
    RoleKey.REPRESENTATIVE.value: [
        PermissionKey.STUDIO_MANAGE.value,
        PermissionKey.DANCER_MANAGE.value,
        PermissionKey.PERFORMANCE_MANAGE.value,
        PermissionKey.EVENT_REGISTER.value,
    ],
    RoleKey.JUDGE.value: [PermissionKey.SCORE_SUBMIT.value],
    RoleKey.MODERATOR.value: [PermissionKey.SCORE_SUBMIT.value],
}


# 数据库表结构定义（按外键依赖顺序）
DATABASE_SCHEMA = {
    'users': '''
        CREATE TABLE IF NOT EXISTS users (
            user_id INT AUTO_INCREMENT PRIMARY KEY,
            email VARCHAR(191) NOT NULL UNIQUE,
            name VARCHAR(100) NOT NULL,
            password_hash VARBINARY(128) DEFAULT NULL COMMENT '密码哈希（邀请未接受前为空）',
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            email_verified BOOLEAN NOT NULL DEFAULT FALSE,
            email_verification_token VARCHAR(64) DEFAULT NULL,
            photo_path VARCHAR(500) DEFAULT NULL,
            photo_url VARCHAR(500) DEFAULT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            INDEX idx_verification_token (email_verification_token)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='用户表';
    ''',

    'roles': '''
        CREATE TABLE IF NOT EXISTS roles (
            role_id INT AUTO_INCREMENT PRIMARY KEY,
            role_key VARCHAR(50) NOT NULL UNIQUE,
            name VARCHAR(100) NOT NULL,
            description VARCHAR(255)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='角色表（静态基础数据）';
    ''',

    'permissions': '''
        CREATE TABLE IF NOT EXISTS permissions (
            permission_id INT AUTO_INCREMENT PRIMARY KEY,
            permission_key VARCHAR(50) NOT NULL UNIQUE,
            name VARCHAR(100) NOT NULL,
            description VARCHAR(255)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='权限表（静态基础数据）';
    ''',

    'role_permissions': '''
        CREATE TABLE IF NOT EXISTS role_permissions (
            role_id INT NOT NULL,
            permission_id INT NOT NULL,
            PRIMARY KEY (role_id, permission_id),
            FOREIGN KEY (role_id) REFERENCES roles(role_id) ON DELETE CASCADE,
            FOREIGN KEY (permission_id) REFERENCES permissions(permission_id) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='角色权限关联表';
    ''',

    'events': '''
        CREATE TABLE IF NOT EXISTS events (
            event_id INT AUTO_INCREMENT PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            starts_at DATETIME NOT NULL,
            ends_at DATETIME NOT NULL,
            stage ENUM('PRE_REGISTRATION', 'REGISTRATION_OPEN', 'DATA_REVIEW', 'FINALIZED', 'ENDED')
                NOT NULL DEFAULT 'PRE_REGISTRATION',
            image_path VARCHAR(500) DEFAULT NULL,
            image_url VARCHAR(500) DEFAULT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            INDEX idx_starts_at (starts_at)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='赛事表';
    ''',

    'user_roles': '''
        CREATE TABLE IF NOT EXISTS user_roles (
            user_role_id INT AUTO_INCREMENT PRIMARY KEY,
            user_id INT NOT NULL,
            role_id INT NOT NULL,
            event_id INT NULL COMMENT '为空表示全局角色',
            scope_key INT GENERATED ALWAYS AS (IFNULL(event_id, 0)) STORED,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE,
            FOREIGN KEY (role_id) REFERENCES roles(role_id),
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE,
            UNIQUE KEY uniq_user_role_scope (user_id, role_id, scope_key),
            INDEX idx_user (user_id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='用户角色分配表（可按赛事限定范围）';
    ''',

    'dance_categories': '''
        CREATE TABLE IF NOT EXISTS dance_categories (
            category_id INT AUTO_INCREMENT PRIMARY KEY,
            event_id INT NOT NULL,
            name VARCHAR(100) NOT NULL,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE,
            UNIQUE KEY uniq_event_category_name (event_id, name)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='舞种表';
    ''',

    'age_groups': '''
        CREATE TABLE IF NOT EXISTS age_groups (
            age_group_id INT AUTO_INCREMENT PRIMARY KEY,
            event_id INT NOT NULL,
            name VARCHAR(100) NOT NULL,
            min_age INT NOT NULL DEFAULT 0,
            max_age INT NULL,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='年龄组表';
    ''',

    'dance_formats': '''
        CREATE TABLE IF NOT EXISTS dance_formats (
            format_id INT AUTO_INCREMENT PRIMARY KEY,
            event_id INT NOT NULL,
            name VARCHAR(100) NOT NULL,
            min_participants INT NOT NULL DEFAULT 1,
            max_participants INT NOT NULL DEFAULT 1,
            max_duration_seconds INT NOT NULL,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='表演形式表';
    ''',

    'judges': '''
        CREATE TABLE IF NOT EXISTS judges (
            judge_id INT AUTO_INCREMENT PRIMARY KEY,
            event_id INT NOT NULL,
            user_id INT NULL,
            name VARCHAR(100) NOT NULL,
            description TEXT,
            country VARCHAR(100),
            city VARCHAR(100),
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE,
            FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE SET NULL
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='评委表';
    ''',

    'studios': '''
        CREATE TABLE IF NOT EXISTS studios (
            studio_id INT AUTO_INCREMENT PRIMARY KEY,
            event_id INT NOT NULL,
            name VARCHAR(200) NOT NULL,
            country VARCHAR(100),
            city VARCHAR(100),
            director_name VARCHAR(100),
            director_phone VARCHAR(50),
            invoice_details JSON NULL,
            logo_path VARCHAR(500) DEFAULT NULL,
            logo_url VARCHAR(500) DEFAULT NULL,
            deleted_at TIMESTAMP NULL DEFAULT NULL COMMENT '软删除时间',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            FOREIGN KEY (event_id) REFERENCES events(event_id),
            INDEX idx_event_deleted (event_id, deleted_at)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='舞团表';
    ''',

    'studio_representatives': '''
        CREATE TABLE IF NOT EXISTS studio_representatives (
            representative_id INT AUTO_INCREMENT PRIMARY KEY,
            studio_id INT NOT NULL,
            user_id INT NOT NULL,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(191) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (studio_id) REFERENCES studios(studio_id) ON DELETE CASCADE,
            FOREIGN KEY (user_id) REFERENCES users(user_id),
            INDEX idx_user_active (user_id, is_active)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='舞团代表表';
    ''',

    'studio_event_registrations': '''
        CREATE TABLE IF NOT EXISTS studio_event_registrations (
            registration_id INT AUTO_INCREMENT PRIMARY KEY,
            studio_id INT NOT NULL,
            event_id INT NOT NULL,
            status ENUM('PENDING', 'APPROVED', 'REJECTED') NOT NULL DEFAULT 'PENDING',
            can_edit_during_review BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            FOREIGN KEY (studio_id) REFERENCES studios(studio_id) ON DELETE CASCADE,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE,
            UNIQUE KEY uniq_studio_event (studio_id, event_id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='舞团报名审核表';
    ''',

    'dancers': '''
        CREATE TABLE IF NOT EXISTS dancers (
            dancer_id INT AUTO_INCREMENT PRIMARY KEY,
            studio_id INT NOT NULL,
            first_name VARCHAR(100) NOT NULL,
            last_name VARCHAR(100) NOT NULL,
            birth_date DATE NOT NULL,
            photo_path VARCHAR(500) DEFAULT NULL,
            photo_url VARCHAR(500) DEFAULT NULL,
            deleted_at TIMESTAMP NULL DEFAULT NULL COMMENT '软删除时间',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            FOREIGN KEY (studio_id) REFERENCES studios(studio_id),
            INDEX idx_studio_deleted (studio_id, deleted_at)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='舞者表';
    ''',

    'performances': '''
        CREATE TABLE IF NOT EXISTS performances (
            performance_id INT AUTO_INCREMENT PRIMARY KEY,
            event_id INT NOT NULL,
            studio_id INT NOT NULL,
            title VARCHAR(200) NOT NULL,
            duration_sec INT NOT NULL,
            order_on_stage INT NULL,
            category_id INT NOT NULL,
            age_group_id INT NOT NULL,
            format_id INT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            FOREIGN KEY (event_id) REFERENCES events(event_id),
            FOREIGN KEY (studio_id) REFERENCES studios(studio_id),
            FOREIGN KEY (category_id) REFERENCES dance_categories(category_id),
            FOREIGN KEY (age_group_id) REFERENCES age_groups(age_group_id),
            FOREIGN KEY (format_id) REFERENCES dance_formats(format_id),
            INDEX idx_studio_order (studio_id, order_on_stage)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='表演节目表';
    ''',

    'performance_participants': '''
        CREATE TABLE IF NOT EXISTS performance_participants (
            performance_id INT NOT NULL,
            dancer_id INT NOT NULL,
            PRIMARY KEY (performance_id, dancer_id),
            FOREIGN KEY (performance_id) REFERENCES performances(performance_id) ON DELETE CASCADE,
            FOREIGN KEY (dancer_id) REFERENCES dancers(dancer_id)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='节目参演舞者表';
    ''',

    'invitations': '''
        CREATE TABLE IF NOT EXISTS invitations (
            invitation_id INT AUTO_INCREMENT PRIMARY KEY,
            email VARCHAR(191) NOT NULL,
            role_key VARCHAR(50) NOT NULL,
            event_id INT NULL,
            token VARCHAR(64) NOT NULL UNIQUE,
            created_by INT NOT NULL,
            expires_at DATETIME NOT NULL,
            used_at DATETIME NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE,
            FOREIGN KEY (created_by) REFERENCES users(user_id),
            INDEX idx_email_role (email, role_key)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci COMMENT='邀请表';
    ''',
}
