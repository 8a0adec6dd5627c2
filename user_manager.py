#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 用户管理模块（注册、登录、令牌、身份解析）
"""

import logging

from utils.errors import Conflict, Unauthenticated, PermissionDenied, NotFound, ValidationFailed
from utils.helpers import (
    generate_password_hash, verify_password, generate_token,
    create_access_token, decode_access_token,
)
from utils.permissions import build_auth_context

logger = logging.getLogger(__name__)


class UserManager:
    """用户管理器"""

    def __init__(self, db_manager, config, email_service=None):
        self.db_manager = db_manager
        self.config = config
        self.email_service = email_service

    # ==================== 令牌 ====================

    def issue_token(self, user_id):
        return create_access_token(
            user_id,
            self.config['JWT_SECRET'],
            expires=self.config['JWT_EXPIRES'],
            algorithm=self.config['JWT_ALGORITHM'],
        )

    def token_payload(self, user):
        return {
            'token': self.issue_token(user.user_id),
            'token_type': 'Bearer',
            'user': user.to_dict(),
        }

    def resolve_auth_context(self, authorization_header):
        """根据 Authorization 头解析当前请求的 AuthContext

        令牌缺失或无效、用户不存在或已停用时返回 None。
        """
        if not authorization_header:
            return None
        scheme, _, token = authorization_header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            return None

        user_id = decode_access_token(token.strip(), self.config['JWT_SECRET'], self.config['JWT_ALGORITHM'])
        if user_id is None:
            return None

        user = self.db_manager.get_user_by_id(user_id)
        if not user or not user.is_active:
            return None

        return build_auth_context(user.user_id, self.db_manager.get_role_assignments(user.user_id))

    # ==================== 注册 / 登录 ====================

    def register_user(self, email, password, name):
        """注册新用户，发送邮箱验证邮件，返回 (user, token)"""
        if self.db_manager.get_user_by_email(email):
            raise Conflict('该邮箱已被注册')

        verification_token = generate_token()
        user = self.db_manager.create_user(
            email=email,
            name=name,
            password_hash=generate_password_hash(password),
            email_verification_token=verification_token,
        )
        logger.info(f"新用户注册: user_id={user.user_id}, email={email}")

        if self.email_service:
            self.email_service.send_verification_email(email, verification_token, name)
        return user, self.issue_token(user.user_id)

    def authenticate_user(self, email, password):
        """验证登录：凭据错误 401，账户停用 403"""
        user = self.db_manager.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"登录失败: email={email}")
            raise Unauthenticated('邮箱或密码错误')
        if not user.is_active:
            raise PermissionDenied('账户已停用')
        logger.info(f"用户登录: user_id={user.user_id}")
        return user

    def verify_email(self, token):
        user = self.db_manager.get_user_by_verification_token(token)
        if not user:
            raise ValidationFailed('验证令牌无效或已使用')
        self.db_manager.mark_email_verified(user.user_id)
        logger.info(f"邮箱已验证: user_id={user.user_id}")
        return self.db_manager.get_user_by_id(user.user_id)

    # ==================== 个人信息 ====================

    def get_profile(self, auth):
        user = self.db_manager.get_user_by_id(auth.user_id)
        if not user:
            raise NotFound('用户不存在')
        return {
            'user': user.to_dict(),
            'is_admin': auth.is_admin,
            'roles': [role.to_dict() for role in self.db_manager.get_user_roles(user.user_id)],
            'permissions': auth.to_dict()['permissions'],
        }
