#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 装饰器（登录、权限、参数校验、操作日志等）
"""

import time
import logging
from functools import wraps

from flask import g, request, jsonify
from mysql.connector import Error

from utils.errors import ApiError, Unauthenticated, PermissionDenied, ValidationFailed, error_for_decision
from utils.permissions import authorize

logger = logging.getLogger(__name__)


def current_auth():
    """当前请求的 AuthContext（未登录时为 None）"""
    return getattr(g, 'auth', None)


def login_required(f):
    """登录验证装饰器"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_auth() is None:
            raise Unauthenticated()
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """管理员权限装饰器"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth = current_auth()
        if auth is None:
            raise Unauthenticated()
        if not auth.is_admin:
            raise PermissionDenied()
        return f(*args, **kwargs)
    return decorated_function


def permission_required(permission, event_param=None):
    """权限验证装饰器

    Args:
        permission: 需要的权限键，如 'dancer.manage'
        event_param: 从视图 URL 参数中读取赛事ID的参数名；为空或取值无效时只检查全局权限
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            event_id = kwargs.get(event_param) if event_param else None
            decision = authorize(current_auth(), permission, event_id)
            if not decision.allowed:
                raise error_for_decision(decision)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


FIELD_NAMES = {
    'email': '邮箱',
    'password': '密码',
    'name': '名称',
    'token': '令牌',
    'first_name': '名',
    'last_name': '姓',
    'birth_date': '出生日期',
    'title': '节目名称',
    'role_key': '角色',
    'status': '状态',
    'starts_at': '开始时间',
    'ends_at': '结束时间',
}


def validate_json(required_fields=None):
    """JSON数据验证装饰器

    Args:
        required_fields: 必需的字段列表
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                raise ValidationFailed('请求必须是JSON对象')

            if required_fields:
                missing_fields = [
                    field for field in required_fields
                    if data.get(field) is None or (isinstance(data.get(field), str) and not data[field].strip())
                ]
                if missing_fields:
                    friendly_names = [FIELD_NAMES.get(field, field) for field in missing_fields]
                    raise ValidationFailed(f'请填写: {", ".join(friendly_names)}',
                                           details={'missing': missing_fields})

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def log_action(action_name):
    """操作日志装饰器

    Args:
        action_name: 操作名称
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth = current_auth()
            user_id = auth.user_id if auth else None

            start_time = time.perf_counter()
            logger.info(f"用户(ID:{user_id}) 开始执行操作: {action_name}")

            try:
                result = f(*args, **kwargs)
            except ApiError as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.info(
                    f"用户(ID:{user_id}) 操作被拒绝: {action_name}, 耗时: {duration_ms:.1f} ms, "
                    f"原因: {e.code} {e.message}"
                )
                raise
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"用户(ID:{user_id}) 执行操作失败: {action_name}, 耗时: {duration_ms:.1f} ms, 错误: {e}"
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(f"用户(ID:{user_id}) 成功完成操作: {action_name}, 耗时: {duration_ms:.1f} ms")
            return result
        return decorated_function
    return decorator


def handle_db_errors(f):
    """数据库错误处理装饰器（业务异常原样抛出，由全局错误处理器渲染）"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ApiError:
            raise
        except Error as e:
            logger.error(f"数据库操作错误: {e}")
            return jsonify({
                'success': False,
                'error': 'internal_error',
                'message': '数据库操作失败，请稍后重试',
            }), 500
        except Exception as e:
            logger.exception(f"接口处理异常: {e}")
            return jsonify({
                'success': False,
                'error': 'internal_error',
                'message': '服务器内部错误',
            }), 500
    return decorated_function
