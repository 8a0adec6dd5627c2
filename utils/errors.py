#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 接口异常定义

视图和业务函数抛出 ApiError 子类，由应用统一的错误处理器渲染为
{"success": false, "error": <code>, "message": <msg>} 的 JSON 响应。
"""


class ApiError(Exception):
    status_code = 400
    code = 'bad_request'
    default_message = '请求无效'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        payload = {'success': False, 'error': self.code, 'message': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class Unauthenticated(ApiError):
    status_code = 401
    code = 'unauthenticated'
    default_message = '请先登录'


class PermissionDenied(ApiError):
    status_code = 403
    code = 'forbidden'
    default_message = '权限不足'


class StageRestricted(ApiError):
    """赛事阶段不允许该操作（与普通的权限不足区分开）"""
    status_code = 403
    code = 'stage_restricted'
    default_message = '当前赛事阶段不允许该操作'


class NotFound(ApiError):
    status_code = 404
    code = 'not_found'
    default_message = '资源不存在'


class Conflict(ApiError):
    status_code = 409
    code = 'conflict'
    default_message = '资源冲突'


class ValidationFailed(ApiError):
    status_code = 400
    code = 'validation_error'
    default_message = '请求参数校验失败'


def error_for_decision(decision):
    """把被拒绝的访问判定转换为对应的异常"""
    if decision.status == 401:
        return Unauthenticated()
    return PermissionDenied()
