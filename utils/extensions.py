#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 应用级依赖访问

数据库管理器、文件存储、邮件服务和用户管理器由 create_app 创建或注入，
保存在 app.extensions 中，视图通过这里的函数获取。
"""

from flask import current_app


def get_db():
    return current_app.extensions['db_manager']


def get_storage():
    return current_app.extensions['storage']


def get_email_service():
    return current_app.extensions['email_service']


def get_user_manager():
    return current_app.extensions['user_manager']
