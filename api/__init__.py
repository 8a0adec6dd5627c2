#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - API接口模块
"""

from .account import auth_bp, users_bp
from .events import events_bp
from .event_config import event_config_bp
from .studios import studios_bp
from .dancers import dancers_bp
from .performances import performances_bp
from .invitations import invitations_bp
from .images import images_bp
from .maintenance import maintenance_bp

__version__ = '1.0.0'
__author__ = '舞蹈赛事管理团队'

# 导出所有蓝图
__all__ = [
    'auth_bp', 'users_bp', 'events_bp', 'event_config_bp', 'studios_bp', 'dancers_bp',
    'performances_bp', 'invitations_bp', 'images_bp', 'maintenance_bp',
]
