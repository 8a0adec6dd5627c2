#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 配置文件
"""

import os
import logging
from datetime import timedelta
from dotenv import load_dotenv

# 加载环境变量
load_dotenv()


class Config:
    """应用配置类"""

    # Flask 基础配置
    SECRET_KEY = os.environ.get('SECRET_KEY')
    JSON_AS_ASCII = False

    # 数据库配置
    DB_HOST = os.environ.get('DB_HOST') or 'localhost'
    DB_PORT = int(os.environ.get('DB_PORT') or 3306)
    DB_USER = os.environ.get('DB_USER') or 'dance'
    DB_PASSWORD = os.environ.get('DB_PASSWORD') or ''
    DB_NAME = os.environ.get('DB_NAME') or 'dance_competition'
    # 数据库连接池配置
    DB_POOL_NAME = os.environ.get('DB_POOL_NAME') or 'dance_pool'
    DB_POOL_SIZE = int(os.environ.get('DB_POOL_SIZE') or 5)
    SLOW_QUERY_THRESHOLD_MS = int(os.environ.get('SLOW_QUERY_THRESHOLD_MS') or 50)
    # 启动时是否自动建表并写入角色/权限基础数据
    DB_INIT_ON_STARTUP = os.environ.get('DB_INIT_ON_STARTUP', 'true').lower() in ['true', 'on', '1']

    # 服务器配置
    HOST = os.environ.get('HOST') or '0.0.0.0'
    PORT = int(os.environ.get('PORT') or 4000)
    DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'

    # 访问令牌（Bearer JWT）配置
    JWT_SECRET = os.environ.get('JWT_SECRET')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES = timedelta(days=int(os.environ.get('JWT_EXPIRES_DAYS') or 7))

    # 邀请链接有效期
    INVITATION_TTL = timedelta(days=int(os.environ.get('INVITATION_TTL_DAYS') or 7))

    # 前端地址（邮件中的链接使用）
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL') or 'http://localhost:5173'

    # 文件上传配置
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), 'uploads')
    UPLOAD_URL_PREFIX = os.environ.get('UPLOAD_URL_PREFIX') or '/uploads'
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5MB
    ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    # 邮件配置（Flask-Mail）
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or 587)
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'true').lower() in ['true', 'on', '1']
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or 'noreply@dance-competition.local'

    # 日志配置
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = os.environ.get('LOG_FILE')

    # 系统配置
    SYSTEM_NAME = '舞蹈赛事管理系统'
    SYSTEM_VERSION = '1.0.0'

    # 默认管理员（仅在库中不存在管理员时创建）
    DEFAULT_ADMIN_EMAIL = os.environ.get('DEFAULT_ADMIN_EMAIL') or 'admin@dance-competition.local'
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD')

    @staticmethod
    def init_app(app):
        """初始化应用配置"""
        handlers = [logging.StreamHandler()]
        if app.config.get('LOG_FILE'):
            handlers.append(logging.FileHandler(app.config['LOG_FILE'], encoding='utf-8'))
        logging.basicConfig(
            level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers,
        )


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dance-competition-dev-secret-key'
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'dance-competition-dev-jwt-secret'
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD') or 'admin12345'


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    SECRET_KEY = os.environ.get('SECRET_KEY')
    JWT_SECRET = os.environ.get('JWT_SECRET')

    # 生产环境数据库配置（从环境变量获取）
    DB_HOST = os.environ.get('PROD_DB_HOST') or Config.DB_HOST
    DB_USER = os.environ.get('PROD_DB_USER') or Config.DB_USER
    DB_PASSWORD = os.environ.get('PROD_DB_PASSWORD') or Config.DB_PASSWORD
    DB_NAME = os.environ.get('PROD_DB_NAME') or Config.DB_NAME


class TestingConfig(Config):
    """测试环境配置"""
    TESTING = True
    SECRET_KEY = 'dance-competition-test-secret-key'
    JWT_SECRET = 'dance-competition-test-jwt-secret'
    DB_NAME = 'dance_competition_test'
    DB_INIT_ON_STARTUP = False
    MAIL_SUPPRESS_SEND = True


# 配置映射
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}
