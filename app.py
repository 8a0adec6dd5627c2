#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 应用入口
"""

import os
import sys
import time
import logging

from flask import Flask, request, jsonify, g, send_from_directory
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import config as config_map
from database import DatabaseManager
from user_manager import UserManager
from utils.email_service import EmailService
from utils.errors import ApiError
from utils.storage import LocalStorage

from api.account import auth_bp, users_bp
from api.events import events_bp
from api.event_config import event_config_bp
from api.studios import studios_bp
from api.dancers import dancers_bp
from api.performances import performances_bp
from api.invitations import invitations_bp
from api.images import images_bp
from api.maintenance import maintenance_bp

logger = logging.getLogger(__name__)


def create_app(config_name=None, db_manager=None, storage=None):
    """创建应用

    Args:
        config_name: 配置名（development / production / testing），默认读取 APP_ENV
        db_manager: 注入的数据库管理器（测试时传入替身）
        storage: 注入的文件存储实现
    """
    app = Flask(__name__)
    env_name = (config_name or os.environ.get('APP_ENV', 'default')).lower()
    config_class = config_map.get(env_name, config_map['default'])
    app.config.from_object(config_class)
    config_class.init_app(app)

    if env_name == 'production':
        for key in ('SECRET_KEY', 'JWT_SECRET'):
            if not app.config.get(key):
                raise RuntimeError(f'{key} environment variable is required in production')

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # 应用级依赖
    if db_manager is None:
        db_manager = DatabaseManager(app.config)
        if app.config.get('DB_INIT_ON_STARTUP'):
            try:
                db_manager.init_database(force_recreate=False)
                app.logger.info("数据库初始化成功")
            except Exception as e:
                # 记录错误但不阻止应用启动
                app.logger.error(f"数据库初始化检查失败: {e}")
    if storage is None:
        storage = LocalStorage(app.config['UPLOAD_FOLDER'], app.config['UPLOAD_URL_PREFIX'])

    email_service = EmailService(app)
    app.extensions['db_manager'] = db_manager
    app.extensions['storage'] = storage
    app.extensions['user_manager'] = UserManager(db_manager, app.config, email_service)

    @app.before_request
    def start_request_timer():
        g.request_start_time = time.perf_counter()

    @app.before_request
    def load_auth_context():
        """每个请求重新解析身份和权限，不跨请求缓存"""
        g.auth = app.extensions['user_manager'].resolve_auth_context(
            request.headers.get('Authorization')
        )

    @app.after_request
    def log_request_time(response):
        start_time = getattr(g, 'request_start_time', None)
        if start_time is not None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            app.logger.info(
                "Request %s %s took %.2fms, status %d",
                request.method,
                request.path,
                duration_ms,
                response.status_code,
            )
        return response

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            'success': False,
            'error': error.name.lower().replace(' ', '_'),
            'message': error.description,
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        app.logger.exception(f"未处理的异常: {error}")
        return jsonify({
            'success': False,
            'error': 'internal_error',
            'message': '服务器内部错误',
        }), 500

    @app.route(f"{app.config['UPLOAD_URL_PREFIX']}/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.extensions['storage'].root, filename)

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(events_bp, url_prefix='/api/events')
    app.register_blueprint(event_config_bp, url_prefix='/api/events')
    app.register_blueprint(studios_bp, url_prefix='/api')
    app.register_blueprint(dancers_bp, url_prefix='/api')
    app.register_blueprint(performances_bp, url_prefix='/api')
    app.register_blueprint(invitations_bp, url_prefix='/api/invitations')
    app.register_blueprint(images_bp, url_prefix='/api/images')
    app.register_blueprint(maintenance_bp)

    return app


if __name__ == '__main__':
    app = create_app()
    try:
        app.run(
            host=app.config.get('HOST', '0.0.0.0'),
            port=app.config.get('PORT', 4000),
            debug=app.config.get('DEBUG', False)
        )
    except KeyboardInterrupt:
        sys.exit(0)
