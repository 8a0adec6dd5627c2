from datetime import datetime
import logging

from flask import jsonify, current_app
from mysql.connector import Error

from utils.extensions import get_db

from . import maintenance_bp

logger = logging.getLogger(__name__)


@maintenance_bp.route('/health', methods=['GET'])
def health_check():
    """健康检查：执行 SELECT 1 确认数据库可用"""
    try:
        database_ok = get_db().ping()
        message = '数据库连接正常' if database_ok else '数据库返回异常结果'
    except Error as e:
        logger.error(f"健康检查数据库连接失败: {e}")
        database_ok = False
        message = f'数据库连接异常: {e}'

    return jsonify({
        'success': database_ok,
        'data': {
            'status': 'healthy' if database_ok else 'error',
            'database': {'status': 'healthy' if database_ok else 'error', 'message': message},
            'version': current_app.config.get('SYSTEM_VERSION'),
            'check_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        },
    }), 200 if database_ok else 503
