from flask import jsonify

from utils.decorators import admin_required, log_action, handle_db_errors
from utils.extensions import get_db
from utils.studio_access import load_studio

from . import studios_bp, logger


@studios_bp.route('/studios/<int:studio_id>', methods=['DELETE'])
@admin_required
@log_action('删除舞团')
@handle_db_errors
def delete_studio(studio_id):
    """软删除舞团（之后的读取一律视为不存在）"""
    load_studio(studio_id)
    get_db().soft_delete_studio(studio_id)
    logger.info(f"舞团已删除: studio_id={studio_id}")
    return jsonify({'success': True, 'message': '舞团已删除'})
