from flask import jsonify

from utils.decorators import login_required, log_action, handle_db_errors
from utils.extensions import get_db

from . import dancers_bp, logger
from .update_dancer import load_managed_dancer


@dancers_bp.route('/dancers/<int:dancer_id>', methods=['DELETE'])
@login_required
@log_action('删除舞者')
@handle_db_errors
def delete_dancer(dancer_id):
    """软删除舞者"""
    dancer = load_managed_dancer(dancer_id)
    get_db().soft_delete_dancer(dancer_id)
    logger.info(f"舞者已删除: studio_id={dancer.studio_id}, dancer_id={dancer_id}")
    return jsonify({'success': True, 'message': '舞者已删除'})
