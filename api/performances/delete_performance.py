from flask import jsonify

from utils.decorators import login_required, log_action, handle_db_errors, current_auth
from utils.extensions import get_db
from utils.studio_access import require_performance_management

from . import performances_bp, load_performance_studio, logger
from .update_performance import load_studio_performance


@performances_bp.route('/studios/<int:studio_id>/performances/<int:performance_id>', methods=['DELETE'])
@login_required
@log_action('删除节目')
@handle_db_errors
def delete_performance(studio_id, performance_id):
    studio = load_performance_studio(studio_id)
    require_performance_management(current_auth(), studio)
    load_studio_performance(studio, performance_id)

    get_db().delete_performance(performance_id)
    logger.info(f"节目已删除: studio_id={studio_id}, performance_id={performance_id}")
    return jsonify({'success': True, 'message': '节目已删除'})
