from flask import request, jsonify

from utils.decorators import login_required, validate_json, log_action, handle_db_errors, current_auth
from utils.errors import NotFound
from utils.extensions import get_db
from utils.studio_access import require_performance_management
from utils.validators import parse_performance

from . import performances_bp, load_performance_studio, check_performance


def load_studio_performance(studio, performance_id):
    performance = get_db().get_performance(performance_id)
    if not performance or performance.studio_id != studio.studio_id:
        raise NotFound('节目不存在')
    return performance


@performances_bp.route('/studios/<int:studio_id>/performances/<int:performance_id>', methods=['PATCH'])
@login_required
@validate_json()
@log_action('更新节目')
@handle_db_errors
def update_performance(studio_id, performance_id):
    """局部更新节目；提供 dancer_ids 时整体替换参演舞者"""
    studio = load_performance_studio(studio_id)
    require_performance_management(current_auth(), studio)
    current = load_studio_performance(studio, performance_id)

    update = parse_performance(request.get_json(), partial=True)
    check_performance(studio, update.changes(), current=current)

    performance = get_db().update_performance(performance_id, update)
    return jsonify({'success': True, 'message': '节目已更新', 'data': performance.to_dict()})
