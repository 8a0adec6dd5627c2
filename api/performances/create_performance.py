from flask import request, jsonify

from utils.decorators import login_required, validate_json, log_action, handle_db_errors, current_auth
from utils.extensions import get_db
from utils.studio_access import require_performance_management
from utils.validators import parse_performance

from . import performances_bp, load_performance_studio, check_performance, logger


@performances_bp.route('/studios/<int:studio_id>/performances', methods=['POST'])
@login_required
@validate_json(['title', 'duration_sec', 'category_id', 'age_group_id', 'format_id', 'dancer_ids'])
@log_action('创建节目')
@handle_db_errors
def create_performance(studio_id):
    """创建节目并登记参演舞者"""
    studio = load_performance_studio(studio_id)
    require_performance_management(current_auth(), studio)

    values = parse_performance(request.get_json())
    check_performance(studio, values)

    dancer_ids = values.pop('dancer_ids')
    performance = get_db().create_performance(studio.event_id, studio_id, values, dancer_ids)
    logger.info(f"节目已创建: studio_id={studio_id}, performance_id={performance.performance_id}")
    return jsonify({'success': True, 'message': '节目创建成功', 'data': performance.to_dict()}), 201
