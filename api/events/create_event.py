from flask import request, jsonify

from models import PermissionKey
from utils.decorators import permission_required, admin_required, validate_json, log_action, handle_db_errors
from utils.extensions import get_db
from utils.validators import parse_event

from . import events_bp, logger


@events_bp.route('', methods=['POST'])
@permission_required(PermissionKey.EVENT_MANAGE)
@admin_required
@validate_json(['name', 'starts_at', 'ends_at'])
@log_action('创建赛事')
@handle_db_errors
def create_event():
    """创建赛事（阶段默认 PRE_REGISTRATION）"""
    values = parse_event(request.get_json())
    event = get_db().create_event(**values)
    logger.info(f"赛事已创建: event_id={event.event_id}, name={event.name}")

    return jsonify({
        'success': True,
        'message': '赛事创建成功',
        'data': event.to_dict(),
    }), 201
