from flask import request, jsonify

from models import PermissionKey
from utils.decorators import login_required, validate_json, log_action, handle_db_errors, current_auth
from utils.extensions import get_db
from utils.studio_access import load_studio, require_permission, require_dancer_management
from utils.validators import parse_dancer

from . import dancers_bp, logger


@dancers_bp.route('/studios/<int:studio_id>/dancers', methods=['POST'])
@login_required
@validate_json(['first_name', 'last_name', 'birth_date'])
@log_action('添加舞者')
@handle_db_errors
def create_dancer(studio_id):
    """为舞团添加舞者（舞团报名需已通过审核，且赛事阶段允许管理舞者）"""
    auth = current_auth()
    studio = load_studio(studio_id)
    require_permission(auth, PermissionKey.DANCER_MANAGE, studio.event_id)
    require_dancer_management(auth, studio)

    values = parse_dancer(request.get_json())
    dancer = get_db().create_dancer(studio_id, **values)
    logger.info(f"舞者已添加: studio_id={studio_id}, dancer_id={dancer.dancer_id}")
    return jsonify({'success': True, 'message': '舞者添加成功', 'data': dancer.to_dict()}), 201
