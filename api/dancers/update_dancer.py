from flask import request, jsonify

from models import PermissionKey
from utils.decorators import login_required, validate_json, log_action, handle_db_errors, current_auth
from utils.errors import NotFound
from utils.extensions import get_db
from utils.studio_access import load_studio, require_permission, require_dancer_management
from utils.validators import parse_dancer

from . import dancers_bp


def load_managed_dancer(dancer_id):
    """读取舞者并校验当前用户可以管理它；已删除的舞者视为不存在"""
    dancer = get_db().get_dancer(dancer_id)
    if not dancer:
        raise NotFound('舞者不存在')
    auth = current_auth()
    studio = load_studio(dancer.studio_id)
    require_permission(auth, PermissionKey.DANCER_MANAGE, studio.event_id)
    require_dancer_management(auth, studio)
    return dancer


@dancers_bp.route('/dancers/<int:dancer_id>', methods=['PATCH'])
@login_required
@validate_json()
@log_action('更新舞者')
@handle_db_errors
def update_dancer(dancer_id):
    load_managed_dancer(dancer_id)
    update = parse_dancer(request.get_json(), partial=True)
    dancer = get_db().update_dancer(dancer_id, update)
    return jsonify({'success': True, 'message': '舞者信息已更新', 'data': dancer.to_dict()})
