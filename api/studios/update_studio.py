from flask import request, jsonify

from models import PermissionKey
from utils.decorators import login_required, validate_json, log_action, handle_db_errors, current_auth
from utils.extensions import get_db
from utils.studio_access import load_studio, require_permission, require_editable_studio
from utils.validators import parse_studio

from . import studios_bp


@studios_bp.route('/studios/<int:studio_id>', methods=['PATCH'])
@login_required
@validate_json()
@log_action('更新舞团信息')
@handle_db_errors
def update_studio(studio_id):
    """局部更新舞团信息

    舞团代表：报名不能是已拒绝，且赛事阶段允许修改舞团信息。
    """
    auth = current_auth()
    studio = load_studio(studio_id)
    require_permission(auth, PermissionKey.STUDIO_MANAGE, studio.event_id)
    require_editable_studio(auth, studio)

    update = parse_studio(request.get_json(), partial=True)
    studio = get_db().update_studio(studio_id, update)
    return jsonify({'success': True, 'message': '舞团信息已更新', 'data': studio.to_dict()})
