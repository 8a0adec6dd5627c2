from flask import request, jsonify

from utils.decorators import login_required, validate_json, log_action, handle_db_errors, current_auth
from utils.errors import NotFound, PermissionDenied
from utils.extensions import get_db
from utils.studio_access import load_studio
from utils.validators import parse_representative_update

from . import studios_bp


@studios_bp.route('/studios/<int:studio_id>/representatives/<int:representative_id>', methods=['PATCH'])
@login_required
@validate_json()
@log_action('更新舞团代表信息')
@handle_db_errors
def update_representative(studio_id, representative_id):
    """代表本人或管理员可以修改代表的姓名和邮箱"""
    auth = current_auth()
    load_studio(studio_id)
    db = get_db()
    representative = db.get_representative(representative_id)
    if not representative or representative.studio_id != studio_id:
        raise NotFound('舞团代表不存在')
    if not auth.is_admin and representative.user_id != auth.user_id:
        raise PermissionDenied()

    update = parse_representative_update(request.get_json())
    representative = db.update_representative(representative_id, update)
    return jsonify({'success': True, 'message': '代表信息已更新', 'data': representative.to_dict()})
