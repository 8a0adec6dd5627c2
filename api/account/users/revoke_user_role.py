from flask import jsonify

from utils.decorators import admin_required, log_action, handle_db_errors
from utils.errors import NotFound
from utils.extensions import get_db

from . import users_bp


@users_bp.route('/<int:user_id>/roles/<int:user_role_id>', methods=['DELETE'])
@admin_required
@log_action('移除用户角色')
@handle_db_errors
def revoke_user_role(user_id, user_role_id):
    if not get_db().remove_user_role(user_id, user_role_id):
        raise NotFound('角色分配不存在')
    return jsonify({'success': True, 'message': '角色已移除'})
