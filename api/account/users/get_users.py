from flask import jsonify

from utils.decorators import admin_required, handle_db_errors
from utils.extensions import get_db

from . import users_bp


@users_bp.route('', methods=['GET'])
@admin_required
@handle_db_errors
def get_users():
    """用户列表（管理员），附带每个用户的角色分配"""
    db = get_db()
    users_data = []
    for user in db.list_users():
        user_dict = user.to_dict()
        user_dict['roles'] = [role.to_dict() for role in db.get_user_roles(user.user_id)]
        users_data.append(user_dict)

    return jsonify({'success': True, 'data': users_data})
