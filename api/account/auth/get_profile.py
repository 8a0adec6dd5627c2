from flask import jsonify

from utils.decorators import login_required, handle_db_errors, current_auth
from utils.extensions import get_user_manager

from . import auth_bp


@auth_bp.route('/me', methods=['GET'])
@login_required
@handle_db_errors
def get_profile():
    """当前用户信息、角色分配和是否管理员"""
    return jsonify({
        'success': True,
        'data': get_user_manager().get_profile(current_auth()),
    })
