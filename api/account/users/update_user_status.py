from flask import request, jsonify

from utils.decorators import admin_required, validate_json, log_action, handle_db_errors, current_auth
from utils.errors import NotFound, ValidationFailed
from utils.extensions import get_db
from utils.validators import parse_user_status

from . import users_bp, logger


@users_bp.route('/<int:user_id>/status', methods=['PATCH'])
@admin_required
@validate_json(['is_active'])
@log_action('启用/停用用户')
@handle_db_errors
def update_user_status(user_id):
    is_active = parse_user_status(request.get_json())
    db = get_db()
    if not db.get_user_by_id(user_id):
        raise NotFound('用户不存在')
    if user_id == current_auth().user_id and not is_active:
        raise ValidationFailed('不能停用自己的账户')

    user = db.set_user_active(user_id, is_active)
    logger.info(f"用户状态已更新: user_id={user_id}, is_active={is_active}")
    return jsonify({
        'success': True,
        'message': '用户已启用' if is_active else '用户已停用',
        'data': user.to_dict(),
    })
