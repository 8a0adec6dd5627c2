from flask import request, jsonify

from utils.decorators import admin_required, validate_json, log_action, handle_db_errors
from utils.errors import NotFound, ValidationFailed
from utils.extensions import get_db
from utils.validators import parse_role_grant

from . import users_bp, logger


@users_bp.route('/<int:user_id>/roles', methods=['POST'])
@admin_required
@validate_json(['role_key'])
@log_action('分配用户角色')
@handle_db_errors
def grant_user_role(user_id):
    """为用户分配角色（event_id 为空表示全局）；已有相同分配时不重复插入"""
    role_key, event_id = parse_role_grant(request.get_json())
    db = get_db()

    if not db.get_user_by_id(user_id):
        raise NotFound('用户不存在')
    role = db.get_role_by_key(role_key)
    if not role:
        raise ValidationFailed(f'角色不存在: {role_key}')
    if event_id is not None and not db.get_event(event_id):
        raise NotFound('赛事不存在')

    created = db.assign_role(user_id, role['role_id'], event_id)
    if created:
        logger.info(f"角色已分配: user_id={user_id}, role={role_key}, event_id={event_id}")

    return jsonify({
        'success': True,
        'message': '角色已分配' if created else '用户已拥有该角色',
        'data': [item.to_dict() for item in db.get_user_roles(user_id)],
    }), 201 if created else 200
