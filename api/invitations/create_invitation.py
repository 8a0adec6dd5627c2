from datetime import datetime

from flask import request, jsonify, current_app

from models import RoleKey
from utils.decorators import admin_required, validate_json, log_action, handle_db_errors, current_auth
from utils.errors import NotFound, Conflict, ValidationFailed
from utils.extensions import get_db, get_email_service
from utils.helpers import generate_token
from utils.validators import parse_invitation

from . import invitations_bp, logger


@invitations_bp.route('', methods=['POST'])
@admin_required
@validate_json(['email', 'role_key'])
@log_action('发送邀请')
@handle_db_errors
def create_invitation():
    """邀请用户担任某个角色（可限定赛事），邮件中附带一次性链接"""
    values = parse_invitation(request.get_json())
    email, role_key, event_id = values['email'], values['role_key'], values['event_id']
    db = get_db()

    event = None
    if event_id is not None:
        event = db.get_event(event_id)
        if not event:
            raise NotFound('赛事不存在')
    if not db.get_role_by_key(role_key):
        raise ValidationFailed(f'角色不存在: {role_key}')

    now = datetime.now()
    if db.find_active_invitation(email, role_key, event_id, now):
        raise Conflict('该邮箱已有未使用的同类邀请')
    # 舞团代表可以代表多个舞团，其余角色已拥有时不再邀请
    if role_key != RoleKey.REPRESENTATIVE.value and db.email_has_role(email, role_key, event_id):
        raise ValidationFailed('该用户已拥有此角色')

    invitation = db.create_invitation(
        email=email,
        role_key=role_key,
        event_id=event_id,
        token=generate_token(),
        created_by=current_auth().user_id,
        expires_at=now + current_app.config['INVITATION_TTL'],
    )
    logger.info(f"邀请已创建: invitation_id={invitation.invitation_id}, email={email}, role={role_key}")

    get_email_service().send_invitation_email(
        email, invitation.token, role_key, event.name if event else None
    )
    return jsonify({
        'success': True,
        'message': '邀请已发送',
        'data': invitation.to_dict(include_token=True),
    }), 201
