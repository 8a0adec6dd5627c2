from datetime import datetime

from flask import request, jsonify

from utils.decorators import validate_json, log_action, handle_db_errors
from utils.errors import NotFound, Unauthenticated, ValidationFailed
from utils.extensions import get_db, get_user_manager
from utils.helpers import generate_password_hash, verify_password
from utils.validators import parse_invitation_acceptance

from . import invitations_bp


def load_pending_invitation(token):
    """令牌对应的邀请：不存在 404，已使用或已过期 400"""
    invitation = get_db().get_invitation_by_token(token)
    if not invitation:
        raise NotFound('邀请不存在')
    if invitation.is_used:
        raise ValidationFailed('邀请已被使用')
    if invitation.is_expired(datetime.now()):
        raise ValidationFailed('邀请已过期')
    return invitation


@invitations_bp.route('/<token>', methods=['GET'])
@handle_db_errors
def get_invitation(token):
    """公开接口：检查邀请是否有效，供前端展示接受页面"""
    invitation = load_pending_invitation(token)
    data = invitation.to_dict()
    data['has_account'] = get_db().get_user_by_email(invitation.email) is not None
    return jsonify({'success': True, 'data': data})


@invitations_bp.route('/accept', methods=['POST'])
@validate_json(['token', 'name', 'password'])
@log_action('接受邀请')
@handle_db_errors
def accept_invitation():
    """接受邀请：新邮箱创建账户，已有账户需用原密码确认；授予邀请绑定的角色"""
    values = parse_invitation_acceptance(request.get_json())
    invitation = load_pending_invitation(values['token'])
    db = get_db()

    existing = db.get_user_by_email(invitation.email)
    if existing and existing.password_hash and not verify_password(values['password'], existing.password_hash):
        raise Unauthenticated('该邮箱已注册，请输入原账户密码')

    user_id = db.accept_invitation(invitation, values['name'], generate_password_hash(values['password']))
    user_manager = get_user_manager()
    return jsonify({
        'success': True,
        'message': '邀请已接受',
        'data': user_manager.token_payload(db.get_user_by_id(user_id)),
    })
