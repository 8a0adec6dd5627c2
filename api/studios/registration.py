from flask import request, jsonify

from models import RegistrationStatus
from utils.decorators import (
    login_required, admin_required, validate_json, log_action, handle_db_errors, current_auth,
)
from utils.errors import NotFound, Conflict
from utils.extensions import get_db
from utils.studio_access import require_studio_member
from utils.validators import parse_registration_status

from . import studios_bp, load_event_studio, logger


@studios_bp.route('/events/<int:event_id>/studios/<int:studio_id>/registration', methods=['PATCH'])
@admin_required
@validate_json(['status'])
@log_action('审核舞团报名')
@handle_db_errors
def update_registration(event_id, studio_id):
    """设置报名状态；通过时舞团的活跃代表获得该赛事的代表角色

    can_edit_during_review 未提供时保持原值。
    """
    status, can_edit_during_review = parse_registration_status(request.get_json())
    db = get_db()
    if not db.get_event(event_id):
        raise NotFound('赛事不存在')
    load_event_studio(event_id, studio_id)

    registration = db.set_registration_status(studio_id, event_id, status, can_edit_during_review)
    logger.info(f"报名审核: studio_id={studio_id}, event_id={event_id}, status={status.value}")
    return jsonify({
        'success': True,
        'message': '报名状态已更新',
        'data': registration.to_dict(),
    })


@studios_bp.route('/events/<int:event_id>/studios/<int:studio_id>/registration', methods=['DELETE'])
@login_required
@log_action('撤销舞团报名')
@handle_db_errors
def delete_registration(event_id, studio_id):
    """撤销报名（只有待审核的报名可以撤销）"""
    studio = load_event_studio(event_id, studio_id)
    require_studio_member(current_auth(), studio)

    db = get_db()
    registration = db.get_registration(studio_id, event_id)
    if not registration:
        raise NotFound('报名记录不存在')
    if registration.status != RegistrationStatus.PENDING:
        raise Conflict('只能撤销待审核的报名')

    db.delete_registration(studio_id, event_id)
    return jsonify({'success': True, 'message': '报名已撤销'})
