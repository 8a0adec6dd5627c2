from flask import request, jsonify

from models import PermissionKey, RegistrationStatus
from utils.decorators import permission_required, validate_json, log_action, handle_db_errors, current_auth
from utils.errors import NotFound, ValidationFailed
from utils.extensions import get_db
from utils.stage_checks import StageAction, ensure_action_allowed
from utils.validators import parse_studio

from . import studios_bp, logger


@studios_bp.route('/events/<int:event_id>/studios', methods=['POST'])
@permission_required(PermissionKey.STUDIO_MANAGE, event_param='event_id')
@validate_json(['name'])
@log_action('舞团报名')
@handle_db_errors
def create_studio(event_id):
    """创建舞团并报名赛事

    - 舞团代表：赛事阶段必须允许报名，必须填写代表姓名和邮箱，
      当前用户成为该舞团的代表，报名状态为 PENDING；
    - 管理员：直接创建 APPROVED 的报名，不设代表。
    """
    auth = current_auth()
    fields = parse_studio(request.get_json())
    db = get_db()

    event = db.get_event(event_id)
    if not event:
        raise NotFound('赛事不存在')

    representative_name = fields.pop('representative_name', None)
    representative_email = fields.pop('representative_email', None)

    if auth.is_admin:
        studio = db.create_studio(event_id, fields, RegistrationStatus.APPROVED)
    else:
        ensure_action_allowed(event.stage, StageAction.STUDIO_REGISTER)
        missing = {
            field: '必填'
            for field, value in (('representative_name', representative_name),
                                 ('representative_email', representative_email))
            if not value
        }
        if missing:
            raise ValidationFailed('请填写舞团代表信息', details=missing)
        studio = db.create_studio(event_id, fields, RegistrationStatus.PENDING, representative={
            'user_id': auth.user_id,
            'name': representative_name,
            'email': representative_email,
        })

    logger.info(f"舞团报名: studio_id={studio.studio_id}, event_id={event_id}, "
                f"status={studio.registration_status.value}")
    return jsonify({
        'success': True,
        'message': '舞团创建成功' if auth.is_admin else '报名已提交，等待审核',
        'data': studio.to_dict(),
    }), 201
