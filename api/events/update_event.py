from flask import request, jsonify

from utils.decorators import admin_required, validate_json, log_action, handle_db_errors
from utils.errors import NotFound, ValidationFailed
from utils.extensions import get_db
from utils.validators import parse_event

from . import events_bp, logger


@events_bp.route('/<int:event_id>', methods=['PATCH'])
@admin_required
@validate_json()
@log_action('更新赛事')
@handle_db_errors
def update_event(event_id):
    """局部更新赛事；阶段可以切换到任意值"""
    update = parse_event(request.get_json(), partial=True)
    db = get_db()
    event = db.get_event(event_id)
    if not event:
        raise NotFound('赛事不存在')

    # 只提供一端时，与现有值组合后再校验时间先后
    changes = update.changes()
    starts_at = changes.get('starts_at', event.starts_at)
    ends_at = changes.get('ends_at', event.ends_at)
    if ('starts_at' in changes or 'ends_at' in changes) and starts_at >= ends_at:
        raise ValidationFailed(details={'ends_at': '结束时间必须晚于开始时间'})

    event = db.update_event(event_id, update)
    if 'stage' in changes:
        logger.info(f"赛事阶段已切换: event_id={event_id}, stage={event.stage.value}")

    return jsonify({
        'success': True,
        'message': '赛事已更新',
        'data': event.to_dict(),
    })
