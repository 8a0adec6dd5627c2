from flask import request, jsonify

from models import PermissionKey
from utils.decorators import (
    login_required, permission_required, admin_required, validate_json, log_action, handle_db_errors,
)
from utils.errors import Conflict, ValidationFailed
from utils.extensions import get_db
from utils.validators import parse_format

from . import event_config_bp, load_event, load_event_item, logger


@event_config_bp.route('/<int:event_id>/formats', methods=['GET'])
@login_required
@handle_db_errors
def list_formats(event_id):
    load_event(event_id)
    formats = get_db().list_formats(event_id)
    return jsonify({'success': True, 'data': [dance_format.to_dict() for dance_format in formats]})


@event_config_bp.route('/<int:event_id>/formats/<int:format_id>', methods=['GET'])
@login_required
@handle_db_errors
def get_format(event_id, format_id):
    dance_format = load_event_item(event_id, get_db().get_format(format_id), '表演形式')
    return jsonify({'success': True, 'data': dance_format.to_dict()})


@event_config_bp.route('/<int:event_id>/formats', methods=['POST'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json(['name', 'min_participants', 'max_participants', 'max_duration_seconds'])
@log_action('创建表演形式')
@handle_db_errors
def create_format(event_id):
    values = parse_format(request.get_json())
    load_event(event_id)
    dance_format = get_db().create_format(event_id, **values)
    logger.info(f"表演形式已创建: event_id={event_id}, format_id={dance_format.format_id}")
    return jsonify({'success': True, 'message': '表演形式创建成功', 'data': dance_format.to_dict()}), 201


@event_config_bp.route('/<int:event_id>/formats/<int:format_id>', methods=['PATCH'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json()
@log_action('更新表演形式')
@handle_db_errors
def update_format(event_id, format_id):
    update = parse_format(request.get_json(), partial=True)
    db = get_db()
    current = load_event_item(event_id, db.get_format(format_id), '表演形式')

    changes = update.changes()
    min_participants = changes.get('min_participants', current.min_participants)
    max_participants = changes.get('max_participants', current.max_participants)
    if min_participants > max_participants:
        raise ValidationFailed(details={'max_participants': '最少人数不能大于最多人数'})

    dance_format = db.update_format(format_id, update)
    return jsonify({'success': True, 'message': '表演形式已更新', 'data': dance_format.to_dict()})


@event_config_bp.route('/<int:event_id>/formats/<int:format_id>', methods=['DELETE'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@log_action('删除表演形式')
@handle_db_errors
def delete_format(event_id, format_id):
    db = get_db()
    load_event_item(event_id, db.get_format(format_id), '表演形式')
    if db.is_reference_in_use('dance_formats', format_id):
        raise Conflict('该表演形式已被节目使用，无法删除')

    db.delete_format(format_id)
    logger.info(f"表演形式已删除: event_id={event_id}, format_id={format_id}")
    return jsonify({'success': True, 'message': '表演形式已删除'})
