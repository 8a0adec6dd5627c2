from flask import request, jsonify

from models import PermissionKey
from utils.decorators import (
    login_required, permission_required, admin_required, validate_json, log_action, handle_db_errors,
)
from utils.errors import Conflict, ValidationFailed
from utils.extensions import get_db
from utils.validators import parse_age_group

from . import event_config_bp, load_event, load_event_item, logger


@event_config_bp.route('/<int:event_id>/age-groups', methods=['GET'])
@login_required
@handle_db_errors
def list_age_groups(event_id):
    load_event(event_id)
    age_groups = get_db().list_age_groups(event_id)
    return jsonify({'success': True, 'data': [age_group.to_dict() for age_group in age_groups]})


@event_config_bp.route('/<int:event_id>/age-groups/<int:age_group_id>', methods=['GET'])
@login_required
@handle_db_errors
def get_age_group(event_id, age_group_id):
    age_group = load_event_item(event_id, get_db().get_age_group(age_group_id), '年龄组')
    return jsonify({'success': True, 'data': age_group.to_dict()})


@event_config_bp.route('/<int:event_id>/age-groups', methods=['POST'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json(['name', 'min_age'])
@log_action('创建年龄组')
@handle_db_errors
def create_age_group(event_id):
    """创建年龄组（max_age 为空表示不设上限）"""
    values = parse_age_group(request.get_json())
    load_event(event_id)
    age_group = get_db().create_age_group(event_id, **values)
    logger.info(f"年龄组已创建: event_id={event_id}, age_group_id={age_group.age_group_id}")
    return jsonify({'success': True, 'message': '年龄组创建成功', 'data': age_group.to_dict()}), 201


@event_config_bp.route('/<int:event_id>/age-groups/<int:age_group_id>', methods=['PATCH'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json()
@log_action('更新年龄组')
@handle_db_errors
def update_age_group(event_id, age_group_id):
    update = parse_age_group(request.get_json(), partial=True)
    db = get_db()
    current = load_event_item(event_id, db.get_age_group(age_group_id), '年龄组')

    changes = update.changes()
    min_age = changes.get('min_age', current.min_age)
    max_age = changes.get('max_age', current.max_age)
    if max_age is not None and min_age > max_age:
        raise ValidationFailed(details={'max_age': '最小年龄不能大于最大年龄'})

    age_group = db.update_age_group(age_group_id, update)
    return jsonify({'success': True, 'message': '年龄组已更新', 'data': age_group.to_dict()})


@event_config_bp.route('/<int:event_id>/age-groups/<int:age_group_id>', methods=['DELETE'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@log_action('删除年龄组')
@handle_db_errors
def delete_age_group(event_id, age_group_id):
    db = get_db()
    load_event_item(event_id, db.get_age_group(age_group_id), '年龄组')
    if db.is_reference_in_use('age_groups', age_group_id):
        raise Conflict('该年龄组已被节目使用，无法删除')

    db.delete_age_group(age_group_id)
    logger.info(f"年龄组已删除: event_id={event_id}, age_group_id={age_group_id}")
    return jsonify({'success': True, 'message': '年龄组已删除'})
