from flask import request, jsonify

from models import PermissionKey
from utils.decorators import (
    login_required, permission_required, admin_required, validate_json, log_action, handle_db_errors,
)
from utils.errors import Conflict
from utils.extensions import get_db
from utils.validators import parse_category

from . import event_config_bp, load_event, load_event_item, logger


@event_config_bp.route('/<int:event_id>/categories', methods=['GET'])
@login_required
@handle_db_errors
def list_categories(event_id):
    load_event(event_id)
    categories = get_db().list_categories(event_id)
    return jsonify({'success': True, 'data': [category.to_dict() for category in categories]})


@event_config_bp.route('/<int:event_id>/categories/<int:category_id>', methods=['GET'])
@login_required
@handle_db_errors
def get_category(event_id, category_id):
    category = load_event_item(event_id, get_db().get_category(category_id), '舞种')
    return jsonify({'success': True, 'data': category.to_dict()})


@event_config_bp.route('/<int:event_id>/categories', methods=['POST'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json(['name'])
@log_action('创建舞种')
@handle_db_errors
def create_category(event_id):
    """创建舞种（同一赛事内名称唯一）"""
    values = parse_category(request.get_json())
    load_event(event_id)
    db = get_db()
    if db.category_name_exists(event_id, values['name']):
        raise Conflict('该赛事已存在同名舞种')

    category = db.create_category(event_id, values['name'])
    logger.info(f"舞种已创建: event_id={event_id}, category_id={category.category_id}")
    return jsonify({'success': True, 'message': '舞种创建成功', 'data': category.to_dict()}), 201


@event_config_bp.route('/<int:event_id>/categories/<int:category_id>', methods=['PATCH'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json()
@log_action('更新舞种')
@handle_db_errors
def update_category(event_id, category_id):
    update = parse_category(request.get_json(), partial=True)
    db = get_db()
    load_event_item(event_id, db.get_category(category_id), '舞种')
    if 'name' in update.changes() and db.category_name_exists(event_id, update.name, exclude_id=category_id):
        raise Conflict('该赛事已存在同名舞种')

    category = db.update_category(category_id, update)
    return jsonify({'success': True, 'message': '舞种已更新', 'data': category.to_dict()})


@event_config_bp.route('/<int:event_id>/categories/<int:category_id>', methods=['DELETE'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@log_action('删除舞种')
@handle_db_errors
def delete_category(event_id, category_id):
    db = get_db()
    load_event_item(event_id, db.get_category(category_id), '舞种')
    if db.is_reference_in_use('dance_categories', category_id):
        raise Conflict('该舞种已被节目使用，无法删除')

    db.delete_category(category_id)
    logger.info(f"舞种已删除: event_id={event_id}, category_id={category_id}")
    return jsonify({'success': True, 'message': '舞种已删除'})
