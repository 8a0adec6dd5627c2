from flask import request, jsonify

from models import PermissionKey
from utils.decorators import (
    login_required, permission_required, admin_required, validate_json, log_action, handle_db_errors,
)
from utils.errors import NotFound
from utils.extensions import get_db
from utils.validators import parse_judge

from . import event_config_bp, load_event, load_event_item, logger


@event_config_bp.route('/<int:event_id>/judges', methods=['GET'])
@login_required
@handle_db_errors
def list_judges(event_id):
    load_event(event_id)
    judges = get_db().list_judges(event_id)
    return jsonify({'success': True, 'data': [judge.to_dict() for judge in judges]})


@event_config_bp.route('/<int:event_id>/judges/<int:judge_id>', methods=['GET'])
@login_required
@handle_db_errors
def get_judge(event_id, judge_id):
    judge = load_event_item(event_id, get_db().get_judge(judge_id), '评委')
    return jsonify({'success': True, 'data': judge.to_dict()})


@event_config_bp.route('/<int:event_id>/judges', methods=['POST'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json(['name'])
@log_action('创建评委')
@handle_db_errors
def create_judge(event_id):
    """创建评委（可关联一个已有用户账户）"""
    values = parse_judge(request.get_json())
    load_event(event_id)
    db = get_db()
    if values.get('user_id') is not None and not db.get_user_by_id(values['user_id']):
        raise NotFound('关联的用户不存在')

    judge = db.create_judge(event_id, **values)
    logger.info(f"评委已创建: event_id={event_id}, judge_id={judge.judge_id}")
    return jsonify({'success': True, 'message': '评委创建成功', 'data': judge.to_dict()}), 201


@event_config_bp.route('/<int:event_id>/judges/<int:judge_id>', methods=['PATCH'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@validate_json()
@log_action('更新评委')
@handle_db_errors
def update_judge(event_id, judge_id):
    update = parse_judge(request.get_json(), partial=True)
    db = get_db()
    load_event_item(event_id, db.get_judge(judge_id), '评委')

    judge = db.update_judge(judge_id, update)
    return jsonify({'success': True, 'message': '评委已更新', 'data': judge.to_dict()})


@event_config_bp.route('/<int:event_id>/judges/<int:judge_id>', methods=['DELETE'])
@permission_required(PermissionKey.EVENT_MANAGE, event_param='event_id')
@admin_required
@log_action('删除评委')
@handle_db_errors
def delete_judge(event_id, judge_id):
    db = get_db()
    load_event_item(event_id, db.get_judge(judge_id), '评委')
    db.delete_judge(judge_id)
    logger.info(f"评委已删除: event_id={event_id}, judge_id={judge_id}")
    return jsonify({'success': True, 'message': '评委已删除'})
