from flask import jsonify

from utils.decorators import login_required, admin_required, log_action, handle_db_errors, current_auth
from utils.errors import NotFound
from utils.extensions import get_db
from utils.studio_access import load_studio, require_studio_member, require_dancer_management

from . import images_bp, save_uploaded_image, remove_previous_image, logger


@images_bp.route('/events/<int:event_id>', methods=['POST'])
@admin_required
@log_action('上传赛事图片')
@handle_db_errors
def upload_event_image(event_id):
    db = get_db()
    event = db.get_event(event_id)
    if not event:
        raise NotFound('赛事不存在')
    previous = event.image_path

    path, url = save_uploaded_image('events')
    event = db.update_event_image(event_id, path, url)
    remove_previous_image(previous)
    return jsonify({'success': True, 'message': '图片上传成功', 'data': event.to_dict()})


@images_bp.route('/studios/<int:studio_id>', methods=['POST'])
@login_required
@log_action('上传舞团标志')
@handle_db_errors
def upload_studio_logo(studio_id):
    """管理员或舞团的活跃代表可以上传"""
    studio = load_studio(studio_id)
    require_studio_member(current_auth(), studio)
    previous = studio.logo_path

    path, url = save_uploaded_image('studios')
    studio = get_db().update_studio_logo(studio_id, path, url)
    remove_previous_image(previous)
    logger.info(f"舞团标志已更新: studio_id={studio_id}")
    return jsonify({'success': True, 'message': '图片上传成功', 'data': studio.to_dict()})


@images_bp.route('/dancers/<int:dancer_id>', methods=['POST'])
@login_required
@log_action('上传舞者照片')
@handle_db_errors
def upload_dancer_photo(dancer_id):
    """管理员，或已通过审核舞团的代表（受赛事阶段约束）"""
    db = get_db()
    dancer = db.get_dancer(dancer_id)
    if not dancer:
        raise NotFound('舞者不存在')
    studio = load_studio(dancer.studio_id)
    require_dancer_management(current_auth(), studio)
    previous = dancer.photo_path

    path, url = save_uploaded_image('dancers')
    dancer = db.update_dancer_photo(dancer_id, path, url)
    remove_previous_image(previous)
    return jsonify({'success': True, 'message': '图片上传成功', 'data': dancer.to_dict()})
