from flask import jsonify

from utils.decorators import login_required, handle_db_errors, current_auth
from utils.errors import NotFound
from utils.extensions import get_db
from utils.studio_access import load_studio, require_studio_member

from . import studios_bp


@studios_bp.route('/events/<int:event_id>/studios', methods=['GET'])
@login_required
@handle_db_errors
def get_event_studios(event_id):
    """赛事下的舞团：管理员看到全部，其他用户只看到自己担任活跃代表的舞团"""
    auth = current_auth()
    db = get_db()
    if not db.get_event(event_id):
        raise NotFound('赛事不存在')

    if auth.is_admin:
        studios = db.list_studios(event_id)
    else:
        studios = db.list_studios(event_id, representative_user_id=auth.user_id)

    return jsonify({'success': True, 'data': [studio.to_dict() for studio in studios]})


@studios_bp.route('/studios/<int:studio_id>', methods=['GET'])
@login_required
@handle_db_errors
def get_studio(studio_id):
    studio = load_studio(studio_id)
    require_studio_member(current_auth(), studio)
    return jsonify({'success': True, 'data': studio.to_dict()})
