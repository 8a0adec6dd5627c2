from flask import jsonify

from utils.decorators import handle_db_errors
from utils.errors import NotFound
from utils.extensions import get_db

from . import events_bp


@events_bp.route('/<int:event_id>', methods=['GET'])
@handle_db_errors
def get_event(event_id):
    event = get_db().get_event(event_id)
    if not event:
        raise NotFound('赛事不存在')
    return jsonify({'success': True, 'data': event.to_dict()})
