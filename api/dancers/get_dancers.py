from flask import jsonify

from models import PermissionKey
from utils.decorators import login_required, handle_db_errors, current_auth
from utils.extensions import get_db
from utils.studio_access import load_studio, require_permission, require_approved_studio

from . import dancers_bp


@dancers_bp.route('/studios/<int:studio_id>/dancers', methods=['GET'])
@login_required
@handle_db_errors
def get_dancers(studio_id):
    auth = current_auth()
    studio = load_studio(studio_id)
    require_permission(auth, PermissionKey.DANCER_MANAGE, studio.event_id)
    require_approved_studio(auth, studio)

    dancers = get_db().list_dancers(studio_id)
    return jsonify({'success': True, 'data': [dancer.to_dict() for dancer in dancers]})
