from flask import jsonify

from utils.decorators import login_required, handle_db_errors, current_auth
from utils.extensions import get_db
from utils.studio_access import require_approved_studio

from . import performances_bp, load_performance_studio


@performances_bp.route('/studios/<int:studio_id>/performances', methods=['GET'])
@login_required
@handle_db_errors
def get_performances(studio_id):
    studio = load_performance_studio(studio_id)
    require_approved_studio(current_auth(), studio)

    performances = get_db().list_performances(studio_id)
    return jsonify({'success': True, 'data': [performance.to_dict() for performance in performances]})
