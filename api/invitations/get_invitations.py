from flask import jsonify

from utils.decorators import admin_required, handle_db_errors
from utils.extensions import get_db

from . import invitations_bp


@invitations_bp.route('', methods=['GET'])
@admin_required
@handle_db_errors
def get_invitations():
    invitations = get_db().list_invitations()
    return jsonify({
        'success': True,
        'data': [invitation.to_dict() for invitation in invitations],
    })
