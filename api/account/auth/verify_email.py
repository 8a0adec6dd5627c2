from flask import request, jsonify

from utils.decorators import validate_json, log_action, handle_db_errors
from utils.extensions import get_user_manager

from . import auth_bp


@auth_bp.route('/verify-email', methods=['POST'])
@validate_json(['token'])
@log_action('验证邮箱')
@handle_db_errors
def verify_email():
    token = request.get_json()['token'].strip()
    user = get_user_manager().verify_email(token)
    return jsonify({
        'success': True,
        'message': '邮箱验证成功',
        'data': user.to_dict(),
    })
