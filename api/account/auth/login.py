from flask import request, jsonify

from utils.decorators import validate_json, log_action, handle_db_errors
from utils.extensions import get_user_manager
from utils.validators import parse_login

from . import auth_bp


@auth_bp.route('/login', methods=['POST'])
@validate_json(['email', 'password'])
@log_action('用户登录')
@handle_db_errors
def login():
    """用户登录：返回 Bearer 访问令牌"""
    values = parse_login(request.get_json())
    user_manager = get_user_manager()
    user = user_manager.authenticate_user(values['email'], values['password'])

    return jsonify({
        'success': True,
        'message': '登录成功',
        'data': user_manager.token_payload(user),
    })
