from flask import request, jsonify

from utils.decorators import validate_json, log_action, handle_db_errors
from utils.extensions import get_user_manager
from utils.validators import parse_registration

from . import auth_bp


@auth_bp.route('/register', methods=['POST'])
@validate_json(['email', 'password', 'name'])
@log_action('用户注册')
@handle_db_errors
def register():
    """用户注册（注册后发送邮箱验证邮件）"""
    values = parse_registration(request.get_json())
    user, token = get_user_manager().register_user(values['email'], values['password'], values['name'])

    return jsonify({
        'success': True,
        'message': '注册成功，请查收验证邮件',
        'data': {
            'token': token,
            'token_type': 'Bearer',
            'user': user.to_dict(),
        },
    }), 201
