from api.account.auth import auth_bp
from api.account.users import users_bp

__all__ = ['auth_bp', 'users_bp']
