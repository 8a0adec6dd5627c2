from flask import Blueprint
import logging


users_bp = Blueprint('users', __name__)

logger = logging.getLogger(__name__)

from . import (
    get_users,
    update_user_status,
    grant_user_role,
    revoke_user_role,
)

__all__ = ['users_bp']
