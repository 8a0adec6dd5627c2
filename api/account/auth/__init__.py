from flask import Blueprint
import logging


auth_bp = Blueprint('auth', __name__)

logger = logging.getLogger(__name__)

from . import (
    register,
    login,
    verify_email,
    get_profile,
)

__all__ = ['auth_bp']
