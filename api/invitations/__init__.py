from flask import Blueprint
import logging


invitations_bp = Blueprint('invitations', __name__)

logger = logging.getLogger(__name__)

from . import (
    create_invitation,
    get_invitations,
    accept_invitation,
)

__all__ = ['invitations_bp']
