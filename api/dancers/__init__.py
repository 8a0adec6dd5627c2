from flask import Blueprint
import logging


dancers_bp = Blueprint('dancers', __name__)

logger = logging.getLogger(__name__)

from . import (
    create_dancer,
    get_dancers,
    update_dancer,
    delete_dancer,
)

__all__ = ['dancers_bp']
