from flask import Blueprint
import logging

from utils.errors import NotFound
from utils.studio_access import load_studio


studios_bp = Blueprint('studios', __name__)

logger = logging.getLogger(__name__)


def load_event_studio(event_id, studio_id):
    """舞团必须存在且属于 URL 中的赛事"""
    studio = load_studio(studio_id)
    if studio.event_id != event_id:
        raise NotFound('舞团不存在')
    return studio


from . import (
    create_studio,
    get_studios,
    update_studio,
    delete_studio,
    registration,
    update_representative,
)

__all__ = ['studios_bp', 'load_event_studio']
