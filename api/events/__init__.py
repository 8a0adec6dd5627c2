from flask import Blueprint
import logging


events_bp = Blueprint('events', __name__)

logger = logging.getLogger(__name__)

# 每个具体路由实现在本包下的独立模块中
from . import (
    get_events,
    get_event,
    create_event,
    update_event,
)

__all__ = ['events_bp']
