from flask import Blueprint
import logging

from utils.errors import NotFound
from utils.extensions import get_db


event_config_bp = Blueprint('event_config', __name__)

logger = logging.getLogger(__name__)


def load_event(event_id):
    event = get_db().get_event(event_id)
    if not event:
        raise NotFound('赛事不存在')
    return event


def load_event_item(event_id, item, label):
    """校验配置项存在且属于该赛事（属于其他赛事的同样视为不存在）"""
    load_event(event_id)
    if item is None or item.event_id != event_id:
        raise NotFound(f'{label}不存在')
    return item


# 舞种、年龄组、表演形式、评委各自一个模块
from . import (
    categories,
    age_groups,
    formats,
    judges,
)

__all__ = ['event_config_bp', 'load_event', 'load_event_item']
