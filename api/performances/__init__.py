from flask import Blueprint
import logging

from models import PermissionKey
from utils.decorators import current_auth
from utils.errors import ValidationFailed
from utils.extensions import get_db
from utils.studio_access import load_studio, require_permission


performances_bp = Blueprint('performances', __name__)

logger = logging.getLogger(__name__)


def load_performance_studio(studio_id):
    studio = load_studio(studio_id)
    require_permission(current_auth(), PermissionKey.PERFORMANCE_MANAGE, studio.event_id)
    return studio


def check_performance(studio, values, current=None):
    """校验节目引用的配置和舞者

    values 为本次提供的字段；更新时 current 为现有节目，未提供的字段取现有值。
    - 舞种、年龄组、表演形式必须属于舞团所在赛事；
    - 舞者必须是本舞团未删除的舞者；
    - 舞者人数在表演形式的人数范围内，时长不超过表演形式的上限。
    """
    db = get_db()
    errors = {}

    def merged(field):
        if field in values:
            return values[field]
        return getattr(current, field) if current is not None else None

    references = (
        ('category_id', db.get_category, '舞种'),
        ('age_group_id', db.get_age_group, '年龄组'),
    )
    for field, getter, label in references:
        if field in values:
            item = getter(values[field])
            if item is None or item.event_id != studio.event_id:
                errors[field] = f'{label}不属于该赛事'

    dance_format = db.get_format(merged('format_id'))
    if dance_format is None or dance_format.event_id != studio.event_id:
        errors['format_id'] = '表演形式不属于该赛事'
        dance_format = None

    if 'dancer_ids' in values:
        dancer_ids = values['dancer_ids']
        live_ids = db.get_live_dancer_ids(studio.studio_id, dancer_ids)
        unknown = [dancer_id for dancer_id in dancer_ids if dancer_id not in live_ids]
        if unknown:
            errors['dancer_ids'] = f"舞者不存在或不属于该舞团: {', '.join(str(i) for i in unknown)}"
        dancer_count = len(dancer_ids)
    else:
        dancer_count = len(current.dancers)

    if dance_format is not None:
        if 'dancer_ids' not in errors and not dance_format.accepts_participants(dancer_count):
            errors['dancer_ids'] = (
                f'{dance_format.name}需要 {dance_format.min_participants}-'
                f'{dance_format.max_participants} 名舞者'
            )
        duration_sec = merged('duration_sec')
        if duration_sec is not None and duration_sec > dance_format.max_duration_seconds:
            errors['duration_sec'] = f'时长不能超过 {dance_format.max_duration_seconds} 秒'

    if errors:
        raise ValidationFailed(details=errors)
    return dance_format


from . import (
    create_performance,
    get_performances,
    update_performance,
    delete_performance,
)

__all__ = ['performances_bp']
