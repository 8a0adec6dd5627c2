from flask import request, jsonify

from models import EventStage
from utils.decorators import handle_db_errors
from utils.errors import ValidationFailed
from utils.extensions import get_db

from . import events_bp


@events_bp.route('', methods=['GET'])
@handle_db_errors
def get_events():
    """获取赛事列表（公开，按开始时间排序）

    可选查询参数：
    - stage: 赛事阶段 PRE_REGISTRATION/REGISTRATION_OPEN/DATA_REVIEW/FINALIZED/ENDED
    """
    stage = request.args.get('stage', '').strip().upper() or None
    if stage is not None:
        try:
            stage = EventStage(stage)
        except ValueError:
            raise ValidationFailed(f'无效的赛事阶段: {stage}')

    events = get_db().list_events(stage)
    return jsonify({
        'success': True,
        'data': [event.to_dict() for event in events],
    })
