import logging

from mysql.connector import Error

from models import Event, EventStage
from db_modules.base import build_update


logger = logging.getLogger(__name__)


def _row_to_event(row):
    return Event(
        event_id=row['event_id'],
        name=row['name'],
        starts_at=row['starts_at'],
        ends_at=row['ends_at'],
        stage=row['stage'],
        image_path=row.get('image_path'),
        image_url=row.get('image_url'),
        created_at=row.get('created_at'),
        updated_at=row.get('updated_at'),
    )


class EventDbMixin:
    """赛事相关数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    """

    def create_event(self, name, starts_at, ends_at, stage=EventStage.PRE_REGISTRATION):
        """创建赛事"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO events (name, starts_at, ends_at, stage)
                    VALUES (%s, %s, %s, %s)
                """, (name, starts_at, ends_at, EventStage(stage).value))
                event_id = cursor.lastrowid
                conn.commit()
        except Error as e:
            logger.error(f"创建赛事失败: {e}")
            raise
        return self.get_event(event_id)

    def get_event(self, event_id):
        """根据ID获取赛事"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT * FROM events WHERE event_id = %s", (event_id,))
                row = cursor.fetchone()
                return _row_to_event(row) if row else None
        except Error as e:
            logger.error(f"获取赛事失败: {e}")
            raise

    def list_events(self, stage=None):
        """赛事列表（按开始时间排序，可按阶段筛选）"""
        sql = "SELECT * FROM events"
        params = []
        if stage is not None:
            sql += " WHERE stage = %s"
            params.append(EventStage(stage).value)
        sql += " ORDER BY starts_at ASC, event_id ASC"
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(sql, tuple(params))
                return [_row_to_event(row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"获取赛事列表失败: {e}")
            raise

    def update_event(self, event_id, update):
        """局部更新赛事（阶段可以自由切换）"""
        sql, params = build_update('events', update.changes(), 'event_id', event_id)
        if sql:
            try:
                with self.get_connection() as conn:
                    cursor = conn.cursor()
                    cursor.execute(sql, params)
                    conn.commit()
            except Error as e:
                logger.error(f"更新赛事失败: {e}")
                raise
        return self.get_event(event_id)

    def update_event_image(self, event_id, image_path, image_url):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE events SET image_path = %s, image_url = %s WHERE event_id = %s",
                    (image_path, image_url, event_id),
                )
                conn.commit()
        except Error as e:
            logger.error(f"更新赛事图片失败: {e}")
            raise
        return self.get_event(event_id)
