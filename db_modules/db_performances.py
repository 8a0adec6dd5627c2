import logging

from mysql.connector import Error

from models import Performance, Dancer
from db_modules.base import build_update


logger = logging.getLogger(__name__)


PERFORMANCE_COLUMNS = ('title', 'duration_sec', 'order_on_stage', 'category_id', 'age_group_id', 'format_id')


def _row_to_performance(row):
    return Performance(
        performance_id=row['performance_id'],
        event_id=row['event_id'],
        studio_id=row['studio_id'],
        title=row['title'],
        duration_sec=row['duration_sec'],
        order_on_stage=row.get('order_on_stage'),
        category_id=row['category_id'],
        age_group_id=row['age_group_id'],
        format_id=row['format_id'],
        created_at=row.get('created_at'),
        updated_at=row.get('updated_at'),
    )


class PerformanceDbMixin:
    """表演节目相关数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    - self.transaction(): 事务上下文，产出 dictionary 游标
    """

    def _attach_dancers(self, cursor, performances):
        if not performances:
            return performances
        by_id = {performance.performance_id: performance for performance in performances}
        placeholders = ', '.join(['%s'] * len(by_id))
        cursor.execute(f"""
            SELECT pp.performance_id, d.dancer_id, d.studio_id, d.first_name, d.last_name, d.birth_date,
                   d.photo_path, d.photo_url, d.deleted_at, d.created_at, d.updated_at
            FROM performance_participants pp
            JOIN dancers d ON d.dancer_id = pp.dancer_id
            WHERE pp.performance_id IN ({placeholders}) AND d.deleted_at IS NULL
            ORDER BY d.last_name, d.first_name
        """, tuple(by_id))
        for row in cursor.fetchall():
            performance_id = row.pop('performance_id')
            by_id[performance_id].dancers.append(Dancer(**row))
        return performances

    def get_performance(self, performance_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT * FROM performances WHERE performance_id = %s", (performance_id,))
                row = cursor.fetchone()
                if not row:
                    return None
                performance = _row_to_performance(row)
                self._attach_dancers(cursor, [performance])
                return performance
        except Error as e:
            logger.error(f"获取节目失败: {e}")
            raise

    def list_performances(self, studio_id):
        """舞团的节目列表（按出场顺序，未排序的放在最后）"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("""
                    SELECT * FROM performances WHERE studio_id = %s
                    ORDER BY order_on_stage IS NULL, order_on_stage, performance_id
                """, (studio_id,))
                performances = [_row_to_performance(row) for row in cursor.fetchall()]
                return self._attach_dancers(cursor, performances)
        except Error as e:
            logger.error(f"获取节目列表失败: {e}")
            raise

    def create_performance(self, event_id, studio_id, fields, dancer_ids):
        """创建节目及参演舞者（同一事务）"""
        columns = [column for column in PERFORMANCE_COLUMNS if column in fields]
        try:
            with self.transaction() as cursor:
                cursor.execute(
                    f"INSERT INTO performances (event_id, studio_id, {', '.join(columns)}) "
                    f"VALUES (%s, %s, {', '.join(['%s'] * len(columns))})",
                    (event_id, studio_id, *[fields[column] for column in columns]),
                )
                performance_id = cursor.lastrowid
                cursor.executemany(
                    "INSERT INTO performance_participants (performance_id, dancer_id) VALUES (%s, %s)",
                    [(performance_id, dancer_id) for dancer_id in dancer_ids],
                )
        except Error as e:
            logger.error(f"创建节目失败: {e}")
            raise
        return self.get_performance(performance_id)

    def update_performance(self, performance_id, update):
        """局部更新节目；提供 dancer_ids 时整体替换参演舞者，与字段更新在同一事务"""
        changes = update.changes()
        dancer_ids = changes.pop('dancer_ids', None)
        sql, params = build_update('performances', changes, 'performance_id', performance_id)
        try:
            with self.transaction() as cursor:
                if dancer_ids is not None:
                    cursor.execute("DELETE FROM performance_participants WHERE performance_id = %s",
                                   (performance_id,))
                    cursor.executemany(
                        "INSERT INTO performance_participants (performance_id, dancer_id) VALUES (%s, %s)",
                        [(performance_id, dancer_id) for dancer_id in dancer_ids],
                    )
                if sql:
                    cursor.execute(sql, params)
        except Error as e:
            logger.error(f"更新节目失败: {e}")
            raise
        return self.get_performance(performance_id)

    def delete_performance(self, performance_id):
        try:
            with self.transaction() as cursor:
                cursor.execute("DELETE FROM performance_participants WHERE performance_id = %s", (performance_id,))
                cursor.execute("DELETE FROM performances WHERE performance_id = %s", (performance_id,))
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"删除节目失败: {e}")
            raise
