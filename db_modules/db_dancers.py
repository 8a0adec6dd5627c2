import logging

from mysql.connector import Error

from models import Dancer
from db_modules.base import build_update


logger = logging.getLogger(__name__)


DANCER_SELECT = """
    SELECT dancer_id, studio_id, first_name, last_name, birth_date, photo_path, photo_url,
           deleted_at, created_at, updated_at
    FROM dancers
"""


class DancerDbMixin:
    """舞者相关数据库操作 mixin（所有读取都排除已软删除的舞者）。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    """

    def create_dancer(self, studio_id, first_name, last_name, birth_date):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO dancers (studio_id, first_name, last_name, birth_date)
                    VALUES (%s, %s, %s, %s)
                """, (studio_id, first_name, last_name, birth_date))
                dancer_id = cursor.lastrowid
                conn.commit()
        except Error as e:
            logger.error(f"创建舞者失败: {e}")
            raise
        return self.get_dancer(dancer_id)

    def get_dancer(self, dancer_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(DANCER_SELECT + " WHERE dancer_id = %s AND deleted_at IS NULL", (dancer_id,))
                row = cursor.fetchone()
                return Dancer(**row) if row else None
        except Error as e:
            logger.error(f"获取舞者失败: {e}")
            raise

    def list_dancers(self, studio_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(
                    DANCER_SELECT + " WHERE studio_id = %s AND deleted_at IS NULL ORDER BY last_name, first_name",
                    (studio_id,),
                )
                return [Dancer(**row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"获取舞者列表失败: {e}")
            raise

    def get_live_dancer_ids(self, studio_id, dancer_ids):
        """返回 dancer_ids 中属于该舞团且未删除的舞者ID集合"""
        if not dancer_ids:
            return set()
        placeholders = ', '.join(['%s'] * len(dancer_ids))
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"""
                    SELECT dancer_id FROM dancers
                    WHERE studio_id = %s AND deleted_at IS NULL AND dancer_id IN ({placeholders})
                """, (studio_id, *dancer_ids))
                return {row[0] for row in cursor.fetchall()}
        except Error as e:
            logger.error(f"校验舞者失败: {e}")
            raise

    def update_dancer(self, dancer_id, update):
        sql, params = build_update('dancers', update.changes(), 'dancer_id', dancer_id,
                                   extra_where=' AND deleted_at IS NULL')
        if sql:
            try:
                with self.get_connection() as conn:
                    cursor = conn.cursor()
                    cursor.execute(sql, params)
                    conn.commit()
            except Error as e:
                logger.error(f"更新舞者失败: {e}")
                raise
        return self.get_dancer(dancer_id)

    def soft_delete_dancer(self, dancer_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    UPDATE dancers SET deleted_at = CURRENT_TIMESTAMP
                    WHERE dancer_id = %s AND deleted_at IS NULL
                """, (dancer_id,))
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"删除舞者失败: {e}")
            raise

    def update_dancer_photo(self, dancer_id, photo_path, photo_url):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE dancers SET photo_path = %s, photo_url = %s WHERE dancer_id = %s",
                    (photo_path, photo_url, dancer_id),
                )
                conn.commit()
        except Error as e:
            logger.error(f"更新舞者照片失败: {e}")
            raise
        return self.get_dancer(dancer_id)
