import logging

from mysql.connector import Error

from models import DanceCategory, AgeGroup, DanceFormat, Judge
from db_modules.base import build_update


logger = logging.getLogger(__name__)


# 参考数据被节目引用时不能删除：表 -> performances 中的外键列
REFERENCE_COLUMNS = {
    'dance_categories': 'category_id',
    'age_groups': 'age_group_id',
    'dance_formats': 'format_id',
}


class EventConfigDbMixin:
    """赛事配置（舞种、年龄组、表演形式、评委）数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    """

    # ==================== 通用 ====================

    def _fetch_all(self, sql, params, factory):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(sql, params)
                return [factory(**row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"查询赛事配置失败: {e}")
            raise

    def _fetch_one(self, sql, params, factory):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(sql, params)
                row = cursor.fetchone()
                return factory(**row) if row else None
        except Error as e:
            logger.error(f"查询赛事配置失败: {e}")
            raise

    def _insert(self, sql, params):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(sql, params)
                new_id = cursor.lastrowid
                conn.commit()
                return new_id
        except Error as e:
            logger.error(f"创建赛事配置失败: {e}")
            raise

    def _update(self, table, key_column, key_value, changes):
        sql, params = build_update(table, changes, key_column, key_value)
        if not sql:
            return
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(sql, params)
                conn.commit()
        except Error as e:
            logger.error(f"更新 {table} 失败: {e}")
            raise

    def _delete(self, table, key_column, key_value):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"DELETE FROM {table} WHERE {key_column} = %s", (key_value,))
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"删除 {table} 失败: {e}")
            raise

    def is_reference_in_use(self, table, reference_id):
        """参考数据是否被任何节目引用"""
        column = REFERENCE_COLUMNS[table]
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT COUNT(*) FROM performances WHERE {column} = %s", (reference_id,)
                )
                return cursor.fetchone()[0] > 0
        except Error as e:
            logger.error(f"检查参考数据引用失败: {e}")
            raise

    # ==================== 舞种 ====================

    def list_categories(self, event_id):
        return self._fetch_all(
            "SELECT category_id, event_id, name FROM dance_categories WHERE event_id = %s ORDER BY name",
            (event_id,), DanceCategory)

    def get_category(self, category_id):
        return self._fetch_one(
            "SELECT category_id, event_id, name FROM dance_categories WHERE category_id = %s",
            (category_id,), DanceCategory)

    def category_name_exists(self, event_id, name, exclude_id=None):
        """同一赛事内舞种名称是否已存在"""
        sql = "SELECT COUNT(*) FROM dance_categories WHERE event_id = %s AND name = %s"
        params = [event_id, name]
        if exclude_id is not None:
            sql += " AND category_id <> %s"
            params.append(exclude_id)
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(sql, tuple(params))
                return cursor.fetchone()[0] > 0
        except Error as e:
            logger.error(f"检查舞种名称失败: {e}")
            raise

    def create_category(self, event_id, name):
        category_id = self._insert(
            "INSERT INTO dance_categories (event_id, name) VALUES (%s, %s)", (event_id, name))
        return self.get_category(category_id)

    def update_category(self, category_id, update):
        self._update('dance_categories', 'category_id', category_id, update.changes())
        return self.get_category(category_id)

    def delete_category(self, category_id):
        return self._delete('dance_categories', 'category_id', category_id)

    # ==================== 年龄组 ====================

    def list_age_groups(self, event_id):
        return self._fetch_all("""
            SELECT age_group_id, event_id, name, min_age, max_age FROM age_groups
            WHERE event_id = %s ORDER BY min_age, age_group_id
        """, (event_id,), AgeGroup)

    def get_age_group(self, age_group_id):
        return self._fetch_one(
            "SELECT age_group_id, event_id, name, min_age, max_age FROM age_groups WHERE age_group_id = %s",
            (age_group_id,), AgeGroup)

    def create_age_group(self, event_id, name, min_age, max_age=None):
        age_group_id = self._insert("""
            INSERT INTO age_groups (event_id, name, min_age, max_age) VALUES (%s, %s, %s, %s)
        """, (event_id, name, min_age, max_age))
        return self.get_age_group(age_group_id)

    def update_age_group(self, age_group_id, update):
        self._update('age_groups', 'age_group_id', age_group_id, update.changes())
        return self.get_age_group(age_group_id)

    def delete_age_group(self, age_group_id):
        return self._delete('age_groups', 'age_group_id', age_group_id)

    # ==================== 表演形式 ====================

    def list_formats(self, event_id):
        return self._fetch_all("""
            SELECT format_id, event_id, name, min_participants, max_participants, max_duration_seconds
            FROM dance_formats WHERE event_id = %s ORDER BY min_participants, format_id
        """, (event_id,), DanceFormat)

    def get_format(self, format_id):
        return self._fetch_one("""
            SELECT format_id, event_id, name, min_participants, max_participants, max_duration_seconds
            FROM dance_formats WHERE format_id = %s
        """, (format_id,), DanceFormat)

    def create_format(self, event_id, name, min_participants, max_participants, max_duration_seconds):
        format_id = self._insert("""
            INSERT INTO dance_formats (event_id, name, min_participants, max_participants, max_duration_seconds)
            VALUES (%s, %s, %s, %s, %s)
        """, (event_id, name, min_participants, max_participants, max_duration_seconds))
        return self.get_format(format_id)

    def update_format(self, format_id, update):
        self._update('dance_formats', 'format_id', format_id, update.changes())
        return self.get_format(format_id)

    def delete_format(self, format_id):
        return self._delete('dance_formats', 'format_id', format_id)

    # ==================== 评委 ====================

    def list_judges(self, event_id):
        return self._fetch_all("""
            SELECT judge_id, event_id, user_id, name, description, country, city
            FROM judges WHERE event_id = %s ORDER BY name
        """, (event_id,), Judge)

    def get_judge(self, judge_id):
        return self._fetch_one("""
            SELECT judge_id, event_id, user_id, name, description, country, city
            FROM judges WHERE judge_id = %s
        """, (judge_id,), Judge)

    def create_judge(self, event_id, name, description=None, country=None, city=None, user_id=None):
        judge_id = self._insert("""
            INSERT INTO judges (event_id, user_id, name, description, country, city)
            VALUES (%s, %s, %s, %s, %s, %s)
        """, (event_id, user_id, name, description, country, city))
        return self.get_judge(judge_id)

    def update_judge(self, judge_id, update):
        self._update('judges', 'judge_id', judge_id, update.changes())
        return self.get_judge(judge_id)

    def delete_judge(self, judge_id):
        return self._delete('judges', 'judge_id', judge_id)
