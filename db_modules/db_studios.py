import logging

from mysql.connector import Error

from models import (
    Studio, StudioRepresentative, StudioEventRegistration, RegistrationStatus, RoleKey,
)
from db_modules.base import build_update, to_db_value


logger = logging.getLogger(__name__)


STUDIO_COLUMNS = ('name', 'country', 'city', 'director_name', 'director_phone', 'invoice_details')


def distinct_active_user_ids(representatives):
    """活跃代表的用户ID，去重并保持出现顺序"""
    seen = []
    for rep in representatives:
        user_id = rep['user_id'] if isinstance(rep, dict) else rep.user_id
        is_active = rep['is_active'] if isinstance(rep, dict) else rep.is_active
        if is_active and user_id not in seen:
            seen.append(user_id)
    return seen


def _row_to_registration(row):
    return StudioEventRegistration(
        registration_id=row['registration_id'],
        studio_id=row['studio_id'],
        event_id=row['event_id'],
        status=row['status'],
        can_edit_during_review=row['can_edit_during_review'],
        created_at=row.get('created_at'),
        updated_at=row.get('updated_at'),
    )


def _row_to_representative(row):
    return StudioRepresentative(
        representative_id=row['representative_id'],
        studio_id=row['studio_id'],
        user_id=row['user_id'],
        name=row['name'],
        email=row['email'],
        is_active=row['is_active'],
    )


class StudioDbMixin:
    """舞团、舞团代表、报名审核相关数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    - self.transaction(): 事务上下文，产出 dictionary 游标
    """

    # ==================== 舞团 ====================

    def _attach_details(self, cursor, studios):
        """为舞团列表补充代表和报名信息（两次批量查询）"""
        if not studios:
            return studios
        by_id = {studio.studio_id: studio for studio in studios}
        placeholders = ', '.join(['%s'] * len(by_id))
        ids = tuple(by_id)

        cursor.execute(f"""
            SELECT representative_id, studio_id, user_id, name, email, is_active
            FROM studio_representatives WHERE studio_id IN ({placeholders})
            ORDER BY representative_id
        """, ids)
        for row in cursor.fetchall():
            by_id[row['studio_id']].representatives.append(_row_to_representative(row))

        cursor.execute(f"""
            SELECT * FROM studio_event_registrations WHERE studio_id IN ({placeholders})
        """, ids)
        for row in cursor.fetchall():
            studio = by_id[row['studio_id']]
            # 只取舞团所属赛事的报名记录
            if row['event_id'] == studio.event_id:
                studio.registration = _row_to_registration(row)
        return studios

    def get_studio(self, studio_id):
        """获取舞团（已软删除的视为不存在），带代表、报名和赛事阶段"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("""
                    SELECT s.*, e.stage AS event_stage
                    FROM studios s JOIN events e ON e.event_id = s.event_id
                    WHERE s.studio_id = %s AND s.deleted_at IS NULL
                """, (studio_id,))
                row = cursor.fetchone()
                if not row:
                    return None
                studio = Studio(**row)
                self._attach_details(cursor, [studio])
                return studio
        except Error as e:
            logger.error(f"获取舞团失败: {e}")
            raise

    def list_studios(self, event_id, representative_user_id=None):
        """赛事下的舞团列表；指定 representative_user_id 时只返回该用户作为活跃代表的舞团"""
        sql = """
            SELECT s.*, e.stage AS event_stage
            FROM studios s JOIN events e ON e.event_id = s.event_id
            WHERE s.event_id = %s AND s.deleted_at IS NULL
        """
        params = [event_id]
        if representative_user_id is not None:
            sql += """
                AND EXISTS (
                    SELECT 1 FROM studio_representatives sr
                    WHERE sr.studio_id = s.studio_id AND sr.user_id = %s AND sr.is_active = TRUE
                )
            """
            params.append(representative_user_id)
        sql += " ORDER BY s.name"
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(sql, tuple(params))
                studios = [Studio(**row) for row in cursor.fetchall()]
                return self._attach_details(cursor, studios)
        except Error as e:
            logger.error(f"获取舞团列表失败: {e}")
            raise

    def create_studio(self, event_id, fields, registration_status, representative=None):
        """创建舞团及其报名记录（可同时创建一名代表），在一个事务内完成

        Args:
            fields: 舞团字段字典（name 必填）
            registration_status: 初始报名状态
            representative: {'user_id', 'name', 'email'}，管理员直接创建时为空
        """
        columns = [column for column in STUDIO_COLUMNS if column in fields]
        values = [to_db_value(fields[column]) for column in columns]
        try:
            with self.transaction() as cursor:
                cursor.execute(
                    f"INSERT INTO studios (event_id, {', '.join(columns)}) "
                    f"VALUES (%s, {', '.join(['%s'] * len(columns))})",
                    (event_id, *values),
                )
                studio_id = cursor.lastrowid
                if representative:
                    cursor.execute("""
                        INSERT INTO studio_representatives (studio_id, user_id, name, email, is_active)
                        VALUES (%s, %s, %s, %s, TRUE)
                    """, (studio_id, representative['user_id'], representative['name'], representative['email']))
                cursor.execute("""
                    INSERT INTO studio_event_registrations (studio_id, event_id, status)
                    VALUES (%s, %s, %s)
                """, (studio_id, event_id, RegistrationStatus(registration_status).value))
        except Error as e:
            logger.error(f"创建舞团失败: {e}")
            raise
        logger.info(f"舞团已创建: studio_id={studio_id}, event_id={event_id}")
        return self.get_studio(studio_id)

    def update_studio(self, studio_id, update):
        sql, params = build_update('studios', update.changes(), 'studio_id', studio_id,
                                   extra_where=' AND deleted_at IS NULL')
        if sql:
            try:
                with self.get_connection() as conn:
                    cursor = conn.cursor()
                    cursor.execute(sql, params)
                    conn.commit()
            except Error as e:
                logger.error(f"更新舞团失败: {e}")
                raise
        return self.get_studio(studio_id)

    def soft_delete_studio(self, studio_id):
        """软删除舞团"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    UPDATE studios SET deleted_at = CURRENT_TIMESTAMP
                    WHERE studio_id = %s AND deleted_at IS NULL
                """, (studio_id,))
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"删除舞团失败: {e}")
            raise

    def update_studio_logo(self, studio_id, logo_path, logo_url):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE studios SET logo_path = %s, logo_url = %s WHERE studio_id = %s",
                    (logo_path, logo_url, studio_id),
                )
                conn.commit()
        except Error as e:
            logger.error(f"更新舞团标志失败: {e}")
            raise
        return self.get_studio(studio_id)

    # ==================== 舞团代表 ====================

    def get_representative(self, representative_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("""
                    SELECT representative_id, studio_id, user_id, name, email, is_active
                    FROM studio_representatives WHERE representative_id = %s
                """, (representative_id,))
                row = cursor.fetchone()
                return _row_to_representative(row) if row else None
        except Error as e:
            logger.error(f"获取舞团代表失败: {e}")
            raise

    def update_representative(self, representative_id, update):
        sql, params = build_update('studio_representatives', update.changes(),
                                   'representative_id', representative_id)
        if sql:
            try:
                with self.get_connection() as conn:
                    cursor = conn.cursor()
                    cursor.execute(sql, params)
                    conn.commit()
            except Error as e:
                logger.error(f"更新舞团代表失败: {e}")
                raise
        return self.get_representative(representative_id)

    # ==================== 报名审核 ====================

    def get_registration(self, studio_id, event_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("""
                    SELECT * FROM studio_event_registrations WHERE studio_id = %s AND event_id = %s
                """, (studio_id, event_id))
                row = cursor.fetchone()
                return _row_to_registration(row) if row else None
        except Error as e:
            logger.error(f"获取报名记录失败: {e}")
            raise

    def delete_registration(self, studio_id, event_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    DELETE FROM studio_event_registrations WHERE studio_id = %s AND event_id = %s
                """, (studio_id, event_id))
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"撤销报名失败: {e}")
            raise

    def set_registration_status(self, studio_id, event_id, status, can_edit_during_review=None):
        """设置报名状态；通过审核时为舞团的每个活跃代表授予该赛事的 representative 角色

        状态更新和角色授予在同一个事务里完成：任何一步失败都整体回滚。
        已有的角色分配不会重复插入，重复审核通过不会产生新记录。
        若角色表中没有 representative，跳过授予步骤（只记录警告）。
        """
        status = RegistrationStatus(status)
        try:
            with self.transaction() as cursor:
                cursor.execute("""
                    INSERT INTO studio_event_registrations (studio_id, event_id, status, can_edit_during_review)
                    VALUES (%s, %s, %s, %s)
                    ON DUPLICATE KEY UPDATE
                        status = VALUES(status),
                        can_edit_during_review = IF(%s, VALUES(can_edit_during_review), can_edit_during_review)
                """, (
                    studio_id, event_id, status.value, bool(can_edit_during_review),
                    can_edit_during_review is not None,
                ))

                if status == RegistrationStatus.APPROVED:
                    self._grant_representative_role(cursor, studio_id, event_id)

                cursor.execute("""
                    SELECT * FROM studio_event_registrations WHERE studio_id = %s AND event_id = %s
                """, (studio_id, event_id))
                registration = _row_to_registration(cursor.fetchone())
        except Error as e:
            logger.error(f"更新报名状态失败: studio_id={studio_id}, event_id={event_id}, 错误: {e}")
            raise

        logger.info(f"报名状态已更新: studio_id={studio_id}, event_id={event_id}, status={status.value}")
        return registration

    def _grant_representative_role(self, cursor, studio_id, event_id):
        cursor.execute("SELECT role_id FROM roles WHERE role_key = %s", (RoleKey.REPRESENTATIVE.value,))
        role = cursor.fetchone()
        if not role:
            logger.warning("角色表中不存在 representative，跳过代表角色授予")
            return 0

        cursor.execute("""
            SELECT user_id, is_active FROM studio_representatives
            WHERE studio_id = %s AND is_active = TRUE
        """, (studio_id,))
        user_ids = distinct_active_user_ids(cursor.fetchall())
        if not user_ids:
            return 0

        cursor.executemany("""
            INSERT IGNORE INTO user_roles (user_id, role_id, event_id)
            VALUES (%s, %s, %s)
        """, [(user_id, role['role_id'], event_id) for user_id in user_ids])
        logger.info(f"已为 {len(user_ids)} 名舞团代表授予赛事角色: studio_id={studio_id}, event_id={event_id}")
        return len(user_ids)
