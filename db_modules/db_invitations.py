import logging

from mysql.connector import Error

from models import Invitation
from utils.errors import Conflict, ValidationFailed


logger = logging.getLogger(__name__)


INVITATION_SELECT = """
    SELECT i.invitation_id, i.email, i.role_key, i.event_id, i.token, i.created_by,
           i.expires_at, i.used_at, i.created_at, e.name AS event_name
    FROM invitations i
    LEFT JOIN events e ON e.event_id = i.event_id
"""


class InvitationDbMixin:
    """邀请相关数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    - self.transaction(): 事务上下文，产出 dictionary 游标
    """

    def create_invitation(self, email, role_key, event_id, token, created_by, expires_at):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO invitations (email, role_key, event_id, token, created_by, expires_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                """, (email, role_key, event_id, token, created_by, expires_at))
                conn.commit()
        except Error as e:
            logger.error(f"创建邀请失败: {e}")
            raise
        return self.get_invitation_by_token(token)

    def get_invitation_by_token(self, token):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(INVITATION_SELECT + " WHERE i.token = %s", (token,))
                row = cursor.fetchone()
                return Invitation(**row) if row else None
        except Error as e:
            logger.error(f"获取邀请失败: {e}")
            raise

    def list_invitations(self):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(INVITATION_SELECT + " ORDER BY i.created_at DESC, i.invitation_id DESC")
                return [Invitation(**row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"获取邀请列表失败: {e}")
            raise

    def find_active_invitation(self, email, role_key, event_id, now):
        """同一邮箱、角色、作用域下未使用且未过期的邀请"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute(INVITATION_SELECT + """
                    WHERE i.email = %s AND i.role_key = %s AND i.event_id <=> %s
                      AND i.used_at IS NULL AND i.expires_at > %s
                    LIMIT 1
                """, (email, role_key, event_id, now))
                row = cursor.fetchone()
                return Invitation(**row) if row else None
        except Error as e:
            logger.error(f"查询有效邀请失败: {e}")
            raise

    def email_has_role(self, email, role_key, event_id=None):
        """该邮箱对应的用户是否已在该作用域拥有该角色"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT COUNT(*) FROM user_roles ur
                    JOIN users u ON u.user_id = ur.user_id
                    JOIN roles r ON r.role_id = ur.role_id
                    WHERE u.email = %s AND r.role_key = %s AND ur.event_id <=> %s
                """, (email, role_key, event_id))
                return cursor.fetchone()[0] > 0
        except Error as e:
            logger.error(f"查询用户角色失败: {e}")
            raise

    def accept_invitation(self, invitation, name, password_hash):
        """接受邀请：创建或激活用户、授予角色、标记邀请已使用，全部在一个事务内

        Returns:
            int: 用户ID
        """
        try:
            with self.transaction() as cursor:
                cursor.execute(
                    "SELECT user_id, password_hash FROM users WHERE email = %s FOR UPDATE",
                    (invitation.email,),
                )
                user = cursor.fetchone()
                if user:
                    user_id = user['user_id']
                    # 已有密码的账户保持原密码
                    if not user['password_hash']:
                        cursor.execute("""
                            UPDATE users SET password_hash = %s, email_verified = TRUE, is_active = TRUE
                            WHERE user_id = %s
                        """, (password_hash, user_id))
                else:
                    cursor.execute("""
                        INSERT INTO users (email, name, password_hash, is_active, email_verified)
                        VALUES (%s, %s, %s, TRUE, TRUE)
                    """, (invitation.email, name, password_hash))
                    user_id = cursor.lastrowid

                cursor.execute("SELECT role_id FROM roles WHERE role_key = %s", (invitation.role_key,))
                role = cursor.fetchone()
                if not role:
                    raise ValidationFailed(f"角色不存在: {invitation.role_key}")

                cursor.execute("""
                    INSERT IGNORE INTO user_roles (user_id, role_id, event_id)
                    VALUES (%s, %s, %s)
                """, (user_id, role['role_id'], invitation.event_id))

                cursor.execute("""
                    UPDATE invitations SET used_at = CURRENT_TIMESTAMP
                    WHERE invitation_id = %s AND used_at IS NULL
                """, (invitation.invitation_id,))
                if cursor.rowcount == 0:
                    raise Conflict('邀请已被使用')
        except Error as e:
            logger.error(f"接受邀请失败: {e}")
            raise

        logger.info(f"邀请已接受: invitation_id={invitation.invitation_id}, user_id={user_id}")
        return user_id
