import logging

from mysql.connector import Error

from models import User, UserRole
from utils.permissions import RoleAssignment, Scope


logger = logging.getLogger(__name__)


def _row_to_user(row):
    return User(
        user_id=row['user_id'],
        email=row['email'],
        name=row['name'],
        password_hash=row.get('password_hash'),
        is_active=row['is_active'],
        email_verified=row.get('email_verified', False),
        email_verification_token=row.get('email_verification_token'),
        photo_path=row.get('photo_path'),
        photo_url=row.get('photo_url'),
        created_at=row.get('created_at'),
        updated_at=row.get('updated_at'),
    )


def group_role_rows(rows):
    """把 (user_role_id, role_key, event_id, permission_key) 行合并为 RoleAssignment 列表，保持分配顺序"""
    grouped = {}
    for row in rows:
        entry = grouped.setdefault(row['user_role_id'], {
            'role_key': row['role_key'],
            'event_id': row['event_id'],
            'permissions': set(),
        })
        if row.get('permission_key'):
            entry['permissions'].add(row['permission_key'])

    return [
        RoleAssignment(
            role_key=entry['role_key'],
            scope=Scope.GLOBAL if entry['event_id'] is None else Scope.event(entry['event_id']),
            permissions=frozenset(entry['permissions']),
        )
        for entry in grouped.values()
    ]


class UserDbMixin:
    """用户与角色分配相关数据库操作 mixin。

    依赖宿主类提供:
    - self.get_connection(): 返回数据库连接的上下文管理器
    """

    # ==================== 用户相关操作 ====================

    def create_user(self, email, name, password_hash=None, is_active=True,
                    email_verified=False, email_verification_token=None):
        """创建用户"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO users (email, name, password_hash, is_active, email_verified, email_verification_token)
                    VALUES (%s, %s, %s, %s, %s, %s)
                """, (email, name, password_hash, is_active, email_verified, email_verification_token))
                user_id = cursor.lastrowid
                conn.commit()
        except Error as e:
            logger.error(f"创建用户失败: {e}")
            raise
        return self.get_user_by_id(user_id)

    def get_user_by_id(self, user_id):
        """根据ID获取用户"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT * FROM users WHERE user_id = %s", (user_id,))
                row = cursor.fetchone()
                return _row_to_user(row) if row else None
        except Error as e:
            logger.error(f"获取用户失败: {e}")
            raise

    def get_user_by_email(self, email):
        """根据邮箱获取用户（包括已停用的用户）"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT * FROM users WHERE email = %s", (email,))
                row = cursor.fetchone()
                return _row_to_user(row) if row else None
        except Error as e:
            logger.error(f"获取用户失败: {e}")
            raise

    def get_user_by_verification_token(self, token):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT * FROM users WHERE email_verification_token = %s", (token,))
                row = cursor.fetchone()
                return _row_to_user(row) if row else None
        except Error as e:
            logger.error(f"根据验证令牌获取用户失败: {e}")
            raise

    def mark_email_verified(self, user_id):
        """标记邮箱已验证并清除验证令牌"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    UPDATE users SET email_verified = TRUE, email_verification_token = NULL
                    WHERE user_id = %s
                """, (user_id,))
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"更新邮箱验证状态失败: {e}")
            raise

    def list_users(self):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT * FROM users ORDER BY created_at DESC, user_id DESC")
                return [_row_to_user(row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"获取用户列表失败: {e}")
            raise

    def set_user_active(self, user_id, is_active):
        """启用/停用用户"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("UPDATE users SET is_active = %s WHERE user_id = %s", (bool(is_active), user_id))
                conn.commit()
        except Error as e:
            logger.error(f"更新用户状态失败: {e}")
            raise
        return self.get_user_by_id(user_id)

    # ==================== 角色分配 ====================

    def get_role_assignments(self, user_id):
        """一次查询取出用户的全部角色分配及各角色包含的权限"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("""
                    SELECT ur.user_role_id, r.role_key, ur.event_id, p.permission_key
                    FROM user_roles ur
                    JOIN roles r ON r.role_id = ur.role_id
                    LEFT JOIN role_permissions rp ON rp.role_id = r.role_id
                    LEFT JOIN permissions p ON p.permission_id = rp.permission_id
                    WHERE ur.user_id = %s
                    ORDER BY ur.user_role_id
                """, (user_id,))
                return group_role_rows(cursor.fetchall())
        except Error as e:
            logger.error(f"获取用户角色分配失败: {e}")
            raise

    def get_user_roles(self, user_id):
        """用户的角色分配明细（用于展示）"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("""
                    SELECT ur.user_role_id, ur.user_id, r.role_key, r.name AS role_name,
                           ur.event_id, e.name AS event_name, ur.created_at
                    FROM user_roles ur
                    JOIN roles r ON r.role_id = ur.role_id
                    LEFT JOIN events e ON e.event_id = ur.event_id
                    WHERE ur.user_id = %s
                    ORDER BY ur.user_role_id
                """, (user_id,))
                return [UserRole(**row) for row in cursor.fetchall()]
        except Error as e:
            logger.error(f"获取用户角色失败: {e}")
            raise

    def get_role_by_key(self, role_key):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor(dictionary=True)
                cursor.execute("SELECT role_id, role_key, name FROM roles WHERE role_key = %s", (role_key,))
                return cursor.fetchone()
        except Error as e:
            logger.error(f"获取角色失败: {e}")
            raise

    def assign_role(self, user_id, role_id, event_id=None):
        """分配角色（已存在时不做任何修改），返回是否新增"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT IGNORE INTO user_roles (user_id, role_id, event_id)
                    VALUES (%s, %s, %s)
                """, (user_id, role_id, event_id))
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"分配角色失败: {e}")
            raise

    def remove_user_role(self, user_id, user_role_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM user_roles WHERE user_role_id = %s AND user_id = %s",
                    (user_role_id, user_id),
                )
                conn.commit()
                return cursor.rowcount > 0
        except Error as e:
            logger.error(f"移除用户角色失败: {e}")
            raise
