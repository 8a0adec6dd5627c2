#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 数据库连接和操作
"""

import mysql.connector
from mysql.connector import Error, pooling
from contextlib import contextmanager
import logging
import time

from config import Config
from models import (
    DATABASE_SCHEMA, PERMISSION_SEED, ROLE_SEED, ROLE_PERMISSIONS, RoleKey,
)
from utils.helpers import generate_password_hash
from db_modules import (
    UserDbMixin,
    EventDbMixin,
    EventConfigDbMixin,
    StudioDbMixin,
    DancerDbMixin,
    PerformanceDbMixin,
    InvitationDbMixin,
)

logger = logging.getLogger(__name__)


class TimedCursorWrapper:
    """记录慢查询的游标包装器"""

    def __init__(self, cursor, slow_threshold_ms=50):
        self._cursor = cursor
        self._slow_threshold_ms = slow_threshold_ms

    def _report(self, started, operation, detail):
        duration_ms = (time.perf_counter() - started) * 1000
        if duration_ms >= self._slow_threshold_ms:
            logger.warning("慢查询 %.1f ms: %s; %s", duration_ms, operation, detail)

    def execute(self, operation, params=None, multi=False):
        started = time.perf_counter()
        try:
            return self._cursor.execute(operation, params, multi)
        finally:
            self._report(started, operation, f"params={params}")

    def executemany(self, operation, seq_params):
        started = time.perf_counter()
        try:
            return self._cursor.executemany(operation, seq_params)
        finally:
            self._report(started, operation, f"params_count={len(seq_params) if seq_params else 0}")

    def __getattr__(self, item):
        return getattr(self._cursor, item)


class DatabaseManager(
    UserDbMixin,
    EventDbMixin,
    EventConfigDbMixin,
    StudioDbMixin,
    DancerDbMixin,
    PerformanceDbMixin,
    InvitationDbMixin,
):
    """数据库管理器（每个应用实例持有自己的连接池）"""

    def __init__(self, settings=None):
        settings = settings or {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
        self.settings = settings
        self.config = {
            'host': settings.get('DB_HOST'),
            'port': settings.get('DB_PORT'),
            'user': settings.get('DB_USER'),
            'password': settings.get('DB_PASSWORD'),
            'database': settings.get('DB_NAME'),
            'charset': 'utf8mb4',
            'collation': 'utf8mb4_unicode_ci',
            'autocommit': False,
            'raise_on_warnings': False,
            'connection_timeout': 30,
        }
        self.slow_threshold_ms = settings.get('SLOW_QUERY_THRESHOLD_MS', 50)
        self.pool = self._create_pool(settings.get('DB_POOL_NAME', 'dance_pool'),
                                      settings.get('DB_POOL_SIZE', 5))

    def _create_pool(self, pool_name, pool_size):
        """创建连接池，失败时回退到直连模式"""
        try:
            pool = pooling.MySQLConnectionPool(
                pool_name=pool_name,
                pool_size=pool_size,
                pool_reset_session=True,
                **self.config
            )
            logger.info(f"数据库连接池创建成功，池大小: {pool_size}")
            return pool
        except Error as e:
            logger.error(f"创建数据库连接池失败，将回退到直连模式: {e}")
            return None

    @contextmanager
    def get_connection(self):
        """获取数据库连接的上下文管理器"""
        connection = None
        try:
            if self.pool:
                connection = self.pool.get_connection()
            else:
                connection = mysql.connector.connect(**self.config)

            original_cursor = connection.cursor
            threshold = self.slow_threshold_ms

            def timed_cursor(*args, **kwargs):
                return TimedCursorWrapper(original_cursor(*args, **kwargs), slow_threshold_ms=threshold)

            connection.cursor = timed_cursor
            yield connection
        except Error as e:
            logger.error(f"数据库连接错误: {e}")
            if connection:
                connection.rollback()
            raise
        finally:
            if connection and connection.is_connected():
                connection.close()

    @contextmanager
    def transaction(self):
        """事务上下文：正常退出时提交一次，任何异常都回滚全部修改"""
        with self.get_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def ping(self):
        """健康检查"""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            return cursor.fetchone()[0] == 1

    def init_database(self, force_recreate=False):
        """初始化数据库、表结构和角色/权限基础数据

        Args:
            force_recreate (bool): 是否强制重建表（删除现有表）
        """
        try:
            server_config = self.config.copy()
            server_config.pop('database', None)

            with mysql.connector.connect(**server_config) as connection:
                cursor = connection.cursor()
                cursor.execute(
                    f"CREATE DATABASE IF NOT EXISTS {self.config['database']} "
                    "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
                )

            with self.get_connection() as connection:
                cursor = connection.cursor()

                if force_recreate:
                    logger.info("强制重建模式：删除现有表...")
                    for table_name in reversed(list(DATABASE_SCHEMA.keys())):
                        cursor.execute(f"DROP TABLE IF EXISTS {table_name}")
                        logger.info(f"删除表 {table_name}")

                for table_name, schema in DATABASE_SCHEMA.items():
                    try:
                        cursor.execute(schema)
                    except Error as e:
                        logger.error(f"创建表 {table_name} 失败: {e}")
                        raise
                connection.commit()

                self._seed_roles_and_permissions(cursor)
                connection.commit()

                self._create_default_admin(cursor)
                connection.commit()

        except Error as e:
            logger.error(f"数据库初始化失败: {e}")
            raise

    def _seed_roles_and_permissions(self, cursor):
        """写入角色、权限及其关联（可重复执行）"""
        cursor.executemany("""
            INSERT INTO permissions (permission_key, name, description)
            VALUES (%s, %s, %s)
            ON DUPLICATE KEY UPDATE name = VALUES(name), description = VALUES(description)
        """, PERMISSION_SEED)
        cursor.executemany("""
            INSERT INTO roles (role_key, name, description)
            VALUES (%s, %s, %s)
            ON DUPLICATE KEY UPDATE name = VALUES(name), description = VALUES(description)
        """, ROLE_SEED)

        pairs = [
            (role_key, permission_key)
            for role_key, permission_keys in ROLE_PERMISSIONS.items()
            for permission_key in permission_keys
        ]
        cursor.executemany("""
            INSERT IGNORE INTO role_permissions (role_id, permission_id)
            SELECT r.role_id, p.permission_id
            FROM roles r, permissions p
            WHERE r.role_key = %s AND p.permission_key = %s
        """, pairs)
        logger.info(f"角色/权限基础数据已同步: {len(ROLE_SEED)} 个角色, {len(PERMISSION_SEED)} 个权限")

    def _create_default_admin(self, cursor):
        """库中没有全局管理员时创建默认管理员账户"""
        cursor.execute("""
            SELECT COUNT(*) FROM user_roles ur
            JOIN roles r ON r.role_id = ur.role_id
            WHERE r.role_key = %s AND ur.event_id IS NULL
        """, (RoleKey.ADMIN.value,))
        if cursor.fetchone()[0]:
            return

        email = self.settings.get('DEFAULT_ADMIN_EMAIL')
        password = self.settings.get('DEFAULT_ADMIN_PASSWORD')
        if not password:
            logger.warning("未配置 DEFAULT_ADMIN_PASSWORD，跳过创建默认管理员")
            return

        cursor.execute("SELECT user_id FROM users WHERE email = %s", (email,))
        row = cursor.fetchone()
        if row:
            user_id = row[0]
        else:
            cursor.execute("""
                INSERT INTO users (email, name, password_hash, is_active, email_verified)
                VALUES (%s, %s, %s, TRUE, TRUE)
            """, (email, '系统管理员', generate_password_hash(password)))
            user_id = cursor.lastrowid

        cursor.execute("""
            INSERT IGNORE INTO user_roles (user_id, role_id, event_id)
            SELECT %s, role_id, NULL FROM roles WHERE role_key = %s
        """, (user_id, RoleKey.ADMIN.value))
        logger.info(f"默认管理员账户创建成功 (邮箱: {email})")


if __name__ == '__main__':
    db_manager = DatabaseManager()
    try:
        db_manager.init_database()
        print("数据库初始化成功！")
    except Exception as e:
        print(f"数据库初始化失败: {e}")
