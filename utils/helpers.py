#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 辅助函数
"""

import os
import re
import hmac
import uuid
import hashlib
import secrets
from datetime import datetime, date, timedelta, timezone

import jwt


def generate_unique_filename(filename):
    """生成唯一的文件名（保留原扩展名）"""
    if not filename:
        return None
    ext = os.path.splitext(filename)[1].lower()
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{timestamp}_{uuid.uuid4().hex}{ext}"


def allowed_file(filename, allowed_extensions):
    """检查文件类型是否允许"""
    return bool(filename) and '.' in filename and \
        filename.rsplit('.', 1)[1].lower() in allowed_extensions


def parse_datetime(date_str, format_str=None):
    """解析日期时间字符串（支持多种格式），无法解析时返回 None"""
    if not date_str or not isinstance(date_str, str):
        return None

    if format_str:
        try:
            return datetime.strptime(date_str, format_str)
        except ValueError:
            return None

    formats = [
        '%Y-%m-%dT%H:%M:%S',      # 2025-06-01T10:00:00
        '%Y-%m-%dT%H:%M:%S.%f',   # 2025-06-01T10:00:00.000
        '%Y-%m-%dT%H:%M',         # 2025-06-01T10:00
        '%Y-%m-%d %H:%M:%S',
        '%Y-%m-%d %H:%M',
        '%Y-%m-%d',
    ]

    # 时区标识统一按 UTC 去掉，数据库中存储不带时区的时间
    cleaned = date_str.strip().replace('Z', '').replace('+00:00', '')
    for fmt in formats:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def parse_date(date_str):
    """解析日期（出生日期等），接受 YYYY-MM-DD 或带时间的 ISO 字符串"""
    if isinstance(date_str, date) and not isinstance(date_str, datetime):
        return date_str
    parsed = parse_datetime(date_str)
    return parsed.date() if parsed else None


def validate_email(email):
    """验证邮箱格式"""
    if not email or not isinstance(email, str):
        return False
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def normalize_email(email):
    return email.strip().lower()


def generate_password_hash(password, salt_length=16):
    """生成密码哈希

    返回 salt+hash 的十六进制字符串（仅包含 ASCII 字符），可直接写入 VARBINARY 列。
    """
    salt = os.urandom(salt_length)
    password_hash = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, 100000)
    return (salt + password_hash).hex()


def verify_password(password, password_hash):
    """验证密码（password_hash 可以是十六进制字符串或从 VARBINARY 读出的字节）"""
    if not password or not password_hash:
        return False

    if isinstance(password_hash, (bytes, bytearray)):
        try:
            password_hash = password_hash.decode('ascii')
        except UnicodeDecodeError:
            return False
    try:
        raw = bytes.fromhex(password_hash)
    except (TypeError, ValueError):
        return False

    # 16 字节盐 + 32 字节哈希
    if len(raw) < 16 + 32:
        return False

    salt, stored_hash = raw[:16], raw[16:]
    computed_hash = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, 100000)
    return hmac.compare_digest(computed_hash, stored_hash)


def generate_token(nbytes=32):
    """生成一次性令牌（邮箱验证、邀请），64 位十六进制"""
    return secrets.token_hex(nbytes)


def create_access_token(user_id, secret, expires=timedelta(days=7), algorithm='HS256'):
    """签发访问令牌（JWT，sub 为用户ID）"""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'iat': now,
        'exp': now + expires,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token, secret, algorithm='HS256'):
    """校验访问令牌并返回用户ID；令牌无效或过期时返回 None"""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError:
        return None
    try:
        return int(payload.get('sub'))
    except (TypeError, ValueError):
        return None
