#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 邮件服务（邮箱验证、邀请）
"""

import logging

from flask import current_app
from flask_mail import Mail, Message

logger = logging.getLogger(__name__)


ROLE_LABELS = {
    'admin': '管理员',
    'representative': '舞团代表',
    'judge': '评委',
    'moderator': '场控',
}


class EmailService:
    """基于 Flask-Mail 的邮件发送服务

    发送失败只记录日志并返回 False，不影响主流程。
    未配置 MAIL_SERVER 时不真正发送，只把链接写入日志（开发环境）。
    """

    def __init__(self, app=None):
        self.mail = Mail()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.mail.init_app(app)
        app.extensions['email_service'] = self

    def _link(self, path, token):
        base_url = current_app.config.get('PUBLIC_BASE_URL', '').rstrip('/')
        return f"{base_url}{path}?token={token}"

    def _send(self, to_email, subject, body):
        config = current_app.config
        if not config.get('MAIL_SERVER') and not config.get('MAIL_SUPPRESS_SEND'):
            logger.info(f"未配置邮件服务器，邮件未发送: to={to_email}, subject={subject}\n{body}")
            return False
        try:
            self.mail.send(Message(subject=subject, recipients=[to_email], body=body))
            logger.info(f"邮件已发送: to={to_email}, subject={subject}")
            return True
        except Exception as e:
            logger.error(f"发送邮件失败: to={to_email}, 错误: {e}")
            return False

    def send_verification_email(self, to_email, token, name=None):
        link = self._link('/verify-email', token)
        system_name = current_app.config.get('SYSTEM_NAME')
        body = (
            f"{name or '您好'}：\n\n"
            f"感谢注册{system_name}。请点击以下链接验证邮箱：\n{link}\n"
        )
        return self._send(to_email, f"{system_name} - 邮箱验证", body)

    def send_invitation_email(self, to_email, token, role_key, event_name=None):
        link = self._link('/accept-invitation', token)
        system_name = current_app.config.get('SYSTEM_NAME')
        role_label = ROLE_LABELS.get(role_key, role_key)
        ttl_days = current_app.config['INVITATION_TTL'].days
        scope = f"赛事「{event_name}」的" if event_name else ''
        body = (
            f"您好：\n\n"
            f"您被邀请成为{system_name}中{scope}{role_label}。\n"
            f"请点击以下链接完成注册（{ttl_days}天内有效）：\n{link}\n"
        )
        return self._send(to_email, f"{system_name} - 邀请函", body)
