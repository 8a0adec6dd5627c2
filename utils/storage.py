#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
舞蹈赛事管理系统 - 文件存储

StorageProvider 定义存储接口，LocalStorage 把文件保存在本地目录并通过
UPLOAD_URL_PREFIX 对外提供访问地址。由 create_app 注入到 app.extensions['storage']。
"""

import os
import logging

from werkzeug.utils import secure_filename

from utils.helpers import generate_unique_filename

logger = logging.getLogger(__name__)


class StorageProvider:
    """文件存储接口"""

    def save(self, file_storage, directory):
        """保存上传文件，返回存储路径（相对路径或对象键）"""
        raise NotImplementedError

    def delete(self, path):
        raise NotImplementedError

    def url_for(self, path):
        """存储路径对应的公开访问地址"""
        raise NotImplementedError


class LocalStorage(StorageProvider):
    """本地磁盘存储"""

    def __init__(self, root, url_prefix='/uploads'):
        self.root = os.path.abspath(str(root))
        self.url_prefix = url_prefix.rstrip('/')

    def _absolute(self, path):
        absolute = os.path.abspath(os.path.join(self.root, path))
        # 不允许访问存储根目录之外的文件
        if os.path.commonpath([absolute, self.root]) != self.root:
            raise ValueError(f"非法的存储路径: {path}")
        return absolute

    def save(self, file_storage, directory):
        filename = generate_unique_filename(secure_filename(file_storage.filename or ''))
        if not filename:
            raise ValueError("文件名为空")
        directory = secure_filename(directory)
        target_dir = os.path.join(self.root, directory)
        os.makedirs(target_dir, exist_ok=True)
        file_storage.save(os.path.join(target_dir, filename))
        path = f"{directory}/{filename}"
        logger.info(f"文件已保存: {path}")
        return path

    def delete(self, path):
        if not path:
            return False
        try:
            os.remove(self._absolute(path))
            logger.info(f"文件已删除: {path}")
            return True
        except FileNotFoundError:
            logger.warning(f"要删除的文件不存在: {path}")
            return False

    def url_for(self, path):
        return f"{self.url_prefix}/{path}"
