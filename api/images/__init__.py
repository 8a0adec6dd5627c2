from flask import Blueprint, request, current_app
import logging

from utils.errors import ValidationFailed
from utils.extensions import get_storage
from utils.helpers import allowed_file


images_bp = Blueprint('images', __name__)

logger = logging.getLogger(__name__)


def save_uploaded_image(directory):
    """保存请求中的 image 文件，返回 (存储路径, 访问地址)"""
    file = request.files.get('image')
    if file is None or not file.filename:
        raise ValidationFailed('请选择要上传的图片')
    allowed = current_app.config['ALLOWED_IMAGE_EXTENSIONS']
    if not allowed_file(file.filename, allowed):
        raise ValidationFailed(f"不支持的图片格式，允许: {', '.join(sorted(allowed))}")

    storage = get_storage()
    path = storage.save(file, directory)
    return path, storage.url_for(path)


def remove_previous_image(path):
    """替换成功后删除旧文件；删除失败只记录日志"""
    if not path:
        return
    try:
        get_storage().delete(path)
    except (OSError, ValueError) as e:
        logger.warning(f"删除旧图片失败: {path}, 错误: {e}")


from . import upload

__all__ = ['images_bp']
