"""
业务异常定义

路由里直接抛出这些异常，由 main.py 中注册的异常处理器统一转换为
{"success": false, "message": ...} 格式的响应。
"""


class PromptNexusError(Exception):
    """业务异常基类"""
    status_code = 500
    default_message = "服务器内部错误"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(PromptNexusError):
    """缺少字段或字段格式错误"""
    status_code = 400
    default_message = "缺少必填字段"


class InvalidRatingError(ValidationError):
    default_message = "评分必须是1到5之间的整数"


class DuplicateError(PromptNexusError):
    """唯一性冲突（如用户名已存在）"""
    status_code = 400
    default_message = "用户名已存在"


class AuthError(PromptNexusError):
    """未登录或凭证错误"""
    status_code = 401
    default_message = "请先登录"


class ForbiddenError(PromptNexusError):
    """无权限操作"""
    status_code = 403
    default_message = "无权限执行此操作"


class NotFoundError(PromptNexusError):
    status_code = 404
    default_message = "资源不存在"


class ServerError(PromptNexusError):
    status_code = 500
