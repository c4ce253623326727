"""
通用的Pydantic模型和工具
"""
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def format_datetime(dt: datetime) -> Optional[str]:
    """时间统一输出为UTC的ISO格式字符串"""
    if dt is None:
        return None
    # 如果时间没有时区信息，假设它是 UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


class CamelModel(BaseModel):
    """JSON字段使用驼峰命名，同时接受下划线命名的输入"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        protected_namespaces=(),
    )


class SuccessResponse(CamelModel):
    """通用成功响应"""
    success: bool = True


class ErrorResponse(CamelModel):
    """通用失败响应"""
    success: bool = False
    message: str
