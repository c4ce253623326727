"""
系统设置相关的Pydantic模型
"""
from datetime import datetime
from typing import Optional
from pydantic import Field, field_serializer

from promptnexus.schemas.common import CamelModel, format_datetime


class SettingUpdate(CamelModel):
    """更新系统设置模型（不存在则创建）"""
    value: Optional[str] = Field(None, description="设置值")
    description: Optional[str] = Field(None, description="设置说明", max_length=200)
    requester_id: Optional[str] = Field(None, description="操作用户ID（未携带token时使用）")


class SettingValueResponse(CamelModel):
    success: bool = True
    value: Optional[str] = None


class SettingResponse(CamelModel):
    """系统设置响应模型"""
    key: str
    value: Optional[str] = None
    description: Optional[str] = None
    updated_at: datetime

    @field_serializer("updated_at")
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime(dt)
