"""
反馈相关的Pydantic模型
"""
from datetime import datetime
from typing import Optional
from pydantic import Field, field_serializer

from promptnexus.schemas.common import CamelModel, format_datetime


class FeedbackCreate(CamelModel):
    """提交反馈"""
    sender: Optional[str] = Field(None, alias="from", description="提交人")
    message: Optional[str] = Field(None, description="反馈内容")


class FeedbackResponse(CamelModel):
    id: str
    sender: str = Field(..., alias="from")
    message: str
    read: bool = False
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime(dt)


class FeedbackEnvelope(CamelModel):
    success: bool = True
    feedback: FeedbackResponse


class MarkReadRequest(CamelModel):
    read: bool = Field(True, description="是否已读")
    requester_id: Optional[str] = None


class UnreadCountResponse(CamelModel):
    success: bool = True
    count: int
