"""
提示词相关的Pydantic模型
"""
from datetime import datetime
from typing import Any, List, Optional, Union
from pydantic import Field, field_serializer, field_validator, model_validator

from promptnexus.schemas.common import CamelModel, format_datetime
from promptnexus.services.aggregation import DEFAULT_DESCRIPTION, classify_model, parse_tags

TagsInput = Union[List[str], str, None]


class PromptCreate(CamelModel):
    """创建提示词模型"""
    title: Optional[str] = Field(None, description="标题", max_length=200)
    content: Optional[str] = Field(None, description="提示词正文")
    description: Optional[str] = Field(None, description="简短描述，不填则自动生成", max_length=500)
    model: Optional[str] = Field(None, description="适用模型", max_length=100)
    model_url: Optional[str] = Field(None, description="模型地址", max_length=500)
    category: Optional[str] = Field(None, description="分类")
    tags: TagsInput = Field(None, description="标签：列表或逗号分隔字符串")
    image_url: Optional[str] = Field(None, description="示例图片", max_length=1000)
    author_id: Optional[str] = Field(None, description="作者ID")


class PromptUpdate(CamelModel):
    """更新提示词模型"""
    title: Optional[str] = Field(None, description="标题", max_length=200)
    content: Optional[str] = Field(None, description="提示词正文")
    description: Optional[str] = Field(None, description="简短描述", max_length=500)
    model: Optional[str] = Field(None, description="适用模型", max_length=100)
    model_url: Optional[str] = Field(None, description="模型地址", max_length=500)
    category: Optional[str] = Field(None, description="分类")
    tags: TagsInput = Field(None, description="标签")
    image_url: Optional[str] = Field(None, description="示例图片", max_length=1000)
    requester_id: Optional[str] = Field(None, description="操作用户ID（未携带token时使用）")


class AuthorSummary(CamelModel):
    """作者简要信息"""
    id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    is_verified: bool = False


class PromptResponse(CamelModel):
    """提示词响应模型"""
    id: str
    title: str
    content: str
    description: Optional[str] = DEFAULT_DESCRIPTION
    model: Optional[str] = None
    model_kind: Optional[str] = Field(None, description="known=已知模型, custom=自定义")
    model_url: Optional[str] = None
    category: str
    tags: List[str] = []
    image_url: Optional[str] = None
    author_id: str
    author: Optional[AuthorSummary] = None
    view_count: int = 0
    copy_count: int = 0
    rating: float = 0
    rating_count: int = 0
    favorite_count: int = 0
    is_favorited: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: Any) -> List[str]:
        return parse_tags(value)

    @model_validator(mode="after")
    def fill_model_kind(self):
        if self.model_kind is None:
            label = classify_model(self.model)
            if label is not None:
                self.model_kind = label.kind
        return self

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime(dt)


class PromptEnvelope(CamelModel):
    success: bool = True
    prompt: PromptResponse


class InteractionRequest(CamelModel):
    """浏览/复制请求，带用户ID时同一用户只计一次"""
    user_id: Optional[str] = Field(None, description="用户ID")


class CounterResponse(CamelModel):
    success: bool = True
    counted: bool = Field(..., description="本次是否计数")
    count: int = Field(..., description="当前计数")


class RateRequest(CamelModel):
    """评分请求"""
    rating: Any = Field(None, description="评分：1-5的整数")
    rater_id: Optional[str] = Field(None, description="评分用户ID")
    username: Optional[str] = Field(None, description="评分用户名（兼容旧客户端）")


class RateResponse(CamelModel):
    success: bool = True
    rating: float
    rating_count: int


class UserRatingResponse(CamelModel):
    success: bool = True
    rating: int = Field(..., description="该用户的评分，未评分为0")


class FavoriteRequest(CamelModel):
    user_id: Optional[str] = Field(None, description="用户ID")


class FavoriteResponse(CamelModel):
    success: bool = True
    favorited: bool
    favorite_count: int


class OptimizeRequest(CamelModel):
    content: Optional[str] = Field(None, description="待优化的提示词")


class OptimizeResponse(CamelModel):
    success: bool = True
    content: str
