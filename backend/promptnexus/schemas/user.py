"""
用户相关的Pydantic模型
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import Field, field_serializer

from promptnexus.schemas.common import CamelModel, format_datetime
from promptnexus.schemas.prompt import PromptResponse

Gender = Literal["male", "female"]


class RegisterRequest(CamelModel):
    """注册请求"""
    username: Optional[str] = Field(None, description="用户名", max_length=100)
    password: Optional[str] = Field(None, description="密码")
    display_name: Optional[str] = Field(None, description="显示名称", max_length=100)
    bio: Optional[str] = Field(None, description="个人简介")
    gender: Optional[Gender] = Field(None, description="性别")
    avatar_url: Optional[str] = Field(None, description="头像地址", max_length=1000)


class LoginRequest(CamelModel):
    """登录请求"""
    username: Optional[str] = Field(None, description="用户名")
    password: Optional[str] = Field(None, description="密码")


class ProfileUpdate(CamelModel):
    """更新个人资料模型，只更新传入的字段"""
    username: Optional[str] = Field(None, description="要更新的用户名")
    display_name: Optional[str] = Field(None, description="显示名称", max_length=100)
    bio: Optional[str] = Field(None, description="个人简介")
    gender: Optional[Gender] = Field(None, description="性别")
    instagram_url: Optional[str] = Field(None, max_length=500)
    linkedin_url: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = Field(None, max_length=1000)
    requester_id: Optional[str] = Field(None, description="操作用户ID（未携带token时使用）")


class UserResponse(CamelModel):
    """用户响应模型（不包含密码）"""
    id: str
    username: str
    display_name: str
    bio: Optional[str] = ""
    avatar_url: Optional[str] = None
    is_admin: bool = False
    is_verified: bool = False
    gender: Optional[str] = None
    instagram_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime(dt)


class UserDetailResponse(UserResponse):
    """用户详情，包含其发布的提示词"""
    prompts: List[PromptResponse] = []
    follower_count: int = 0
    following_count: int = 0


class AuthResponse(CamelModel):
    """注册/登录响应"""
    success: bool = True
    user: UserResponse
    token: str = Field(..., description="访问令牌，放在 Authorization: Bearer 头中")


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse


class AdminUpdate(CamelModel):
    """设置/取消管理员"""
    is_admin: bool = Field(..., description="是否管理员")
    requester_id: Optional[str] = None


class AdminRequest(CamelModel):
    requester_id: Optional[str] = None


class RebuildAvatarsResponse(CamelModel):
    success: bool = True
    updated: int


class FollowRequest(CamelModel):
    follower_id: Optional[str] = Field(None, description="关注者ID")


class FollowResponse(CamelModel):
    success: bool = True
    following: bool
    follower_count: int
