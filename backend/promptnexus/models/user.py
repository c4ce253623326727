"""
用户模型
"""
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from promptnexus.db.database import Base, generate_id, utcnow


class User(Base):
    """用户表"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    username = Column(String(100), nullable=False, unique=True, index=True, comment="用户名")
    display_name = Column(String(100), nullable=False, comment="显示名称")
    bio = Column(Text, default="", comment="个人简介")
    avatar_url = Column(String(1000), comment="头像地址")
    password_hash = Column(String(255), nullable=False, comment="密码哈希")
    is_admin = Column(Boolean, default=False, nullable=False, comment="是否管理员")
    is_verified = Column(Boolean, default=False, nullable=False, comment="是否认证用户")
    gender = Column(String(10), nullable=True, comment="性别：male/female")
    instagram_url = Column(String(500), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, comment="更新时间")

    # 用户名不区分大小写唯一
    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
    )

    # 关系：删除用户时一并删除其提示词及所有关联记录
    prompts = relationship(
        "Prompt", back_populates="author", cascade="all, delete-orphan",
        order_by="Prompt.created_at.desc()"
    )
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")
    ratings = relationship("PromptRating", back_populates="user", cascade="all, delete-orphan")
    interactions = relationship("PromptInteraction", back_populates="user", cascade="all, delete-orphan")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    following = relationship(
        "Follow", foreign_keys="Follow.follower_id", back_populates="follower",
        cascade="all, delete-orphan"
    )
    followers = relationship(
        "Follow", foreign_keys="Follow.following_id", back_populates="following",
        cascade="all, delete-orphan"
    )


class UserSession(Base):
    """登录会话表，token对应一个用户"""
    __tablename__ = "user_sessions"

    token = Column(String(64), primary_key=True, comment="访问令牌")
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="用户ID")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("idx_user_sessions_user_id", "user_id"),
    )
