"""
用户与提示词之间的关联模型：收藏、评分、浏览/复制记录
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship
from promptnexus.db.database import Base, generate_id, utcnow


class Favorite(Base):
    """收藏表，存在即表示已收藏"""
    __tablename__ = "favorites"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, comment="用户ID")
    prompt_id = Column(String(36), ForeignKey("prompts.id", ondelete="CASCADE"), primary_key=True, comment="提示词ID")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="收藏时间")

    user = relationship("User", back_populates="favorites")
    prompt = relationship("Prompt", back_populates="favorites")

    __table_args__ = (
        Index("idx_favorites_prompt_id", "prompt_id"),
    )


class PromptRating(Base):
    """评分表，每个用户对每个提示词只保留一条评分"""
    __tablename__ = "prompt_ratings"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="评分用户ID")
    prompt_id = Column(String(36), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False, comment="提示词ID")
    value = Column(Integer, nullable=False, comment="评分：1-5")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, comment="更新时间")

    user = relationship("User", back_populates="ratings")
    prompt = relationship("Prompt", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint("user_id", "prompt_id", name="uq_prompt_ratings_user_prompt"),
        CheckConstraint("value >= 1 AND value <= 5", name="ck_prompt_ratings_value"),
        Index("idx_prompt_ratings_prompt_id", "prompt_id"),
    )


class PromptInteraction(Base):
    """浏览/复制记录，同一用户对同一提示词每种操作只计一次"""
    __tablename__ = "prompt_interactions"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="用户ID")
    prompt_id = Column(String(36), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False, comment="提示词ID")
    kind = Column(String(10), nullable=False, comment="操作类型：view=浏览, copy=复制")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")

    user = relationship("User", back_populates="interactions")
    prompt = relationship("Prompt", back_populates="interactions")

    __table_args__ = (
        UniqueConstraint("user_id", "prompt_id", "kind", name="uq_prompt_interactions_user_prompt_kind"),
    )


class Follow(Base):
    """关注表"""
    __tablename__ = "follows"

    follower_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, comment="关注者ID")
    following_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, comment="被关注者ID")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="关注时间")

    follower = relationship("User", foreign_keys=[follower_id], back_populates="following")
    following = relationship("User", foreign_keys=[following_id], back_populates="followers")
