"""
提示词模型
"""
from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from promptnexus.db.database import Base, generate_id, utcnow


class Prompt(Base):
    """提示词表"""
    __tablename__ = "prompts"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(200), nullable=False, comment="标题")
    content = Column(Text, nullable=False, comment="提示词正文")
    description = Column(String(500), default="", comment="简短描述")
    model = Column(String(100), nullable=True, comment="适用模型")
    model_url = Column(String(500), nullable=True, comment="模型地址")
    category = Column(String(50), default="Other", nullable=False, comment="分类")
    tags = Column(JSON, default=list, nullable=False, comment="标签列表")
    image_url = Column(String(1000), nullable=True, comment="示例图片")
    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="作者ID")
    view_count = Column(Integer, default=0, nullable=False, comment="浏览次数")
    copy_count = Column(Integer, default=0, nullable=False, comment="复制次数")
    rating = Column(Float, default=0, nullable=False, comment="平均评分（保留一位小数）")
    rating_count = Column(Integer, default=0, nullable=False, comment="评分人数")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, comment="更新时间")

    # 关系
    author = relationship("User", back_populates="prompts")
    favorites = relationship("Favorite", back_populates="prompt", cascade="all, delete-orphan")
    ratings = relationship("PromptRating", back_populates="prompt", cascade="all, delete-orphan")
    interactions = relationship("PromptInteraction", back_populates="prompt", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_prompts_author_id", "author_id"),
        Index("idx_prompts_created_at", "created_at"),
        Index("idx_prompts_category", "category"),
    )
