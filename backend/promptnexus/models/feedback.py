"""
用户反馈模型
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, Index
from promptnexus.db.database import Base, generate_id, utcnow


class Feedback(Base):
    """反馈表"""
    __tablename__ = "feedback"

    id = Column(String(36), primary_key=True, default=generate_id)
    sender = Column("from", String(100), nullable=False, comment="提交人")
    message = Column(Text, nullable=False, comment="反馈内容")
    read = Column(Boolean, default=False, nullable=False, comment="管理员是否已读")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")

    __table_args__ = (
        Index("idx_feedback_created_at", "created_at"),
    )
