"""
系统设置模型
"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from promptnexus.db.database import Base, utcnow


class SystemSetting(Base):
    """系统设置表（广告配置、反馈表单地址等）"""
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True, comment="设置键")
    value = Column(Text, comment="设置值")
    description = Column(String(200), comment="设置说明")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, comment="更新时间")
