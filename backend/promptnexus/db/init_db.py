"""
数据库初始化脚本
"""
import logging
from promptnexus.db.database import engine, Base
# 导入所有模型以确保表被创建
from promptnexus.models import (  # noqa: F401
    User, UserSession, Prompt, Favorite, PromptRating, PromptInteraction,
    Follow, Feedback, SystemSetting
)

logger = logging.getLogger(__name__)


def init_db():
    """初始化数据库，创建所有表"""
    Base.metadata.create_all(bind=engine)
    logger.info("数据库表创建完成")


def drop_db():
    """删除所有表（仅用于测试环境重置）"""
    Base.metadata.drop_all(bind=engine)


if __name__ == "__main__":
    from promptnexus.core.config import settings
    from promptnexus.core.log import setup_logging
    setup_logging(settings.LOG_LEVEL)
    init_db()
