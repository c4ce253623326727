"""
数据库模型
"""
from promptnexus.models.user import User, UserSession
from promptnexus.models.prompt import Prompt
from promptnexus.models.interaction import Favorite, PromptRating, PromptInteraction, Follow
from promptnexus.models.feedback import Feedback
from promptnexus.models.system_setting import SystemSetting

__all__ = [
    "User",
    "UserSession",
    "Prompt",
    "Favorite",
    "PromptRating",
    "PromptInteraction",
    "Follow",
    "Feedback",
    "SystemSetting",
]
