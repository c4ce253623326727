"""
应用配置
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """从环境变量和 .env 读取的配置"""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "PromptNexus API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # SQLite数据库路径
    DATABASE_URL: str = "sqlite:///./promptnexus.db"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]  # 开发环境允许所有来源，生产环境需要限制

    LOG_LEVEL: str = "INFO"

    # 文本生成服务，未配置密钥时直接返回原文
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"

    BCRYPT_ROUNDS: int = 10


settings = Settings()
