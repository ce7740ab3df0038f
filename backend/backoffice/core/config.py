"""
应用配置：从环境变量读取配置
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """应用配置类"""

    # 项目根目录
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT.parent / ".env"),  # 从项目根目录读取 .env
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API配置
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "会员订阅后台"
    CORS_ORIGINS: List[str] = ["*"]  # CORS允许的源

    # 数据库配置（PostgreSQL 用 postgresql+asyncpg://...）
    DATABASE_URL: str = "sqlite+aiosqlite:///./backoffice.db"
    DATABASE_ECHO: bool = False

    # 安全配置
    JWT_SECRET_KEY: str = "your-jwt-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 天
    AUTH_COOKIE_NAME: str = "auth_token"
    AUTH_COOKIE_SECURE: bool = False
    # 初始管理员（两项都配置时启动自动创建）
    INITIAL_ADMIN_EMAIL: str = ""
    INITIAL_ADMIN_PASSWORD: str = ""

    # 支付配置（支付链接为占位实现，未接入真实网关）
    PAYMENT_BASE_URL: str = "https://pay.example.com"
    DEFAULT_PAYMENT_CHANNEL: str = "STRIPE"

    # 后台列表配置
    ADMIN_ORDERS_LIMIT: int = 200
    ADMIN_USERS_PAGE_SIZE: int = 20

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Path = PROJECT_ROOT / "logs" / "app.log"
    LOG_TO_FILE: bool = True

    # 操作审计：是否记录关键操作到 audit_log 表
    AUDIT_LOG_ENABLED: bool = True


# 创建全局配置实例
settings = Settings()
