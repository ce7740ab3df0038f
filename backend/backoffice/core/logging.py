"""
日志配置：控制台 + 滚动文件
"""
import logging
from logging.handlers import RotatingFileHandler

from backoffice.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def setup_logging() -> None:
    """初始化根日志器，重复调用不会重复添加 handler"""
    global _configured
    if _configured:
        return

    level = getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.LOG_TO_FILE and settings.LOG_FILE:
        try:
            settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                settings.LOG_FILE,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as e:
            # 日志目录不可写时只输出到控制台
            logging.warning("日志文件初始化失败，仅输出到控制台: %s", e)

    # SQLAlchemy 引擎日志由 DATABASE_ECHO 控制
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
