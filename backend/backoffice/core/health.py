"""
健康检查：数据库连通性
"""
import logging
import time
from typing import Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backoffice.core.database import engine

logger = logging.getLogger(__name__)


async def check_db() -> Tuple[bool, str]:
    """执行 SELECT 1，成功时返回耗时"""
    started = time.perf_counter()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("健康检查 DB 失败: %s", e)
        return False, str(e)
    return True, f"ok ({(time.perf_counter() - started) * 1000:.1f}ms)"
