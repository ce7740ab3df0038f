import uuid
from datetime import datetime, timezone


def generate_order_no() -> str:
    """生成订单号：ORD + UTC 日期 + 8 位随机十六进制"""
    return f"ORD{datetime.now(timezone.utc).strftime('%Y%m%d')}{uuid.uuid4().hex[:8].upper()}"
