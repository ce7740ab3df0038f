from backoffice.schemas.common import PaginationMeta


def normalize_page(page: int, page_size: int, default_size: int = 20, max_size: int = 100) -> tuple[int, int]:
    """页码从 1 开始；非法值回落到默认值"""
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = default_size
    page_size = min(page_size, max_size)
    return page, page_size


def build_meta(page: int, page_size: int, total: int) -> PaginationMeta:
    total_pages = max(1, (total + page_size - 1) // page_size)
    return PaginationMeta(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
    )
