from .pagination import (
    PAGE_GAP,
    InvalidPaginationInput,
    PageGap,
    PageNumber,
    get_pagination_range,
    get_total_pages,
    is_page_change_allowed,
)

__all__ = [
    'PAGE_GAP',
    'InvalidPaginationInput',
    'PageGap',
    'PageNumber',
    'get_pagination_range',
    'get_total_pages',
    'is_page_change_allowed',
]
