"""Свернутая пагинация: номера страниц с пропусками («…») для длинных списков."""

from dataclasses import dataclass
from math import ceil
from typing import List, Union


class InvalidPaginationInput(ValueError):
    """Некорректные аргументы для расчета диапазона страниц."""


@dataclass(frozen=True, slots=True)
class PageNumber:
    number: int


@dataclass(frozen=True, slots=True)
class PageGap:
    """Пропуск из двух и более скрытых страниц."""


PAGE_GAP = PageGap()

PageItem = Union[PageNumber, PageGap]


def get_total_pages(total_count: int, page_size: int) -> int:
    if page_size <= 0:
        raise InvalidPaginationInput(f"page_size must be positive, got {page_size}")
    if total_count < 0:
        raise InvalidPaginationInput(f"total_count must be non-negative, got {total_count}")
    return ceil(total_count / page_size)


def is_page_change_allowed(page: int, current_page: int, last_page: int) -> bool:
    return 1 <= page <= last_page and page != current_page


def _pages(start: int, end: int) -> List[PageItem]:
    return [PageNumber(number) for number in range(start, end + 1)]


def get_pagination_range(
    total_count: int,
    page_size: int,
    current_page: int,
    sibling_count: int = 1
) -> List[PageItem]:
    """Возвращает последовательность страниц для отрисовки пагинации.

    Первая и последняя страницы присутствуют всегда (если страниц больше нуля),
    вокруг текущей показывается ``sibling_count`` соседей с каждой стороны,
    остальное сворачивается в ``PAGE_GAP``. Пропуск ставится только там, где
    скрыто две страницы и больше, одиночная страница показывается номером.

    ``current_page`` не проверяется на попадание в диапазон: значения за его
    пределами дают корректный результат, но переход по ним остается на
    совести вызывающего кода (см. ``is_page_change_allowed``).
    """
    if sibling_count < 0:
        raise InvalidPaginationInput(f"sibling_count must be non-negative, got {sibling_count}")

    total_page_count = get_total_pages(total_count, page_size)

    # первая, последняя, текущая и два места под пропуски
    total_page_numbers = sibling_count * 2 + 5

    if total_page_numbers >= total_page_count:
        return _pages(1, total_page_count)

    left_sibling = max(current_page - sibling_count, 1)
    right_sibling = min(current_page + sibling_count, total_page_count)

    show_left_gap = left_sibling > 3
    show_right_gap = right_sibling < total_page_count - 2

    edge_item_count = 3 + 2 * sibling_count

    if not show_left_gap and show_right_gap:
        return _pages(1, edge_item_count) + [PAGE_GAP, PageNumber(total_page_count)]

    if show_left_gap and not show_right_gap:
        return [PageNumber(1), PAGE_GAP] + _pages(
            total_page_count - edge_item_count + 1, total_page_count
        )

    if show_left_gap and show_right_gap:
        return (
            [PageNumber(1), PAGE_GAP]
            + _pages(left_sibling, right_sibling)
            + [PAGE_GAP, PageNumber(total_page_count)]
        )

    return _pages(1, total_page_count)
