import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

from coachline.exceptions import InvalidSearchCriteria, SearchValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    page_number: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)


def paginate(rows: Sequence[T], page_number: int, page_size: int) -> Page[T]:
    """Slice one page out of a fully filtered and ordered sequence

    `total_count` always describes the whole sequence. An offset past the
    end yields an empty page rather than an error.
    """
    errors = []
    if page_number < 1:
        errors.append(SearchValidationError(
            error_code="INVALID_PAGE_NUMBER",
            error_message="Page number must be at least 1",
            field="page_number"
        ))
    if page_size < 1:
        errors.append(SearchValidationError(
            error_code="INVALID_PAGE_SIZE",
            error_message="Page size must be at least 1",
            field="page_size"
        ))
    if errors:
        raise InvalidSearchCriteria(errors)

    total_count = len(rows)
    offset = (page_number - 1) * page_size
    return Page(
        items=list(rows[offset:offset + page_size]),
        page_number=page_number,
        page_size=page_size,
        total_count=total_count
    )
