from typing import Callable, Dict, Iterable, List

from coachline.routes.projection import SearchRow
from coachline.routes.schemas import SortByOptions

SORT_KEYS: Dict[SortByOptions, Callable[[SearchRow], object]] = {
    SortByOptions.PRICE: lambda row: row.price,
    SortByOptions.DURATION: lambda row: row.duration,
    SortByOptions.DEPARTURE_TIME: lambda row: row.departure_time,
}


def sort_rows(
    rows: Iterable[SearchRow],
    sort_by: SortByOptions = SortByOptions.DEPARTURE_TIME,
    is_ascending: bool = True
) -> List[SearchRow]:
    """Order the complete result set; rows with equal keys keep their input order"""
    key = SORT_KEYS.get(sort_by, SORT_KEYS[SortByOptions.DEPARTURE_TIME])
    # sorted() stays stable with reverse=True
    return sorted(rows, key=key, reverse=not is_ascending)
