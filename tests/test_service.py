import logging
import time
from datetime import date, datetime
from decimal import Decimal

import pytest

from coachline.cancellation import CancellationToken
from coachline.clock import FixedClock
from coachline.exceptions import CatalogueUnavailable, InvalidSearchCriteria, SearchCancelled, SearchTimedOut
from coachline.routes.schemas import PassengerCategory, SortByOptions
from coachline.routes.service import RouteSearchService
from coachline.routes.validation import RouteSearchValidator
from conftest import InMemoryCatalogue, criteria, make_route, make_schedule, make_schedule_time


def keys(result):
    return [(item.route_id, item.schedule_time_id) for item in result.items]


def test_rows_are_departures_not_routes(service):
    result = service.search_routes(criteria())
    assert result.total_count == 6
    assert len({item.route_id for item in result.items}) == 3
    assert all(item.origin == "Capital" and item.destination == "Northfield" for item in result.items)


def test_default_order_is_departure_time(service):
    result = service.search_routes(criteria())
    departures = [item.departure_time for item in result.items]
    assert departures == ["06:00", "07:00", "09:15", "15:00", "18:00", "22:30"]


def test_exception_date_scenario(pricing, clock):
    route = make_route([make_schedule(
        [make_schedule_time("08:00", "10:00"), make_schedule_time("13:00", "15:00")],
        valid_from=date(2024, 1, 1),
        valid_to=date(2024, 12, 31),
        exceptions=[date(2024, 6, 1)]
    )])
    service = RouteSearchService(InMemoryCatalogue([route]), pricing, clock)

    assert service.search_routes(criteria(date=date(2024, 6, 1))).total_count == 0
    result = service.search_routes(criteria(date=date(2024, 6, 2)))
    assert result.total_count == 2
    assert {item.route_id for item in result.items} == {route.id}


def test_pagination_scenario(pricing, clock):
    departures = [make_schedule_time(f"{hour:02d}:{minute:02d}", "23:59")
                  for hour in range(5, 10) for minute in (0, 10, 20, 30, 40)]
    route = make_route([make_schedule(departures)])
    service = RouteSearchService(InMemoryCatalogue([route]), pricing, clock)

    pages = [service.search_routes(criteria(page_number=n, page_size=10)) for n in (1, 2, 3, 4)]

    assert [len(page.items) for page in pages] == [10, 10, 5, 0]
    assert {page.total_count for page in pages} == {25}
    assert {page.total_pages for page in pages} == {3}
    collected = [key for page in pages for key in keys(page)]
    assert collected == keys(service.search_routes(criteria(page_size=25)))
    assert len(set(collected)) == 25


def test_same_day_cutoff_scenario(pricing):
    route = make_route([make_schedule([make_schedule_time("10:00", "12:00"), make_schedule_time("16:00", "18:00")])])
    service = RouteSearchService(InMemoryCatalogue([route]), pricing, FixedClock(datetime(2024, 6, 3, 14, 0)))

    today = service.search_routes(criteria(date=date(2024, 6, 3)))
    assert [item.departure_time for item in today.items] == ["16:00"]
    tomorrow = service.search_routes(criteria(date=date(2024, 6, 4)))
    assert [item.departure_time for item in tomorrow.items] == ["10:00", "16:00"]


def test_fare_consistency(service):
    result = service.search_routes(criteria(passenger_type=PassengerCategory.CHILD, max_price=Decimal("12.00")))
    # 24.00 * 0.5 = 12.00 passes; 12.50 * 0.5 = 6.25 passes; 30.00 * 0.5 = 15.00 fails
    assert {item.price for item in result.items} == {Decimal("12.00"), Decimal("6.25")}
    for item in result.items:
        assert item.price <= Decimal("12.00")
        assert item.passenger_type == PassengerCategory.CHILD
    budget = next(item for item in result.items if item.operator_name == "Budget Bus")
    assert budget.return_ticket_price == Decimal("22.00") * Decimal("0.5")


def test_unset_optional_filters_are_no_ops(service):
    baseline = service.search_routes(criteria())
    explicit = service.search_routes(criteria(
        min_price=None, max_price=None, station_ids=[], operator_names=[], has_wifi=None, has_ac=None
    ))
    assert keys(explicit) == keys(baseline)


@pytest.mark.parametrize("extra", [
    {"min_price": Decimal("20")},
    {"max_price": Decimal("20")},
    {"station_ids": [2]},
    {"operator_names": ["Northern Express"]},
    {"has_wifi": True},
    {"has_ac": False},
])
def test_adding_a_filter_never_grows_the_result(service, extra):
    baseline = set(keys(service.search_routes(criteria())))
    narrowed = set(keys(service.search_routes(criteria(**extra))))
    assert narrowed <= baseline
    assert narrowed != baseline

    with_wifi = set(keys(service.search_routes(criteria(has_wifi=True, **{k: v for k, v in extra.items() if k != "has_wifi"}))))
    assert with_wifi <= narrowed


def test_filters_compose(service):
    result = service.search_routes(criteria(operator_names=["Northern Express"], has_ac=True, station_ids=[2]))
    assert [item.departure_time for item in result.items] == ["07:00", "15:00"]


def test_station_filter_keeps_every_departure_of_a_matching_route(pricing, clock):
    route = make_route([make_schedule([
        make_schedule_time("07:00", "11:00", stations=(1, 2, 3)),
        make_schedule_time("08:00", "11:00", stations=(1, 3)),
    ])])
    service = RouteSearchService(InMemoryCatalogue([route]), pricing, clock)

    result = service.search_routes(criteria(station_ids=[2]))
    assert [item.departure_time for item in result.items] == ["07:00", "08:00"]
    assert service.search_routes(criteria(station_ids=[4])).total_count == 0


def test_price_sort_is_monotonic_across_pages(service):
    prices = []
    for page_number in (1, 2, 3):
        page = service.search_routes(criteria(sort_by=SortByOptions.PRICE, is_ascending=False, page_size=2, page_number=page_number))
        prices.extend(item.price for item in page.items)
    assert prices == sorted(prices, reverse=True)
    assert len(prices) == 6


def test_duration_sort(service):
    result = service.search_routes(criteria(sort_by=SortByOptions.DURATION))
    assert [item.duration for item in result.items] == ["2h 00m", "3h 00m", "4h 30m", "4h 45m", "4h 45m", "5h 25m"]


def test_weekend_departures_follow_day_pattern(pricing, clock):
    route = make_route([make_schedule([
        make_schedule_time("07:00", "09:00", saturday=False, sunday=False),
        make_schedule_time("10:00", "12:00"),
    ])])
    catalogue = InMemoryCatalogue([route], holidays=[date(2024, 6, 10)])
    service = RouteSearchService(catalogue, pricing, clock)

    assert service.search_routes(criteria(date=date(2024, 6, 8))).total_count == 1
    assert service.search_routes(criteria(date=date(2024, 6, 7))).total_count == 2

    passthrough = RouteSearchService(catalogue, pricing, clock, enforce_day_patterns=False)
    assert passthrough.search_routes(criteria(date=date(2024, 6, 8))).total_count == 2


def test_invalid_paging_rejected_before_catalogue_read(catalogue, pricing, clock):
    service = RouteSearchService(catalogue, pricing, clock)
    with pytest.raises(InvalidSearchCriteria) as exc_info:
        service.search_routes(criteria(page_number=0, page_size=0))
    assert {error.error_code for error in exc_info.value.errors} == {"INVALID_PAGE_NUMBER", "INVALID_PAGE_SIZE"}
    assert catalogue.reads == 0


def test_inverted_price_band_rejected(service):
    with pytest.raises(InvalidSearchCriteria) as exc_info:
        service.search_routes(criteria(min_price=Decimal("30"), max_price=Decimal("10")))
    assert exc_info.value.errors[0].error_code == "INVALID_PRICE_RANGE"


def test_page_size_cap(catalogue, pricing, clock):
    service = RouteSearchService(catalogue, pricing, clock, validator=RouteSearchValidator(max_page_size=50))
    with pytest.raises(InvalidSearchCriteria):
        service.search_routes(criteria(page_size=51))


def test_cancelled_token_aborts(catalogue, pricing, clock):
    service = RouteSearchService(catalogue, pricing, clock)
    token = CancellationToken()
    token.cancel("client went away")
    with pytest.raises(SearchCancelled, match="client went away"):
        service.search_routes(criteria(), token)
    assert catalogue.reads == 0


def test_expired_deadline_is_a_retryable_failure(service):
    with pytest.raises(SearchTimedOut, match="deadline") as exc_info:
        service.search_routes(criteria(), CancellationToken(timeout=0))
    assert isinstance(exc_info.value, CatalogueUnavailable)
    assert not isinstance(exc_info.value, SearchCancelled)
    assert exc_info.value.retryable


def test_slow_catalogue_read_times_out(pricing, clock):
    class SlowCatalogue(InMemoryCatalogue):
        def get_routes(self, origin, destination, cancellation=None):
            time.sleep(0.2)
            return super().get_routes(origin, destination)

    route = make_route([make_schedule([make_schedule_time("08:00", "10:00")])])
    service = RouteSearchService(SlowCatalogue([route]), pricing, clock)
    with pytest.raises(CatalogueUnavailable) as exc_info:
        service.search_routes(criteria(), CancellationToken(timeout=0.05))
    assert exc_info.value.retryable


def test_explicit_cancel_wins_over_a_later_deadline(catalogue, pricing, clock):
    token = CancellationToken(timeout=0)
    token.cancel("client went away")
    service = RouteSearchService(catalogue, pricing, clock)
    with pytest.raises(SearchCancelled):
        service.search_routes(criteria(), token)


def test_cancellation_observed_during_projection(pricing, clock):
    token = CancellationToken()

    class CancellingCatalogue(InMemoryCatalogue):
        def get_holidays(self, start, end):
            token.cancel()
            return set()

    route = make_route([make_schedule([make_schedule_time("08:00", "10:00")])])
    service = RouteSearchService(CancellingCatalogue([route]), pricing, clock)
    with pytest.raises(SearchCancelled):
        service.search_routes(criteria(), token)


def test_catalogue_failure_propagates(pricing, clock):
    class BrokenCatalogue(InMemoryCatalogue):
        def get_routes(self, origin, destination, cancellation=None):
            raise CatalogueUnavailable("database down")

    service = RouteSearchService(BrokenCatalogue([]), pricing, clock)
    with pytest.raises(CatalogueUnavailable) as exc_info:
        service.search_routes(criteria())
    assert exc_info.value.retryable


def test_repeated_queries_are_identical(service):
    first = service.search_routes(criteria(sort_by=SortByOptions.DURATION))
    second = service.search_routes(criteria(sort_by=SortByOptions.DURATION))
    assert first == second


def test_search_is_logged(service, caplog):
    with caplog.at_level(logging.INFO, logger="coachline.routes.service"):
        service.search_routes(criteria())
    assert "Capital -> Northfield on 2024-06-03" in caplog.text
