"""
Composable search filters.

Each optional criterion contributes a predicate only when it is set, so an
absent criterion never constrains the result and the predicates can be
evaluated in any order. Predicates come in two grains:

- route predicates look at a Route as a whole (endpoints, fare band,
  operator, amenities, stations served by any of its departures);
- occurrence predicates look at one (Schedule, ScheduleTime) pair of a route
  (calendar validity, day pattern, same-day cutoff).
"""

from datetime import date
from typing import AbstractSet, Callable, List, Optional

from coachline.clock import Clock
from coachline.models import Route, Schedule, ScheduleTime
from coachline.routes.fare_service import FareCalculator
from coachline.routes.schemas import SearchRoutesRequest
from coachline.routes.validity import day_category, is_active_on, is_calendar_valid

RoutePredicate = Callable[[Route], bool]
OccurrencePredicate = Callable[[Schedule, ScheduleTime], bool]


# Route-level filters

def endpoints_filter(origin: str, destination: str) -> RoutePredicate:
    return lambda route: route.origin == origin and route.destination == destination


def price_filter(fares: FareCalculator, min_price=None, max_price=None) -> Optional[RoutePredicate]:
    if min_price is None and max_price is None:
        return None

    def predicate(route: Route) -> bool:
        price = fares.discounted(route.price)
        if min_price is not None and price < min_price:
            return False
        if max_price is not None and price > max_price:
            return False
        return True

    return predicate


def operator_filter(operator_names) -> Optional[RoutePredicate]:
    if not operator_names:
        return None
    allowed = set(operator_names)
    return lambda route: route.operator is not None and (route.operator.name or "") in allowed


def wifi_filter(has_wifi: Optional[bool]) -> Optional[RoutePredicate]:
    if has_wifi is None:
        return None
    return lambda route: _amenity_flag(route, "has_wifi") == has_wifi


def air_conditioning_filter(has_ac: Optional[bool]) -> Optional[RoutePredicate]:
    if has_ac is None:
        return None
    return lambda route: _amenity_flag(route, "has_air_conditioning") == has_ac


def station_filter(station_ids) -> Optional[RoutePredicate]:
    """Keep routes with at least one departure stopping at a requested station"""
    if not station_ids:
        return None
    wanted = set(station_ids)
    return lambda route: any(
        stop.station_id in wanted
        for schedule in route.schedules
        for schedule_time in schedule.schedule_times
        for stop in schedule_time.schedule_stations
    )


def _amenity_flag(route: Route, name: str) -> bool:
    # A route without an amenity profile offers none of the amenities
    if route.amenity is None:
        return False
    return bool(getattr(route.amenity, name))


# Occurrence-level filters

def calendar_filter(travel_date: date) -> OccurrencePredicate:
    return lambda schedule, schedule_time: is_calendar_valid(schedule, travel_date)


def day_pattern_filter(travel_date: date, holidays: AbstractSet[date]) -> OccurrencePredicate:
    category = day_category(travel_date, holidays)
    return lambda schedule, schedule_time: is_active_on(schedule_time, category)


def departure_cutoff_filter(travel_date: date, clock: Clock) -> Optional[OccurrencePredicate]:
    """Drop departures that already left when searching for today"""
    now = clock.now()
    if travel_date != now.date():
        return None
    cutoff = now.time().replace(tzinfo=None)
    return lambda schedule, schedule_time: schedule_time.departure_time > cutoff


class FilterChain:
    """Conjunction of the active route and occurrence predicates"""

    def __init__(
        self,
        route_predicates: List[RoutePredicate],
        occurrence_predicates: List[OccurrencePredicate]
    ):
        self.route_predicates = route_predicates
        self.occurrence_predicates = occurrence_predicates

    @classmethod
    def from_criteria(
        cls,
        criteria: SearchRoutesRequest,
        fares: FareCalculator,
        clock: Clock,
        holidays: AbstractSet[date] = frozenset(),
        enforce_day_patterns: bool = True
    ) -> "FilterChain":
        route_predicates = [
            endpoints_filter(criteria.origin, criteria.destination),
            price_filter(fares, criteria.min_price, criteria.max_price),
            operator_filter(criteria.operator_names),
            wifi_filter(criteria.has_wifi),
            air_conditioning_filter(criteria.has_ac),
            station_filter(criteria.station_ids),
        ]
        occurrence_predicates = [
            calendar_filter(criteria.date),
            day_pattern_filter(criteria.date, holidays) if enforce_day_patterns else None,
            departure_cutoff_filter(criteria.date, clock),
        ]
        return cls(
            [p for p in route_predicates if p is not None],
            [p for p in occurrence_predicates if p is not None]
        )

    def accepts_route(self, route: Route) -> bool:
        return all(predicate(route) for predicate in self.route_predicates)

    def accepts_occurrence(self, schedule: Schedule, schedule_time: ScheduleTime) -> bool:
        return all(predicate(schedule, schedule_time) for predicate in self.occurrence_predicates)
