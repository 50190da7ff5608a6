from datetime import date, datetime, time
from decimal import Decimal
from itertools import count

import pytest

from coachline.clock import FixedClock
from coachline.models import (
    Amenity, ExceptionDay, Operator, Route, Schedule, ScheduleStation, ScheduleTime, Station
)
from coachline.routes.fare_service import StaticPricingService
from coachline.routes.schemas import SearchRoutesRequest
from coachline.routes.service import RouteSearchService

_ids = count(1)

STATIONS = {
    1: Station(id=1, name="Central Bus Terminal", city="Capital"),
    2: Station(id=2, name="Midway Services", city="Midway"),
    3: Station(id=3, name="North Gate", city="Northfield"),
    4: Station(id=4, name="Airport Interchange", city="Capital"),
}


def make_time(value: str) -> time:
    return time.fromisoformat(value)


def make_schedule_time(departure, arrival, stations=(1, 3), weekday=True, saturday=True, sunday=True, holiday=True):
    """Departure with one stop per station id, spread between departure and arrival"""
    departure, arrival = make_time(departure), make_time(arrival)
    stops = []
    for position, station_id in enumerate(stations):
        arrival_at = departure if position == 0 else arrival
        if 0 < position < len(stations) - 1:
            arrival_at = time(departure.hour, min(departure.minute + position, 59))
        stops.append(ScheduleStation(
            id=next(_ids),
            station_id=station_id,
            station=STATIONS[station_id],
            arrival_time=arrival_at,
            distance_from_previous_stop=Decimal("0") if position == 0 else Decimal("50.0")
        ))
    return ScheduleTime(
        id=next(_ids),
        departure_time=departure,
        arrival_time=arrival,
        is_weekday_active=weekday,
        is_saturday_active=saturday,
        is_sunday_active=sunday,
        is_holiday_active=holiday,
        schedule_stations=stops
    )


def make_schedule(times, valid_from=date(2024, 1, 1), valid_to=date(2024, 12, 31), exceptions=()):
    return Schedule(
        id=next(_ids),
        valid_from=valid_from,
        valid_to=valid_to,
        exception_days=[ExceptionDay(id=next(_ids), date=day) for day in exceptions],
        schedule_times=list(times)
    )


def make_route(
    schedules,
    price="20.00",
    return_price="35.00",
    operator="Northern Express",
    origin="Capital",
    destination="Northfield",
    wifi=True,
    ac=True
):
    return Route(
        id=next(_ids),
        origin=origin,
        destination=destination,
        price=Decimal(price),
        return_ticket_price=Decimal(return_price),
        operator=Operator(name=operator),
        amenity=Amenity(
            number_of_seats=49,
            luggage_capacity=40,
            has_wifi=wifi,
            has_air_conditioning=ac,
            has_power_outlets=True,
            has_restroom=False
        ),
        schedules=list(schedules)
    )


class InMemoryCatalogue:
    """Catalogue reader over a fixed list of routes"""

    def __init__(self, routes, holidays=()):
        self.routes = list(routes)
        self.holidays = set(holidays)
        self.reads = 0

    def get_routes(self, origin, destination, cancellation=None):
        self.reads += 1
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        return [r for r in self.routes if r.origin == origin and r.destination == destination]

    def get_holidays(self, start, end):
        return {day for day in self.holidays if start <= day <= end}


def criteria(**overrides) -> SearchRoutesRequest:
    values = dict(origin="Capital", destination="Northfield", date=date(2024, 6, 3), page_size=100)
    values.update(overrides)
    return SearchRoutesRequest(**values)


@pytest.fixture
def clock():
    # A date far from the searched dates so the same-day cutoff stays inactive
    return FixedClock(datetime(2024, 1, 15, 12, 0))


@pytest.fixture
def pricing():
    return StaticPricingService({"adult": 1.0, "child": 0.5, "student": 0.8, "senior": 0.7})


@pytest.fixture
def catalogue():
    """Two operators, three routes, six departures on Monday 2024-06-03"""
    return InMemoryCatalogue([
        make_route(
            [make_schedule([
                make_schedule_time("07:00", "11:30", stations=(1, 2, 3)),
                make_schedule_time("15:00", "19:45", stations=(1, 2, 3)),
            ])],
            price="24.00",
            return_price="42.00",
            operator="Northern Express",
            wifi=True,
            ac=True
        ),
        make_route(
            [make_schedule([
                make_schedule_time("09:15", "14:40", stations=(4, 3)),
                make_schedule_time("18:00", "20:00", stations=(4, 3)),
            ])],
            price="12.50",
            return_price="22.00",
            operator="Budget Bus",
            wifi=False,
            ac=True
        ),
        make_route(
            [make_schedule([
                make_schedule_time("06:00", "09:00", stations=(1, 3)),
                make_schedule_time("22:30", "03:15", stations=(1, 3)),
            ])],
            price="30.00",
            return_price="50.00",
            operator="Northern Express",
            wifi=True,
            ac=False
        ),
        make_route(
            [make_schedule([make_schedule_time("08:00", "10:00")])],
            origin="Capital",
            destination="Portsea"
        ),
    ])


@pytest.fixture
def service(catalogue, pricing, clock):
    return RouteSearchService(catalogue=catalogue, pricing=pricing, clock=clock)
