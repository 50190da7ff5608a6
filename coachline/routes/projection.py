from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional

from coachline.cancellation import CancellationToken
from coachline.models import Route, Schedule, ScheduleTime
from coachline.routes.fare_service import FareCalculator
from coachline.routes.filters import FilterChain
from coachline.routes.schemas import (
    AmenityResponse, PassengerCategory, ScheduleStationResponse, SearchRouteResponse
)
from coachline.routes.validity import is_calendar_valid

ONE_DAY = timedelta(days=1)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def trip_duration(departure: time, arrival: time) -> timedelta:
    """Elapsed time between two times of day, wrapping past midnight"""
    anchor = date(2000, 1, 1)
    elapsed = datetime.combine(anchor, arrival) - datetime.combine(anchor, departure)
    return elapsed % ONE_DAY


def format_duration(duration: timedelta) -> str:
    total_minutes = int(duration.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes:02d}m"


@dataclass(frozen=True)
class SearchRow:
    """A surviving (route, schedule, schedule time) triple with its fares"""
    route_id: int
    origin: str
    destination: str
    price: Decimal
    return_ticket_price: Decimal
    operator_name: Optional[str]
    amenity: AmenityResponse
    schedule_id: int
    schedule_time_id: int
    valid_from: date
    valid_to: date
    departure_time: time
    arrival_time: time
    is_weekday_active: bool
    is_saturday_active: bool
    is_sunday_active: bool
    is_holiday_active: bool
    stops: List[ScheduleStationResponse]

    @property
    def duration(self) -> timedelta:
        return trip_duration(self.departure_time, self.arrival_time)

    def to_response(self, passenger_type: PassengerCategory) -> SearchRouteResponse:
        return SearchRouteResponse(
            route_id=self.route_id,
            origin=self.origin,
            destination=self.destination,
            price=self.price,
            return_ticket_price=self.return_ticket_price,
            passenger_type=passenger_type,
            operator_name=self.operator_name,
            amenity=self.amenity,
            schedule_id=self.schedule_id,
            schedule_time_id=self.schedule_time_id,
            valid_from=self.valid_from,
            valid_to=self.valid_to,
            departure_time=format_time(self.departure_time),
            arrival_time=format_time(self.arrival_time),
            duration=format_duration(self.duration),
            is_weekday_active=self.is_weekday_active,
            is_saturday_active=self.is_saturday_active,
            is_sunday_active=self.is_sunday_active,
            is_holiday_active=self.is_holiday_active,
            schedule_stations=self.stops
        )


def amenity_snapshot(route: Route) -> AmenityResponse:
    amenity = route.amenity
    if amenity is None:
        return AmenityResponse()
    return AmenityResponse(
        number_of_seats=amenity.number_of_seats or 0,
        luggage_capacity=amenity.luggage_capacity or 0,
        has_wifi=bool(amenity.has_wifi),
        has_air_conditioning=bool(amenity.has_air_conditioning),
        has_power_outlets=bool(amenity.has_power_outlets),
        has_restroom=bool(amenity.has_restroom)
    )


def stop_descriptors(schedule_time: ScheduleTime) -> List[ScheduleStationResponse]:
    # Arrival order along the trip, so stops after midnight follow the evening ones
    stops = sorted(
        schedule_time.schedule_stations,
        key=lambda stop: trip_duration(schedule_time.departure_time, stop.arrival_time)
    )
    return [
        ScheduleStationResponse(
            schedule_station_id=stop.id,
            station_id=stop.station_id,
            name=stop.station.name if stop.station is not None else "",
            arrival_time=format_time(stop.arrival_time),
            distance=stop.distance_from_previous_stop
        )
        for stop in stops
    ]


class ResultProjector:
    """Expands matching routes into one row per valid departure"""

    def __init__(self, chain: FilterChain, fares: FareCalculator, travel_date: date):
        self.chain = chain
        self.fares = fares
        self.travel_date = travel_date

    def occurrences(self, route: Route) -> Iterator[tuple]:
        for schedule in route.schedules:
            if not is_calendar_valid(schedule, self.travel_date):
                continue
            for schedule_time in schedule.schedule_times:
                if self.chain.accepts_occurrence(schedule, schedule_time):
                    yield schedule, schedule_time

    def project_route(self, route: Route) -> List[SearchRow]:
        if not self.chain.accepts_route(route):
            return []

        price, return_price = self.fares.fares(route)
        amenity = amenity_snapshot(route)
        operator_name = route.operator.name if route.operator is not None else None

        return [
            self._row(route, schedule, schedule_time, price, return_price, amenity, operator_name)
            for schedule, schedule_time in self.occurrences(route)
        ]

    def project(self, routes: Iterable[Route], cancellation: Optional[CancellationToken] = None) -> List[SearchRow]:
        rows: List[SearchRow] = []
        for route in routes:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            rows.extend(self.project_route(route))
        return rows

    @staticmethod
    def _row(
        route: Route,
        schedule: Schedule,
        schedule_time: ScheduleTime,
        price: Decimal,
        return_price: Decimal,
        amenity: AmenityResponse,
        operator_name: Optional[str]
    ) -> SearchRow:
        return SearchRow(
            route_id=route.id,
            origin=route.origin,
            destination=route.destination,
            price=price,
            return_ticket_price=return_price,
            operator_name=operator_name,
            amenity=amenity,
            schedule_id=schedule.id,
            schedule_time_id=schedule_time.id,
            valid_from=schedule.valid_from,
            valid_to=schedule.valid_to,
            departure_time=schedule_time.departure_time,
            arrival_time=schedule_time.arrival_time,
            is_weekday_active=bool(schedule_time.is_weekday_active),
            is_saturday_active=bool(schedule_time.is_saturday_active),
            is_sunday_active=bool(schedule_time.is_sunday_active),
            is_holiday_active=bool(schedule_time.is_holiday_active),
            stops=stop_descriptors(schedule_time)
        )
