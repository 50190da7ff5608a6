from pydantic import BaseModel, Field
from typing import Generic, List, Optional, TypeVar
from datetime import date
from decimal import Decimal
from enum import Enum

from coachline.config import settings

T = TypeVar("T")

class SortByOptions(str, Enum):
    """Result ordering keys"""
    PRICE = "price"
    DURATION = "duration"
    DEPARTURE_TIME = "departure_time"

class PassengerCategory(str, Enum):
    """Passenger categories known to the pricing authority"""
    ADULT = "adult"
    CHILD = "child"
    STUDENT = "student"
    SENIOR = "senior"

class SearchRoutesRequest(BaseModel):
    """Criteria for a single-leg route search"""
    origin: str
    destination: str
    date: date
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    station_ids: List[int] = Field(default_factory=list)
    operator_names: List[str] = Field(default_factory=list)
    has_wifi: Optional[bool] = None
    has_ac: Optional[bool] = None
    passenger_type: PassengerCategory = PassengerCategory.ADULT
    sort_by: SortByOptions = SortByOptions.DEPARTURE_TIME
    is_ascending: bool = True
    # Range checks live in RouteSearchValidator so the engine rejects bad pages itself
    page_number: int = 1
    page_size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)

class AmenityResponse(BaseModel):
    """Amenity snapshot of a route"""
    number_of_seats: int = 0
    luggage_capacity: int = 0
    has_wifi: bool = False
    has_air_conditioning: bool = False
    has_power_outlets: bool = False
    has_restroom: bool = False

class ScheduleStationResponse(BaseModel):
    """Intermediate stop of a departure"""
    schedule_station_id: int
    station_id: int
    name: str
    arrival_time: str  # HH:MM
    distance: Optional[Decimal] = None

class SearchRouteResponse(BaseModel):
    """One bookable departure of a route on the searched date"""
    route_id: int
    origin: str
    destination: str
    price: Decimal
    return_ticket_price: Decimal
    passenger_type: PassengerCategory
    operator_name: Optional[str] = None
    amenity: AmenityResponse
    schedule_id: int
    schedule_time_id: int
    valid_from: date
    valid_to: date
    departure_time: str  # HH:MM
    arrival_time: str  # HH:MM
    duration: str
    is_weekday_active: bool
    is_saturday_active: bool
    is_sunday_active: bool
    is_holiday_active: bool
    schedule_stations: List[ScheduleStationResponse]

class PaginatedResponse(BaseModel, Generic[T]):
    """Page of results plus the size of the whole result set"""
    items: List[T]
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
