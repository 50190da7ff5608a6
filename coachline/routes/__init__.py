"""
Route Search Module

This module answers "which departures can I take from A to B on this date",
priced for a passenger category, sorted and paginated. It includes:

- Calendar validity of recurring schedules (validity window, exception days,
  weekday/weekend/holiday patterns)
- Passenger-category fare discounts
- Optional filters: fare band, stops served, operators, WiFi, air conditioning
- Same-day cutoff for departures that already left
- Stable sorting by departure time, price or duration, and pagination

Key Components:
- validity.py: Calendar validity and day-pattern rules
- fare_service.py: Pricing authorities and the fare calculator
- filters.py: Composable route and occurrence predicates
- projection.py: Expansion of routes into one row per departure
- sorting.py: Result ordering
- catalogue.py: SQLAlchemy catalogue reader
- service.py: The search pipeline
- router.py: FastAPI endpoints
- schemas.py: Pydantic request/response models
"""

from .router import router
from .service import RouteSearchService
from .catalogue import CatalogueReader, SqlAlchemyCatalogueReader
from .fare_service import FareCalculator, PricingService, StaticPricingService, DatabasePricingService
from .filters import FilterChain
from .projection import ResultProjector, SearchRow
from .sorting import sort_rows
from .validation import RouteSearchValidator
from .validity import is_calendar_valid, day_category, is_active_on, DayCategory
from .schemas import (
    SearchRoutesRequest, SearchRouteResponse, PaginatedResponse, AmenityResponse,
    ScheduleStationResponse, SortByOptions, PassengerCategory
)

__all__ = [
    "router",
    "RouteSearchService",
    "CatalogueReader",
    "SqlAlchemyCatalogueReader",
    "FareCalculator",
    "PricingService",
    "StaticPricingService",
    "DatabasePricingService",
    "FilterChain",
    "ResultProjector",
    "SearchRow",
    "sort_rows",
    "RouteSearchValidator",
    "is_calendar_valid",
    "day_category",
    "is_active_on",
    "DayCategory",
    "SearchRoutesRequest",
    "SearchRouteResponse",
    "PaginatedResponse",
    "AmenityResponse",
    "ScheduleStationResponse",
    "SortByOptions",
    "PassengerCategory"
]
