from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from decimal import Decimal

from coachline.cancellation import CancellationToken
from coachline.clock import SystemClock
from coachline.config import settings
from coachline.database import get_db
from coachline.routes.catalogue import SqlAlchemyCatalogueReader
from coachline.routes.fare_service import DatabasePricingService
from coachline.routes.schemas import (
    PaginatedResponse, PassengerCategory, SearchRouteResponse, SearchRoutesRequest, SortByOptions
)
from coachline.routes.service import RouteSearchService
from coachline.routes.validation import RouteSearchValidator

router = APIRouter()

def get_route_search_service(db: Session = Depends(get_db)) -> RouteSearchService:
    """Per-request search service bound to the request's session"""
    return RouteSearchService(
        catalogue=SqlAlchemyCatalogueReader(db),
        pricing=DatabasePricingService(db),
        clock=SystemClock(settings.TIMEZONE),
        validator=RouteSearchValidator(max_page_size=settings.MAX_PAGE_SIZE)
    )

def _split_values(values: Optional[List[str]]) -> List[str]:
    """Accept both repeated and comma-separated query values"""
    result = []
    for value in values or []:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result

@router.get("/search", response_model=PaginatedResponse[SearchRouteResponse])
def search_routes(
    origin: str = Query(..., description="Origin station or city"),
    destination: str = Query(..., description="Destination station or city"),
    travel_date: date = Query(..., alias="date", description="Travel date (YYYY-MM-DD)"),
    min_price: Optional[Decimal] = Query(None, description="Minimum discounted fare"),
    max_price: Optional[Decimal] = Query(None, description="Maximum discounted fare"),
    station_ids: Optional[List[str]] = Query(None, description="Station IDs the trip must stop at"),
    operator_names: Optional[List[str]] = Query(None, description="Allowed operator names"),
    has_wifi: Optional[bool] = Query(None, description="Require (or exclude) WiFi"),
    has_ac: Optional[bool] = Query(None, description="Require (or exclude) air conditioning"),
    passenger_type: PassengerCategory = Query(PassengerCategory.ADULT, description="Passenger category"),
    sort_by: SortByOptions = Query(SortByOptions.DEPARTURE_TIME, description="Sort key"),
    is_ascending: bool = Query(True, description="Sort direction"),
    page_number: int = Query(1, description="Page number, starting at 1"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, description="Results per page"),
    service: RouteSearchService = Depends(get_route_search_service)
):
    """Search departures between two places on a given date"""
    try:
        station_id_list = [int(value) for value in _split_values(station_ids)]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid station_ids format. Use comma-separated integers."
        )

    criteria = SearchRoutesRequest(
        origin=origin,
        destination=destination,
        date=travel_date,
        min_price=min_price,
        max_price=max_price,
        station_ids=station_id_list,
        operator_names=_split_values(operator_names),
        has_wifi=has_wifi,
        has_ac=has_ac,
        passenger_type=passenger_type,
        sort_by=sort_by,
        is_ascending=is_ascending,
        page_number=page_number,
        page_size=page_size
    )
    return service.search_routes(criteria, CancellationToken(settings.SEARCH_TIMEOUT_SECONDS))

@router.post("/search", response_model=PaginatedResponse[SearchRouteResponse])
def search_routes_body(
    request: SearchRoutesRequest,
    service: RouteSearchService = Depends(get_route_search_service)
):
    """Search departures with the criteria given as a JSON body"""
    return service.search_routes(request, CancellationToken(settings.SEARCH_TIMEOUT_SECONDS))
