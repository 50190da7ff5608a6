import logging
import time
from typing import Optional

from coachline.cancellation import CancellationToken
from coachline.clock import Clock, SystemClock
from coachline.config import settings
from coachline.pagination import paginate
from coachline.routes.catalogue import CatalogueReader
from coachline.routes.fare_service import FareCalculator, PricingService
from coachline.routes.filters import FilterChain
from coachline.routes.projection import ResultProjector
from coachline.routes.schemas import PaginatedResponse, SearchRouteResponse, SearchRoutesRequest
from coachline.routes.sorting import sort_rows
from coachline.routes.validation import RouteSearchValidator

logger = logging.getLogger(__name__)


class RouteSearchService:
    """Search pipeline: validate, read, filter, project, sort, paginate"""

    def __init__(
        self,
        catalogue: CatalogueReader,
        pricing: PricingService,
        clock: Optional[Clock] = None,
        validator: Optional[RouteSearchValidator] = None,
        enforce_day_patterns: Optional[bool] = None
    ):
        self.catalogue = catalogue
        self.pricing = pricing
        self.clock = clock or SystemClock(settings.TIMEZONE)
        self.validator = validator or RouteSearchValidator()
        self.enforce_day_patterns = (
            settings.ENFORCE_DAY_PATTERNS if enforce_day_patterns is None else enforce_day_patterns
        )

    def search_routes(
        self,
        criteria: SearchRoutesRequest,
        cancellation: Optional[CancellationToken] = None
    ) -> PaginatedResponse[SearchRouteResponse]:
        """Find, price, order and page the departures matching the criteria"""
        start_time = time.perf_counter()
        cancellation = cancellation or CancellationToken()

        self.validator.ensure_valid(criteria)
        cancellation.raise_if_cancelled()

        routes = self.catalogue.get_routes(criteria.origin, criteria.destination, cancellation)
        cancellation.raise_if_cancelled()

        holidays = set()
        if self.enforce_day_patterns:
            holidays = self.catalogue.get_holidays(criteria.date, criteria.date)

        fares = FareCalculator.for_passenger(self.pricing, criteria.passenger_type)
        chain = FilterChain.from_criteria(
            criteria,
            fares,
            self.clock,
            holidays=holidays,
            enforce_day_patterns=self.enforce_day_patterns
        )

        rows = ResultProjector(chain, fares, criteria.date).project(routes, cancellation)
        rows = sort_rows(rows, criteria.sort_by, criteria.is_ascending)
        page = paginate(rows, criteria.page_number, criteria.page_size)

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Route search %s -> %s on %s: %d of %d routes matched, %d departures, page %d (%d ms)",
            criteria.origin,
            criteria.destination,
            criteria.date.isoformat(),
            len({row.route_id for row in rows}),
            len(routes),
            page.total_count,
            page.page_number,
            elapsed_ms
        )

        return PaginatedResponse[SearchRouteResponse](
            items=[row.to_response(criteria.passenger_type) for row in page.items],
            page_number=page.page_number,
            page_size=page.page_size,
            total_count=page.total_count,
            total_pages=page.total_pages
        )
