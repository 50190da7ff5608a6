import logging
from datetime import date
from typing import List, Optional, Protocol, Set

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from coachline.cancellation import CancellationToken
from coachline.exceptions import CatalogueUnavailable
from coachline.models import Holiday, Route, Schedule, ScheduleStation, ScheduleTime

logger = logging.getLogger(__name__)


class CatalogueReader(Protocol):
    """Read side of the route catalogue"""

    def get_routes(
        self,
        origin: str,
        destination: str,
        cancellation: Optional[CancellationToken] = None
    ) -> List[Route]:
        ...

    def get_holidays(self, start: date, end: date) -> Set[date]:
        ...


class SqlAlchemyCatalogueReader:
    """Loads routes with their whole schedule tree in a fixed number of queries"""

    def __init__(self, db: Session):
        self.db = db

    def get_routes(
        self,
        origin: str,
        destination: str,
        cancellation: Optional[CancellationToken] = None
    ) -> List[Route]:
        if cancellation is not None:
            cancellation.raise_if_cancelled()

        query = self.db.query(Route).options(
            joinedload(Route.operator),
            joinedload(Route.amenity),
            selectinload(Route.schedules).selectinload(Schedule.exception_days),
            selectinload(Route.schedules)
                .selectinload(Schedule.schedule_times)
                .selectinload(ScheduleTime.schedule_stations)
                .joinedload(ScheduleStation.station)
        ).filter(
            Route.origin == origin,
            Route.destination == destination
        ).order_by(Route.id)

        try:
            self._bound_statement_time(cancellation)
            routes = query.all()
        except SQLAlchemyError as exc:
            logger.error("Catalogue read failed for %s -> %s", origin, destination, exc_info=True)
            raise CatalogueUnavailable(f"Route catalogue unavailable: {exc.__class__.__name__}") from exc

        if cancellation is not None:
            cancellation.raise_if_cancelled()

        logger.debug("Loaded %d routes for %s -> %s", len(routes), origin, destination)
        return routes

    def _bound_statement_time(self, cancellation: Optional[CancellationToken]):
        # PostgreSQL aborts the read itself once the search deadline is spent
        if cancellation is None or self.db.get_bind().dialect.name != "postgresql":
            return
        remaining = cancellation.remaining()
        if remaining is None:
            return
        timeout_ms = max(1, int(remaining * 1000))
        self.db.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))

    def get_holidays(self, start: date, end: date) -> Set[date]:
        try:
            rows = self.db.query(Holiday.date).filter(
                Holiday.date >= start,
                Holiday.date <= end
            ).all()
        except SQLAlchemyError as exc:
            logger.error("Holiday calendar read failed", exc_info=True)
            raise CatalogueUnavailable(f"Holiday calendar unavailable: {exc.__class__.__name__}") from exc
        return {row[0] for row in rows}
