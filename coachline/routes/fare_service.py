import logging
from decimal import Decimal
from typing import Dict, Mapping, Optional, Protocol, Tuple

from sqlalchemy.orm import Session

from coachline.config import settings
from coachline.models import PassengerType, Route
from coachline.routes.schemas import PassengerCategory

logger = logging.getLogger(__name__)

FULL_FARE = Decimal("1")


class PricingService(Protocol):
    """Pricing authority: discount multiplier per passenger category"""

    def get_discount_factor(self, passenger_type: PassengerCategory) -> Decimal:
        ...


class StaticPricingService:
    """Discount factors from configuration"""

    def __init__(self, factors: Optional[Mapping[str, float]] = None):
        factors = settings.DISCOUNT_FACTORS if factors is None else factors
        # str() first so 0.7 becomes Decimal('0.7') and not its binary expansion
        self._factors: Dict[str, Decimal] = {
            name: Decimal(str(factor)) for name, factor in factors.items()
        }

    def get_discount_factor(self, passenger_type: PassengerCategory) -> Decimal:
        return self._factors.get(PassengerCategory(passenger_type).value, FULL_FARE)


class DatabasePricingService:
    """Discount factors derived from the passenger_types table"""

    def __init__(self, db: Session, fallback: Optional[PricingService] = None):
        self.db = db
        self.fallback = fallback or StaticPricingService()
        self._passenger_types_cache: Optional[Dict[str, Decimal]] = None

    def _load_passenger_types(self) -> Dict[str, Decimal]:
        """Load and cache discount percentages by passenger type name"""
        if self._passenger_types_cache is None:
            types = self.db.query(PassengerType).all()
            self._passenger_types_cache = {
                ptype.name.lower(): Decimal(str(ptype.discount_percentage or 0))
                for ptype in types
            }
        return self._passenger_types_cache

    def get_discount_factor(self, passenger_type: PassengerCategory) -> Decimal:
        name = PassengerCategory(passenger_type).value
        discount_percentage = self._load_passenger_types().get(name)
        if discount_percentage is None:
            logger.debug("No passenger type row for %s, using configured factor", name)
            return self.fallback.get_discount_factor(passenger_type)
        return FULL_FARE - discount_percentage / Decimal("100")


class FareCalculator:
    """Applies one passenger discount factor to route fares

    A single instance serves both the price filter and the projected rows,
    so the fare a row is filtered on is the fare it is returned with.
    """

    def __init__(self, discount_factor: Decimal):
        self.discount_factor = discount_factor

    @classmethod
    def for_passenger(cls, pricing: PricingService, passenger_type: PassengerCategory) -> "FareCalculator":
        return cls(pricing.get_discount_factor(passenger_type))

    def discounted(self, price: Decimal) -> Decimal:
        return Decimal(price) * self.discount_factor

    def fares(self, route: Route) -> Tuple[Decimal, Decimal]:
        """Discounted one-way and return fares of a route"""
        return self.discounted(route.price), self.discounted(route.return_ticket_price)
