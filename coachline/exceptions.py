from typing import List, Optional
from pydantic import BaseModel


class SearchValidationError(BaseModel):
    """Search criteria validation error details"""
    error_code: str
    error_message: str
    field: Optional[str] = None


class RouteSearchError(Exception):
    """Base class for failures surfaced by the route search engine"""


class InvalidSearchCriteria(RouteSearchError):
    """Criteria rejected before any catalogue work was done"""

    def __init__(self, errors: List[SearchValidationError]):
        self.errors = errors
        super().__init__("; ".join(error.error_message for error in errors))


class CatalogueUnavailable(RouteSearchError):
    """The catalogue reader failed; safe for the caller to retry"""

    retryable = True


class SearchTimedOut(CatalogueUnavailable):
    """The search outlived its server-side deadline"""


class SearchCancelled(RouteSearchError):
    """The search was abandoned because the caller cancelled it"""
