from typing import List, Optional

from coachline.exceptions import InvalidSearchCriteria, SearchValidationError
from coachline.routes.schemas import SearchRoutesRequest


class RouteSearchValidator:
    """Rejects malformed criteria before any catalogue work is done"""

    def __init__(self, max_page_size: Optional[int] = None):
        self.max_page_size = max_page_size

    def validate_search_request(self, request: SearchRoutesRequest) -> List[SearchValidationError]:
        """Validate a route search request"""
        errors = []

        if not request.origin.strip():
            errors.append(SearchValidationError(
                error_code="MISSING_ORIGIN",
                error_message="Origin is required",
                field="origin"
            ))

        if not request.destination.strip():
            errors.append(SearchValidationError(
                error_code="MISSING_DESTINATION",
                error_message="Destination is required",
                field="destination"
            ))

        # Paging
        if request.page_number < 1:
            errors.append(SearchValidationError(
                error_code="INVALID_PAGE_NUMBER",
                error_message="Page number must be at least 1",
                field="page_number"
            ))

        if request.page_size < 1:
            errors.append(SearchValidationError(
                error_code="INVALID_PAGE_SIZE",
                error_message="Page size must be at least 1",
                field="page_size"
            ))
        elif self.max_page_size is not None and request.page_size > self.max_page_size:
            errors.append(SearchValidationError(
                error_code="EXCESSIVE_PAGE_SIZE",
                error_message=f"Page size cannot exceed {self.max_page_size}",
                field="page_size"
            ))

        # Price band
        for field in ("min_price", "max_price"):
            value = getattr(request, field)
            if value is not None and value < 0:
                errors.append(SearchValidationError(
                    error_code="NEGATIVE_PRICE",
                    error_message=f"{field} cannot be negative",
                    field=field
                ))

        if (
            request.min_price is not None
            and request.max_price is not None
            and request.min_price > request.max_price
        ):
            errors.append(SearchValidationError(
                error_code="INVALID_PRICE_RANGE",
                error_message="Minimum price cannot be greater than maximum price",
                field="min_price"
            ))

        return errors

    def ensure_valid(self, request: SearchRoutesRequest):
        errors = self.validate_search_request(request)
        if errors:
            raise InvalidSearchCriteria(errors)
