import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coachline.config import settings
from coachline.exceptions import CatalogueUnavailable, InvalidSearchCriteria, SearchCancelled
from coachline.logging_config import setup_logging
from coachline.routes import router as routes_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Non-standard status used by nginx for requests the client abandoned
HTTP_499_CLIENT_CLOSED_REQUEST = 499

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Route search for scheduled coach services",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(InvalidSearchCriteria)
def invalid_criteria_handler(request: Request, exc: InvalidSearchCriteria):
    logger.warning("Rejected search criteria: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "message": "Route search request validation failed",
                "errors": [
                    {
                        "code": error.error_code,
                        "message": error.error_message,
                        "field": error.field
                    }
                    for error in exc.errors
                ]
            }
        }
    )

@app.exception_handler(CatalogueUnavailable)
def catalogue_unavailable_handler(request: Request, exc: CatalogueUnavailable):
    # Also covers SearchTimedOut
    logger.warning("Route search unavailable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "retryable": True},
        headers={"Retry-After": "5"}
    )

@app.exception_handler(SearchCancelled)
def search_cancelled_handler(request: Request, exc: SearchCancelled):
    logger.warning("Route search cancelled: %s", exc)
    return JSONResponse(
        status_code=HTTP_499_CLIENT_CLOSED_REQUEST,
        content={"detail": f"Search cancelled: {exc}"}
    )

# Include routers
app.include_router(
    routes_router,
    prefix=f"{settings.API_V1_STR}/routes",
    tags=["Route Search"]
)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
