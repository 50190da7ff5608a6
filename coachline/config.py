from pydantic_settings import BaseSettings
from typing import Dict, List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./coachline.db"
    PGHOST: Optional[str] = None
    PGDATABASE: Optional[str] = None
    PGUSER: Optional[str] = None
    PGPASSWORD: Optional[str] = None
    PGSSLMODE: str = "require"

    # Application
    PROJECT_NAME: str = "Coachline Route Search"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Search
    TIMEZONE: str = "UTC"
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    SEARCH_TIMEOUT_SECONDS: float = 10.0
    ENFORCE_DAY_PATTERNS: bool = True

    # Pricing (multiplier applied to base fares per passenger type)
    DISCOUNT_FACTORS: Dict[str, float] = {
        "adult": 1.0,
        "child": 0.5,
        "student": 0.8,
        "senior": 0.7,
    }

    @property
    def database_url(self) -> str:
        if self.PGHOST:
            return f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}/{self.PGDATABASE}?sslmode={self.PGSSLMODE}"
        return self.DATABASE_URL

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
