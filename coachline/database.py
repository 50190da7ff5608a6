from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from coachline.config import settings

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Yield a request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """Create all catalogue tables"""
    # Registers the mapped classes on Base.metadata
    import coachline.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
