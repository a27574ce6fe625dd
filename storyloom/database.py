from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from storyloom.config import get_settings

settings = get_settings()

# Create the engine against the embedded store.
# echo=True will log SQL queries, helpful for debugging
engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

# Create a session factory
SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autoflush=False
)

def init_db(bind=None):
    """Create all tables that do not exist yet."""
    from storyloom.models import Base
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    """Dependency for providing database sessions."""
    with SessionLocal() as session:
        try:
            yield session
        finally:
            session.close()
