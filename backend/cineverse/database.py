from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from cineverse.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI serves sync sessions from a threadpool
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Dependency to get the database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
