"""Database setup via SQLAlchemy (SQLite by default)."""
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

# Default DB lives in data/ (gitignored)
_DB_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(_DB_DIR, 'infera.db')}")

if DATABASE_URL.startswith("sqlite:///") and not os.getenv("DATABASE_URL"):
    os.makedirs(_DB_DIR, exist_ok=True)

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class Base(DeclarativeBase):
    pass

def init_db(bind=None):
    """Create all tables."""
    import backend.models_db  # noqa: F401  registers tables on Base.metadata
    Base.metadata.create_all(bind=bind or engine)
