from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mobilespo.core.config import settings


def build_engine(url: str = None):
    url = url or settings.DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)