# klassflow/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from klassflow.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}  # SQLite connections are shared across the threadpool

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
