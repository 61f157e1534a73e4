# database.py

import logging

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker
from config import DATABASE_URL

# SQLite connections are shared with the completion timer threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create the engine to connect to the database
engine = create_engine(DATABASE_URL, connect_args=connect_args)

# Create a session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for our database models
Base = declarative_base()

# Dependency for FastAPI to get a DB session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def migrate_webhook_status(bind=None):
    """
    Adds the webhookStatus column to a jobs table created before it existed.
    Safe to run any number of times.
    """
    bind = bind or engine
    columns = {column["name"] for column in inspect(bind).get_columns("jobs")}
    if "webhookStatus" in columns:
        return False

    with bind.begin() as conn:
        conn.execute(text("ALTER TABLE jobs ADD COLUMN webhookStatus TEXT DEFAULT 'pending'"))
    logging.info("Added webhookStatus column to jobs table")
    return True
