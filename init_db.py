#!/usr/bin/env python3
"""
Database initialization script.
Creates tables if they don't exist and applies the webhookStatus migration.
"""

import sys
import logging
from sqlalchemy import inspect
from database import engine, Base, migrate_webhook_status
import models  # noqa: F401  registers the Job table on Base.metadata

def init_database():
    """Initialize the database by creating all tables."""
    logging.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    migrate_webhook_status(engine)
    logging.info(f"Database tables: {inspect(engine).get_table_names()}")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        init_database()
    except Exception as e:
        logging.error(f"❌ Error creating database tables: {e}")
        sys.exit(1)
    print("✅ Database tables created successfully!")
