"""
Database initialization utilities.
"""
import logging
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from flowpad.db.models import Base
from flowpad.config import get_db_components

logger = logging.getLogger(__name__)


def create_database_if_not_exists():
    """Create the database if it doesn't exist."""
    db_components = get_db_components()
    db_name = db_components["db_name"]

    engine = create_engine(db_components["db_url_without_name"], isolation_level="AUTOCOMMIT")

    with engine.connect() as conn:
        result = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
            {"db_name": db_name}
        )

        if not result.fetchone():
            logger.info(f"Creating database: {db_name}")
            # Database names cannot be parameterized; get_db_components() validates it
            conn.execute(text(f'CREATE DATABASE "{db_name}"'))
            logger.info(f"Database {db_name} created successfully")
        else:
            logger.info(f"Database {db_name} already exists")

    engine.dispose()


def create_tables(engine: Engine):
    """Create all tables defined in models."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("All tables created successfully")


def drop_all_tables(engine: Engine):
    """Drop all tables."""
    logger.info("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine)
    logger.info("All tables dropped successfully")


def reset_database(engine: Engine):
    """Drop and recreate all tables."""
    logger.warning("Resetting database...")
    drop_all_tables(engine)
    create_tables(engine)
    logger.warning("Database reset complete")


def init_database():
    """Complete database initialization."""
    from flowpad.db.database import engine

    logger.info("Initializing database...")
    create_database_if_not_exists()
    create_tables(engine)
    logger.info("Database initialization complete")


def check_connection(engine: Engine) -> bool:
    """Run a trivial query; True when the database answers."""
    with engine.connect() as conn:
        result = conn.execute(text("SELECT 1"))
        return result.scalar() == 1


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
