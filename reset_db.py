import logging

from sqlalchemy import create_engine, text
from flowpad.config import get_db_components

logger = logging.getLogger(__name__)


def reset_database():
    """Drop and recreate the database."""
    db_components = get_db_components()
    db_name = db_components["db_name"]

    # Connect to the maintenance database; DROP/CREATE DATABASE cannot run in a transaction
    engine = create_engine(db_components["db_url_without_name"], isolation_level="AUTOCOMMIT")
    with engine.connect() as conn:
        logger.info("Closing all connections to the database...")
        conn.execute(
            text("""
                SELECT pg_terminate_backend(pg_stat_activity.pid)
                FROM pg_stat_activity
                WHERE pg_stat_activity.datname = :db_name
                AND pid <> pg_backend_pid();
            """),
            {"db_name": db_name},
        )

        logger.info(f"Dropping database '{db_name}'...")
        # Database names cannot be parameterized; get_db_components() validates it
        conn.execute(text(f'DROP DATABASE IF EXISTS "{db_name}"'))
        logger.info(f"Creating database '{db_name}'...")
        conn.execute(text(f'CREATE DATABASE "{db_name}"'))
    engine.dispose()

    logger.info(f"Database '{db_name}' has been reset successfully!")
    logger.info("Run 'python run.py' to initialize tables and start the application.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    confirm = input("This will DELETE ALL DATA in the database. Are you sure? (y/n): ")
    if confirm.lower() == 'y':
        reset_database()
    else:
        print("Operation cancelled.")
