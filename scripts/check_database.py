import sys
import os

# Add the project root to the python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect
from casa_programada.core.database import init_database
from casa_programada.core.logger import logger

TABLES = ("clientes", "simulacoes")


def check_database() -> int:
    database = init_database()
    if database is None:
        logger.error("Database initialization failed")
        return 1

    try:
        status = database.check_status()
        if not status["success"]:
            logger.error(f"Database unreachable: {status['error']}")
            return 1

        print(f"Connected: {status['connected']} | {status['tipo']} {status['versao']}")

        inspector = inspect(database.engine)
        for table in TABLES:
            print(f"\nColumns in '{table}' table:")
            for column in inspector.get_columns(table):
                print(f"- {column['name']} ({column['type']})")
    finally:
        database.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(check_database())
