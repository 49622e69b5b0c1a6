import logging

import uvicorn

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from app import app

# Silence SQL loggers after the engine is created, statements carry shipping data
if not config.SQL_ECHO:
    for logger_name in ['aiosqlite', 'sqlalchemy', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm']:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
    logging.info("🔇 SQL loggers silenced (aiosqlite, sqlalchemy.*)")


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT, log_config=None)


if __name__ == '__main__':
    main()
