import logging

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQL statements only show up at DEBUG
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
