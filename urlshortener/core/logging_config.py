import logging
import sys

from urlshortener.core.config import settings

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'

# Chatty third-party loggers, kept at WARNING unless LOG_LEVEL is DEBUG
NOISY_LOGGERS = ("sqlalchemy.engine", "redis", "httpx")


def configure_logging(level: str = None):
    level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Redirect and shorten handlers already log each request
    logging.getLogger("uvicorn.access").disabled = True
    logging.getLogger("uvicorn.error").propagate = True

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("urlshortener")
