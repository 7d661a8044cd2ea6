import logging

from core.config import LOG_FORMAT, LOG_LEVEL

log = logging.getLogger("tcppump")


def setup(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
        ]
    )
