import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", stream=sys.stdout)
    logging.getLogger("redditrss").setLevel(level)
    # Every enrichment fetch would otherwise log a line.
    logging.getLogger("httpx").setLevel(logging.WARNING)
