import logging
import sys

LOGGER_PREFIX = "svg-rasterizer"
LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"

_handler: logging.Handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))


def get_logger(section: str, debug: bool = False) -> logging.Logger:
    """
    Return the logger for one section of the rasterizer (e.g. `lib`, `cli`).

    Only errors are emitted unless `debug` is set, in which case everything
    down to DEBUG goes to stderr.
    """
    logger = logging.getLogger(f"{LOGGER_PREFIX}/{section}")
    if _handler not in logger.handlers:
        logger.addHandler(_handler)
    logger.propagate = False
    logger.setLevel(logging.DEBUG if debug else logging.ERROR)
    return logger
