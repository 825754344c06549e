import logging
import sys

def get_logger(level: str | None = None):
    logger = logging.getLogger("reporteer")
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(message)s")
        h.setFormatter(fmt)
        logger.addHandler(h)
        logger.setLevel(logging.INFO)
    if level:
        resolved = logging.getLevelName(level.strip().upper())
        # getLevelName returns "Level X" for unknown names
        if isinstance(resolved, int):
            logger.setLevel(resolved)
        else:
            logger.warning("Unknown log level %r, keeping %s", level, logging.getLevelName(logger.level))
    return logger
