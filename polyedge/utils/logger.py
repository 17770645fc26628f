import logging

LOG_FMT = "%(asctime)s │ %(levelname)-7s │ %(message)s"

def setup_logger(name: str = "polyedge", level: int = logging.INFO) -> logging.Logger:
    logging.basicConfig(level=level, format=LOG_FMT, datefmt="%H:%M:%S")
    return logging.getLogger(name)

def set_level(level_name: str) -> int:
    """Apply a level name like "DEBUG" to the shared logger. Unknown names fall back to INFO."""
    level = logging.getLevelName((level_name or "").upper())
    if not isinstance(level, int):
        log.warning("Unknown log level %r, using INFO", level_name)
        level = logging.INFO
    log.setLevel(level)
    return level

log = setup_logger()
