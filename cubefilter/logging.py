from logging import FileHandler, Formatter, Logger, StreamHandler, getLogger

__all__ = [
    "get_logger",
    "create_logger",
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_FORMAT",
]

DEFAULT_LOGGER_NAME = "cubefilter"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(message)s"

logger: Logger | None = None


def get_logger(path: str | None = None) -> Logger:
    """Get the default cubefilter logger. The logger is created on first
    call with `path` as an optional log file."""
    global logger

    if logger:
        return logger
    logger = create_logger(path=path)
    return logger


def create_logger(level: str | None = None, path: str | None = None) -> Logger:
    """Create a default logger with a stream handler, or a file handler
    when `path` is given."""
    global logger

    new_logger = getLogger(DEFAULT_LOGGER_NAME)
    new_logger.propagate = False

    if level:
        new_logger.setLevel(level.upper())

    # Handlers are replaced so repeated configuration does not duplicate output
    for handler in list(new_logger.handlers):
        new_logger.removeHandler(handler)
        handler.close()

    formatter = Formatter(fmt=DEFAULT_FORMAT)

    if path:
        handler = FileHandler(path)
    else:
        handler = StreamHandler()

    handler.setFormatter(formatter)
    new_logger.addHandler(handler)

    logger = new_logger

    return new_logger
