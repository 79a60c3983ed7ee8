import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "reel_analyzer"
LOG_FILE_NAME = "analyzer.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


def setup_logging(log_level: str = "INFO", log_dir: str = "./data/logs") -> logging.Logger:
    """Route the reel_analyzer logger to <log_dir>/analyzer.log and the console"""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    # re-initialization must not stack handlers
    for existing in logger.handlers[:]:
        logger.removeHandler(existing)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [
        RotatingFileHandler(log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging initialized. Log file: {log_file}")
    return logger


def log_exception(logger: logging.Logger, message: str) -> None:
    """Log an error message together with the active exception's traceback"""
    logger.error(message, exc_info=True)
