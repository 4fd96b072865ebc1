# util/logger.py
import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import Dict, List
from config.settings import settings

logging.captureWarnings(True)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Third-party loggers and the level they are held at.
QUIET_LOGGERS: Dict[str, int] = {
    "httpx": logging.WARNING,
    "googleapiclient.discovery_cache": logging.ERROR,
    "google_auth_oauthlib": logging.WARNING,
    "urllib3": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.INFO,
}

_SECRETS = re.compile(
    r"(?P<key>Bearer\s+|\b(?:access_token|refresh_token|code)=|\"(?:access_|refresh_)?token\":\s*\")"
    r"(?P<value>[^\s&\"',]+)",
    re.IGNORECASE,
)


def redact(text: str) -> str:
    return _SECRETS.sub(lambda m: m.group("key") + "***", text)


class RedactSecretsFilter(logging.Filter):
    """Masks bearer tokens, OAuth codes and Drive tokens before any handler writes."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def formatMessage(self, record: logging.LogRecord) -> str:
        # Only the console sees colors; the record itself keeps the plain level name.
        lvl = record.levelname
        record.levelname = f"{self.COLORS.get(lvl, self.RESET)}{lvl}{self.RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = lvl


def _handlers(level: int) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        rotating = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        rotating.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(rotating)

    secrets = RedactSecretsFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(secrets)
    return handlers


def init_logger() -> logging.Logger:
    """
    Configure the root logger once per process and return the app logger.
    Console output is colored; LOG_TO_FILE adds a size-rotated plain file.
    Every handler masks credentials that end up in messages.
    """
    root = logging.getLogger()
    if getattr(root, "_gateway_inited", False):
        return logging.getLogger(settings.LOGGER_NAME)

    level = getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in _handlers(level):
        root.addHandler(h)

    for name, lib_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(lib_level)

    root._gateway_inited = True  # type: ignore[attr-defined]
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug("logger.init level=%s file=%s", logging.getLevelName(level), settings.LOG_TO_FILE)
    return logger
