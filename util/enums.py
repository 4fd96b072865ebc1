# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class BreakerCategory(str, Enum):
    BOOTSTRAP = "bootstrap"
    UPLOAD = "upload"
    STATUS = "status"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    UNAUTHORIZED = ErrorInfo("Invalid or expired session", status.HTTP_401_UNAUTHORIZED)
    IDENTITY_UNAVAILABLE = ErrorInfo(
        "Identity provider unavailable", status.HTTP_502_BAD_GATEWAY
    )
    STORAGE_UNAVAILABLE = ErrorInfo(
        "Storage service unavailable. Try again later.",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    NO_DOCUMENTS = ErrorInfo(
        "At least one document is required", status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    UNKNOWN_FIELD = ErrorInfo(
        "Unexpected document field", status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    DUPLICATE_FIELD = ErrorInfo(
        "Only one file per document field is allowed",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    FILE_TOO_LARGE = ErrorInfo(
        "File too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    )
