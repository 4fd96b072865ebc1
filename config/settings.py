# config/settings.py
import os
import sys
from typing import List
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
from util.constants import ExternalURIs
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    HOST: str = Field(default="127.0.0.1", validation_alias="HOST")
    PORT: int = Field(default=3000, validation_alias="PORT")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )
    RATE_LIMIT_ENABLED: bool = Field(default=True, validation_alias="RATE_LIMIT_ENABLED")
    RATE_LIMIT_TIMES: int = Field(default=20, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    MAX_FILE_MB: int = Field(default=10, validation_alias="MAX_FILE_MB")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Staged multipart uploads; one uniquely named file per upload.
    UPLOAD_DIR: str = Field(default="uploads", validation_alias="UPLOAD_DIR")

    # Identity provider (Keycloak)
    KEYCLOAK_SERVER_URL: str = Field(..., validation_alias="KEYCLOAK_SERVER_URL")
    KEYCLOAK_REALM: str = Field(..., validation_alias="KEYCLOAK_REALM")
    KEYCLOAK_TIMEOUT_SECONDS: float = Field(
        default=5.0, validation_alias="KEYCLOAK_TIMEOUT_SECONDS"
    )

    # Google Drive
    DRIVE_PARENT_FOLDER_ID: str = Field(..., validation_alias="DRIVE_PARENT_FOLDER_ID")
    GOOGLE_CLIENT_SECRETS_PATH: str = Field(
        default="oauth_credentials.json", validation_alias="GOOGLE_CLIENT_SECRETS_PATH"
    )
    GOOGLE_TOKEN_PATH: str = Field(default="token.json", validation_alias="GOOGLE_TOKEN_PATH")
    GOOGLE_SCOPES: List[str] = ["https://www.googleapis.com/auth/drive"]

    # Circuit breaker policy, shared by every category
    BREAKER_TIMEOUT_MS: int = Field(default=5000, validation_alias="BREAKER_TIMEOUT_MS")
    BREAKER_ERROR_THRESHOLD_PERCENTAGE: float = Field(
        default=50.0, validation_alias="BREAKER_ERROR_THRESHOLD_PERCENTAGE"
    )
    BREAKER_RESET_TIMEOUT_MS: int = Field(
        default=30000, validation_alias="BREAKER_RESET_TIMEOUT_MS"
    )
    BREAKER_ROLLING_WINDOW_MS: int = Field(
        default=10000, validation_alias="BREAKER_ROLLING_WINDOW_MS"
    )
    BREAKER_VOLUME_THRESHOLD: int = Field(
        default=0, validation_alias="BREAKER_VOLUME_THRESHOLD"
    )

    # Logging knobs
    LOGGER_NAME: str = "submission-gateway"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @property
    def keycloak_userinfo_url(self) -> str:
        base = self.KEYCLOAK_SERVER_URL.rstrip("/")
        return base + ExternalURIs.KEYCLOAK_USERINFO.format(realm=self.KEYCLOAK_REALM)

    @property
    def max_file_bytes(self) -> int:
        return self.MAX_FILE_MB * 1024 * 1024


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
