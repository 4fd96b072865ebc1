# config/container.py
from dataclasses import dataclass
from google.oauth2.credentials import Credentials
from config.settings import settings
from core.circuit_breaker import BreakerPolicy, BreakerRegistry
from core.drive_auth import DriveAuthBootstrap
from repository.drive_repository import DriveRepository
from repository.token_repository import TokenRepository
from service.folder_resolver import FolderResolver
from service.status_service import StatusService
from service.submission_service import SubmissionService
from util.enums import BreakerCategory


@dataclass
class Container:
    """Process-lifetime services, built once the Drive credentials are loaded."""

    breakers: BreakerRegistry
    drive: DriveRepository
    resolver: FolderResolver
    submissions: SubmissionService
    statuses: StatusService


def breaker_policy() -> BreakerPolicy:
    return BreakerPolicy(
        timeout_ms=settings.BREAKER_TIMEOUT_MS,
        error_threshold_percentage=settings.BREAKER_ERROR_THRESHOLD_PERCENTAGE,
        reset_timeout_ms=settings.BREAKER_RESET_TIMEOUT_MS,
        rolling_window_ms=settings.BREAKER_ROLLING_WINDOW_MS,
        volume_threshold=settings.BREAKER_VOLUME_THRESHOLD,
    )


def build_bootstrap(breakers: BreakerRegistry) -> DriveAuthBootstrap:
    return DriveAuthBootstrap(
        tokens=TokenRepository(settings.GOOGLE_TOKEN_PATH),
        client_secrets_path=settings.GOOGLE_CLIENT_SECRETS_PATH,
        scopes=settings.GOOGLE_SCOPES,
        breaker=breakers.get(BreakerCategory.BOOTSTRAP),
    )


def build_container(
    credentials: Credentials, breakers: BreakerRegistry
) -> Container:
    drive = DriveRepository(credentials)
    resolver = FolderResolver(drive)
    return Container(
        breakers=breakers,
        drive=drive,
        resolver=resolver,
        submissions=SubmissionService(
            resolver,
            drive,
            breakers.get(BreakerCategory.UPLOAD),
            settings.DRIVE_PARENT_FOLDER_ID,
        ),
        statuses=StatusService(
            resolver,
            drive,
            breakers.get(BreakerCategory.STATUS),
            settings.DRIVE_PARENT_FOLDER_ID,
        ),
    )
