# controller/controller_dependencies.py
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi_limiter.depends import RateLimiter
from config.container import Container
from config.settings import settings
from model.identity import Identity
from service.identity_service import IdentityService
from service.status_service import StatusService
from service.submission_service import SubmissionService
from util.enums import ErrorMessage
from util.errors import AppError

_bearer = HTTPBearer(auto_error=False)
_limiter = RateLimiter(times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS)


async def rate_limit(request: Request, response: Response) -> None:
    if settings.RATE_LIMIT_ENABLED:
        await _limiter(request, response)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_submission_service(
    container: Container = Depends(get_container),
) -> SubmissionService:
    return container.submissions


def get_status_service(container: Container = Depends(get_container)) -> StatusService:
    return container.statuses


def get_identity_service() -> IdentityService:
    return IdentityService()


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    service: IdentityService = Depends(get_identity_service),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AppError.of(ErrorMessage.UNAUTHORIZED)
    return await service.verify(credentials.credentials)
