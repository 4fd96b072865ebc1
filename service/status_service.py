# service/status_service.py
import logging
from core.circuit_breaker import CallFailed, CircuitBreaker
from model.submission import FolderStatus
from repository.drive_repository import DriveRepository
from service.folder_resolver import FolderResolver
from util.enums import ErrorMessage
from util.errors import AppError
from util.timing import timed

logger = logging.getLogger(__name__)


class StatusService:
    def __init__(
        self,
        resolver: FolderResolver,
        drive: DriveRepository,
        breaker: CircuitBreaker,
        parent_folder_id: str,
    ) -> None:
        self._resolver = resolver
        self._drive = drive
        self._breaker = breaker
        self._parent_id = parent_folder_id

    async def status(self, folder_key: str) -> FolderStatus:
        # Read-only: a missing folder is reported, never created.
        try:
            with timed(logger, "status"):
                return await self._breaker.fire(self._lookup, folder_key)
        except CallFailed as e:
            logger.error("status.failed reason=%s err=%s", e.reason, e, exc_info=e.cause)
            raise AppError.of(ErrorMessage.STORAGE_UNAVAILABLE) from e

    async def _lookup(self, folder_key: str) -> FolderStatus:
        folder_id = await self._resolver.find(self._parent_id, folder_key)
        if folder_id is None:
            return FolderStatus(found=False, files=[])
        children = await self._drive.list_children(folder_id)
        return FolderStatus(found=True, files=[c["name"] for c in children])
