# service/submission_service.py
import asyncio
import logging
from typing import Dict, Iterable
from core.circuit_breaker import CallFailed, CircuitBreaker
from model.submission import SubmissionFile, SubmissionResult
from repository.drive_repository import DriveRepository
from service.folder_resolver import FolderResolver
from util.enums import ErrorMessage
from util.errors import AppError
from util.functions import remove_quietly
from util.timing import timed

logger = logging.getLogger(__name__)


class _StagedFiles:
    """Deletes the staged temp files exactly once, whoever gets there first."""

    def __init__(self, files: Iterable[SubmissionFile]) -> None:
        self._paths = [f.path for f in files]
        self.claimed = False
        self._done = False

    def discard(self) -> None:
        if self._done:
            return
        self._done = True
        for path in self._paths:
            remove_quietly(path)


class SubmissionService:
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

    async def submit(
        self, folder_key: str, files: Dict[str, SubmissionFile]
    ) -> SubmissionResult:
        """
        Resolve the user's folder and upload every document into it concurrently.
        All-or-nothing reporting: one failed upload fails the submission, files
        that did make it are left in place. Temp files are removed once the
        attempt settles; if the breaker gave up on a slow attempt, that happens
        when the attempt finally finishes in the background.
        Logs: folder id, field names and counts (no payloads).
        """
        staged = _StagedFiles(files.values())

        async def operation() -> SubmissionResult:
            staged.claimed = True
            try:
                return await self._upload_all(folder_key, files)
            finally:
                staged.discard()

        try:
            with timed(logger, "upload", files=len(files)):
                result = await self._breaker.fire(operation)
        except CallFailed as e:
            logger.error(
                "upload.failed reason=%s err=%s",
                e.reason,
                e,
                exc_info=e.cause,
            )
            raise AppError.of(ErrorMessage.STORAGE_UNAVAILABLE) from e
        finally:
            if not staged.claimed:
                staged.discard()

        logger.info(
            "upload.ok folder=%s files=%d fields=%s",
            result.folder_id,
            len(result.file_ids),
            ",".join(result.file_ids),
        )
        return result

    async def _upload_all(
        self, folder_key: str, files: Dict[str, SubmissionFile]
    ) -> SubmissionResult:
        folder_id = await self._resolver.resolve(self._parent_id, folder_key)

        fields = list(files)
        outcomes = await asyncio.gather(
            *(
                self._drive.create_file(
                    folder_id, files[name].filename, files[name].mime_type, files[name].path
                )
                for name in fields
            ),
            return_exceptions=True,
        )

        failed = [(n, o) for n, o in zip(fields, outcomes) if isinstance(o, BaseException)]
        if failed:
            for name, exc in failed:
                logger.error("upload.file.error field=%s err=%s", name, type(exc).__name__)
            raise failed[0][1]

        return SubmissionResult(folder_id=folder_id, file_ids=dict(zip(fields, outcomes)))
