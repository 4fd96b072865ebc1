# service/folder_resolver.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Tuple
from repository.drive_repository import DriveRepository

logger = logging.getLogger(__name__)

FolderKey = Tuple[str, str]


class FolderResolver:
    """
    Find-or-create of one named folder under a parent.

    Lookup and create are two separate remote calls, so two first-time
    resolutions for the same name could both see "not found". Resolutions of
    the same (parent, name) are therefore serialized per key inside this
    process. Separate worker processes can still race; when duplicates exist
    every lookup keeps returning the first folder in store order.
    """

    def __init__(self, drive: DriveRepository) -> None:
        self._drive = drive
        # key -> [lock, holders]; entries are dropped once nobody waits on them
        self._locks: Dict[FolderKey, List] = {}

    @asynccontextmanager
    async def _key_lock(self, key: FolderKey) -> AsyncIterator[None]:
        entry = self._locks.setdefault(key, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                self._locks.pop(key, None)

    async def find(self, parent_id: str, folder_name: str) -> Optional[str]:
        matches = await self._drive.find_folders(parent_id, folder_name)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "folder.duplicates name=%s count=%d using=%s",
                folder_name,
                len(matches),
                matches[0]["id"],
            )
        return matches[0]["id"]

    async def resolve(self, parent_id: str, folder_name: str) -> str:
        async with self._key_lock((parent_id, folder_name)):
            folder_id = await self.find(parent_id, folder_name)
            if folder_id is not None:
                logger.debug("folder.found id=%s", folder_id)
                return folder_id
            folder_id = await self._drive.create_folder(parent_id, folder_name)
            logger.info("folder.created id=%s", folder_id)
            return folder_id
