# repository/drive_repository.py
import asyncio
import logging
from typing import Dict, List, Optional
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import MediaFileUpload
from util.constants import DRIVE_FOLDER_MIME

logger = logging.getLogger(__name__)

DriveFile = Dict[str, str]


def quote_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveRepository:
    """
    Google Drive folders and files, addressed by query.

    googleapiclient is blocking and its httplib2 transport is not thread-safe,
    so every call builds its own service object and runs in a worker thread.
    The credentials object is shared read-only; google-auth refreshes it.
    """

    def __init__(self, credentials: Credentials) -> None:
        self._credentials = credentials

    def _service(self):
        return build("drive", "v3", credentials=self._credentials, cache_discovery=False)

    # ---------------- Queries ----------------

    async def find_folders(self, parent_id: str, name: str) -> List[DriveFile]:
        q = (
            f"mimeType='{DRIVE_FOLDER_MIME}' and name='{quote_literal(name)}' "
            f"and '{quote_literal(parent_id)}' in parents and trashed = false"
        )
        return await asyncio.to_thread(self._list, q)

    async def list_children(self, folder_id: str) -> List[DriveFile]:
        q = f"'{quote_literal(folder_id)}' in parents and trashed = false"
        return await asyncio.to_thread(self._list, q)

    def _list(self, q: str) -> List[DriveFile]:
        files = self._service().files()
        out: List[DriveFile] = []
        page_token: Optional[str] = None
        while True:
            res = files.list(
                q=q,
                spaces="drive",
                fields="nextPageToken, files(id, name)",
                pageToken=page_token,
            ).execute()
            out.extend(res.get("files", []))
            page_token = res.get("nextPageToken")
            if not page_token:
                return out

    # ---------------- Writes ----------------

    async def create_folder(self, parent_id: str, name: str) -> str:
        body = {"name": name, "mimeType": DRIVE_FOLDER_MIME, "parents": [parent_id]}
        res = await asyncio.to_thread(self._create, body, None)
        logger.info("drive.folder.created id=%s", res["id"])
        return res["id"]

    async def create_file(
        self, parent_id: str, name: str, mime_type: str, path: str
    ) -> str:
        body = {"name": name, "parents": [parent_id]}
        res = await asyncio.to_thread(self._create, body, (path, mime_type))
        return res["id"]

    def _create(self, body: Dict[str, object], media: Optional[tuple]) -> DriveFile:
        upload = None
        if media is not None:
            path, mime_type = media
            upload = MediaFileUpload(path, mimetype=mime_type or None, resumable=False)
        return (
            self._service()
            .files()
            .create(body=body, media_body=upload, fields="id")
            .execute()
        )
