from __future__ import annotations

import asyncio
import os
from typing import Dict, List, Optional, Set

from config.container import Container
from core.circuit_breaker import BreakerPolicy, BreakerRegistry
from service.folder_resolver import FolderResolver
from service.status_service import StatusService
from service.submission_service import SubmissionService


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDrive:
    """In-memory stand-in for DriveRepository with call recording."""

    def __init__(self) -> None:
        self._next_id = 0
        self.folders: List[Dict[str, str]] = []
        self.files: List[Dict[str, str]] = []
        self.calls: List[tuple] = []
        self.fail_on: Set[str] = set()
        self.fail_names: Set[str] = set()
        self.seen_paths: List[str] = []

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise RuntimeError(f"drive {op} failed")

    def add_folder(self, parent_id: str, name: str) -> str:
        folder_id = self._new_id("folder")
        self.folders.append({"id": folder_id, "name": name, "parent": parent_id})
        return folder_id

    def calls_to(self, op: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == op]

    async def find_folders(self, parent_id: str, name: str) -> List[Dict[str, str]]:
        self.calls.append(("find_folders", parent_id, name))
        await asyncio.sleep(0)
        self._maybe_fail("find_folders")
        return [
            {"id": f["id"], "name": f["name"]}
            for f in self.folders
            if f["parent"] == parent_id and f["name"] == name
        ]

    async def create_folder(self, parent_id: str, name: str) -> str:
        self.calls.append(("create_folder", parent_id, name))
        await asyncio.sleep(0)
        self._maybe_fail("create_folder")
        return self.add_folder(parent_id, name)

    async def create_file(
        self, parent_id: str, name: str, mime_type: str, path: str
    ) -> str:
        self.calls.append(("create_file", parent_id, name, mime_type))
        if os.path.exists(path):
            self.seen_paths.append(path)
        await asyncio.sleep(0)
        self._maybe_fail("create_file")
        if name in self.fail_names:
            raise RuntimeError(f"upload of {name} failed")
        file_id = self._new_id("file")
        self.files.append({"id": file_id, "name": name, "parent": parent_id})
        return file_id

    async def list_children(self, folder_id: str) -> List[Dict[str, str]]:
        self.calls.append(("list_children", folder_id))
        await asyncio.sleep(0)
        self._maybe_fail("list_children")
        return [
            {"id": f["id"], "name": f["name"]}
            for f in self.files + self.folders
            if f["parent"] == folder_id
        ]


def make_container(
    drive: FakeDrive,
    parent_id: str = "parent-root",
    policy: Optional[BreakerPolicy] = None,
) -> Container:
    breakers = BreakerRegistry(policy or BreakerPolicy(timeout_ms=2000))
    resolver = FolderResolver(drive)  # type: ignore[arg-type]
    return Container(
        breakers=breakers,
        drive=drive,  # type: ignore[arg-type]
        resolver=resolver,
        submissions=SubmissionService(
            resolver, drive, breakers.get("upload"), parent_id  # type: ignore[arg-type]
        ),
        statuses=StatusService(
            resolver, drive, breakers.get("status"), parent_id  # type: ignore[arg-type]
        ),
    )
