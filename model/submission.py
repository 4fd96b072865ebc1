# model/submission.py
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class SubmissionFile:
    field_name: str
    filename: str
    mime_type: str
    path: str  # staged temp file, removed once the submission settles


@dataclass
class SubmissionResult:
    folder_id: str
    file_ids: Dict[str, str] = field(default_factory=dict)


@dataclass
class FolderStatus:
    found: bool
    files: List[str] = field(default_factory=list)
