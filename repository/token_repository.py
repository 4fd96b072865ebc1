# repository/token_repository.py
import json
import os
from typing import Any, Dict, Optional


class TokenRepository:
    """
    Single on-disk record holding the Drive OAuth token bundle.
    Read at startup, written by the provisioning command and on refresh.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.isfile(self._path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.exists():
            return None
        with open(self._path, "r", encoding="utf-8") as fh:
            return json.load(fh)

    def save(self, token_json: str) -> None:
        # Atomic replace.
        tmp = f"{self._path}.tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            fh.write(token_json)
        os.replace(tmp, self._path)
        os.chmod(self._path, 0o600)
