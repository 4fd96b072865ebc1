import os

# Settings validate at import time; give them a complete test environment first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("KEYCLOAK_SERVER_URL", "http://keycloak.test")
os.environ.setdefault("KEYCLOAK_REALM", "students")
os.environ.setdefault("DRIVE_PARENT_FOLDER_ID", "parent-root")

import pytest  # noqa: E402

from fakes import FakeDrive  # noqa: E402


@pytest.fixture
def drive() -> FakeDrive:
    return FakeDrive()


@pytest.fixture
def make_upload(tmp_path):
    def _make(name: str, content: bytes = b"%PDF-1.4 test") -> str:
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)

    return _make
