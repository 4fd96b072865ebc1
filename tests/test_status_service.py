from __future__ import annotations

import pytest

from fakes import make_container
from util.errors import AppError


@pytest.mark.asyncio
async def test_status_without_folder_reports_not_found_and_creates_nothing(drive):
    container = make_container(drive)

    status = await container.statuses.status("Nobody_No_one")

    assert status.found is False
    assert status.files == []
    assert drive.calls_to("create_folder") == []
    assert drive.calls_to("list_children") == []


@pytest.mark.asyncio
async def test_status_lists_children_in_store_order(drive):
    folder_id = drive.add_folder("parent-root", "Ruiz_Ana_aruiz")
    for name in ("zeta.pdf", "alpha.pdf", "mid.pdf"):
        drive.files.append({"id": name, "name": name, "parent": folder_id})
    drive.files.append({"id": "x", "name": "elsewhere.pdf", "parent": "other"})
    container = make_container(drive)

    status = await container.statuses.status("Ruiz_Ana_aruiz")

    assert status.found is True
    assert status.files == ["zeta.pdf", "alpha.pdf", "mid.pdf"]


@pytest.mark.asyncio
async def test_status_failure_is_unavailable(drive):
    drive.add_folder("parent-root", "Ruiz_Ana_aruiz")
    drive.fail_on.add("list_children")
    container = make_container(drive)

    with pytest.raises(AppError) as excinfo:
        await container.statuses.status("Ruiz_Ana_aruiz")

    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_status_and_upload_breakers_are_independent(drive):
    drive.fail_on.add("find_folders")
    container = make_container(drive)

    with pytest.raises(AppError):
        await container.statuses.status("Ruiz_Ana_aruiz")

    assert container.breakers.get("status").state.value == "open"
    assert container.breakers.get("upload").state.value == "closed"
