from __future__ import annotations

import asyncio

import pytest

from service.folder_resolver import FolderResolver


@pytest.mark.asyncio
async def test_sequential_resolves_reuse_one_folder(drive):
    resolver = FolderResolver(drive)

    first = await resolver.resolve("parent-root", "Ruiz_Ana_aruiz")
    second = await resolver.resolve("parent-root", "Ruiz_Ana_aruiz")

    assert first == second
    assert drive.calls_to("create_folder") == [
        ("create_folder", "parent-root", "Ruiz_Ana_aruiz")
    ]


@pytest.mark.asyncio
async def test_existing_folder_is_returned_without_create(drive):
    existing = drive.add_folder("parent-root", "Ruiz_Ana_aruiz")
    resolver = FolderResolver(drive)

    assert await resolver.resolve("parent-root", "Ruiz_Ana_aruiz") == existing
    assert drive.calls_to("create_folder") == []


@pytest.mark.asyncio
async def test_duplicate_folders_resolve_to_first_in_store_order(drive):
    first = drive.add_folder("parent-root", "Ruiz_Ana_aruiz")
    drive.add_folder("parent-root", "Ruiz_Ana_aruiz")
    resolver = FolderResolver(drive)

    assert await resolver.resolve("parent-root", "Ruiz_Ana_aruiz") == first


@pytest.mark.asyncio
async def test_same_name_under_other_parent_is_not_a_match(drive):
    drive.add_folder("other-parent", "Ruiz_Ana_aruiz")
    resolver = FolderResolver(drive)

    folder_id = await resolver.resolve("parent-root", "Ruiz_Ana_aruiz")

    assert len(drive.calls_to("create_folder")) == 1
    assert drive.folders[-1] == {
        "id": folder_id,
        "name": "Ruiz_Ana_aruiz",
        "parent": "parent-root",
    }


@pytest.mark.asyncio
async def test_concurrent_first_time_resolves_create_a_single_folder(drive):
    resolver = FolderResolver(drive)

    ids = await asyncio.gather(
        *(resolver.resolve("parent-root", "Ruiz_Ana_aruiz") for _ in range(5))
    )

    assert len(set(ids)) == 1
    assert len(drive.calls_to("create_folder")) == 1
    # Lock bookkeeping is released once nobody waits on the key.
    assert resolver._locks == {}


@pytest.mark.asyncio
async def test_different_keys_do_not_block_each_other(drive):
    resolver = FolderResolver(drive)

    a, b = await asyncio.gather(
        resolver.resolve("parent-root", "A_A_a"),
        resolver.resolve("parent-root", "B_B_b"),
    )

    assert a != b
    assert len(drive.calls_to("create_folder")) == 2


@pytest.mark.asyncio
async def test_find_never_creates(drive):
    resolver = FolderResolver(drive)

    assert await resolver.find("parent-root", "Nobody_No_one") is None
    assert drive.calls_to("create_folder") == []


@pytest.mark.asyncio
async def test_remote_errors_propagate_unchanged(drive):
    drive.fail_on.add("create_folder")
    resolver = FolderResolver(drive)

    with pytest.raises(RuntimeError, match="create_folder"):
        await resolver.resolve("parent-root", "Ruiz_Ana_aruiz")
    assert resolver._locks == {}
