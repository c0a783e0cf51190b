"""
Tests for the Scan row lifecycle: pending on create, exactly one terminal update.
"""

import asyncio

import pytest

from app.features.scan.models.scan import ScanStatus
from app.features.scan.services.scan.scan import create_scan, finalize_scan, get_scan, list_user_scans


@pytest.mark.asyncio
async def test_create_scan_is_pending(database, test_user):
    async with database.sessionmaker() as db:
        scan = await create_scan(db, test_user.id, "example.com")

    assert scan.status is ScanStatus.pending
    assert scan.report_url is None
    assert scan.created_at is not None
    assert scan.url == "example.com"


@pytest.mark.asyncio
async def test_finalize_completed_sets_report_url(database, test_user):
    async with database.sessionmaker() as db:
        scan = await create_scan(db, test_user.id, "test")
        assert await finalize_scan(db, scan.id, ScanStatus.completed, "/reports/scan_1_abcdef12.pdf")

    async with database.sessionmaker() as db:
        stored = await get_scan(db, scan.id)
    assert stored.status is ScanStatus.completed
    assert stored.report_url == "/reports/scan_1_abcdef12.pdf"


@pytest.mark.asyncio
async def test_failed_scan_never_has_report_url(database, test_user):
    async with database.sessionmaker() as db:
        scan = await create_scan(db, test_user.id, "test")
        assert await finalize_scan(db, scan.id, ScanStatus.failed, "/reports/ignored.pdf")

    async with database.sessionmaker() as db:
        stored = await get_scan(db, scan.id)
    assert stored.status is ScanStatus.failed
    assert stored.report_url is None


@pytest.mark.asyncio
async def test_terminal_scan_is_not_updated_again(database, test_user):
    async with database.sessionmaker() as db:
        scan = await create_scan(db, test_user.id, "test")
        assert await finalize_scan(db, scan.id, ScanStatus.failed)
        assert not await finalize_scan(db, scan.id, ScanStatus.completed, "/reports/late.pdf")

    async with database.sessionmaker() as db:
        stored = await get_scan(db, scan.id)
    assert stored.status is ScanStatus.failed
    assert stored.report_url is None


@pytest.mark.asyncio
async def test_invalid_transitions_are_rejected(database, test_user):
    async with database.sessionmaker() as db:
        scan = await create_scan(db, test_user.id, "test")

        with pytest.raises(ValueError):
            await finalize_scan(db, scan.id, ScanStatus.pending)
        with pytest.raises(ValueError):
            await finalize_scan(db, scan.id, ScanStatus.completed)


@pytest.mark.asyncio
async def test_list_user_scans_newest_first(database, test_user):
    async with database.sessionmaker() as db:
        first = await create_scan(db, test_user.id, "first.example")
        await asyncio.sleep(0.01)
        second = await create_scan(db, test_user.id, "second.example")
        await create_scan(db, "someone-else", "other.example")

        scans = await list_user_scans(db, test_user.id)

    assert [s.id for s in scans] == [second.id, first.id]
