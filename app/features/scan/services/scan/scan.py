import logging
from typing import List, Optional

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scan.models.scan import Scan, ScanStatus, TERMINAL_STATUSES

logger = logging.getLogger(__name__)


async def create_scan(db: AsyncSession, user_id: str, url: str) -> Scan:
    """Insert a new scan in `pending` state and return it with server defaults loaded."""
    scan = Scan(user_id=user_id, url=url, status=ScanStatus.pending)
    db.add(scan)
    await db.commit()
    await db.refresh(scan)
    logger.info(f"Created scan {scan.id} for {url} (user_id={user_id})")
    return scan


async def list_user_scans(db: AsyncSession, user_id: str) -> List[Scan]:
    query = (
        select(Scan)
        .where(Scan.user_id == user_id)
        .order_by(desc(Scan.created_at), desc(Scan.id))
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_scan(db: AsyncSession, scan_id: str) -> Optional[Scan]:
    result = await db.execute(select(Scan).where(Scan.id == scan_id))
    return result.scalar_one_or_none()


async def finalize_scan(
    db: AsyncSession,
    scan_id: str,
    status: ScanStatus,
    report_url: Optional[str] = None,
) -> bool:
    """
    Move a pending scan to a terminal status.

    The update is conditional on the row still being pending, so a terminal
    scan is never touched again. Returns False when nothing was updated.
    """
    if status not in TERMINAL_STATUSES:
        raise ValueError(f"{status} is not a terminal scan status")
    if status is ScanStatus.failed:
        report_url = None
    elif not report_url:
        raise ValueError("A completed scan needs a report_url")

    result = await db.execute(
        update(Scan)
        .where(Scan.id == scan_id, Scan.status == ScanStatus.pending)
        .values(status=status, report_url=report_url)
    )
    await db.commit()

    if result.rowcount == 0:
        logger.warning(f"Scan {scan_id} was not pending; refusing transition to {status.value}")
        return False

    logger.info(f"Scan {scan_id} marked as {status.value}")
    return True
