from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.reports.models.report_settings import ReportSettings
from app.features.reports.schemas.report_settings import ReportSettingsUpdate
from app.platform.logger import get_logger

logger = get_logger(__name__)


async def get_report_settings(db: AsyncSession, user_id: str) -> Optional[ReportSettings]:
    result = await db.execute(select(ReportSettings).where(ReportSettings.user_id == user_id))
    return result.scalar_one_or_none()


async def save_report_settings(
    db: AsyncSession, user_id: str, data: ReportSettingsUpdate
) -> ReportSettings:
    """
    Insert the user's branding on first save, update it in place afterwards.
    Only fields present in the request body are written.
    """
    report_settings = await get_report_settings(db, user_id)
    created = report_settings is None
    if created:
        report_settings = ReportSettings(user_id=user_id)
        db.add(report_settings)

    for field, value in data.model_dump(exclude_unset=True, exclude={"colors"}).items():
        setattr(report_settings, field, value)

    if "colors" in data.model_fields_set:
        report_settings.colors = data.colors.model_dump(by_alias=True) if data.colors else None

    await db.commit()
    await db.refresh(report_settings)

    logger.info(f"{'Created' if created else 'Updated'} report settings for user {user_id}")
    return report_settings
