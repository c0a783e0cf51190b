from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.routes.auth import get_current_user
from app.features.reports.schemas.report_settings import ReportSettingsResponse, ReportSettingsUpdate
from app.features.reports.services.report_settings import get_report_settings, save_report_settings
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/report-settings", tags=["Report Settings"])


def _serialize(report_settings) -> dict:
    return ReportSettingsResponse.model_validate(report_settings).model_dump(by_alias=True)


@router.get("", response_model=dict, status_code=status.HTTP_200_OK)
async def read_report_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Branding used for the caller's PDF reports; empty when never saved."""
    report_settings = await get_report_settings(db, current_user.id)
    if report_settings is None:
        return api_response(data={}, message="No report settings saved yet")

    return api_response(data=_serialize(report_settings), message="Report settings retrieved successfully")


@router.post("", response_model=dict, status_code=status.HTTP_200_OK)
async def update_report_settings(
    request: ReportSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report_settings = await save_report_settings(db, current_user.id, request)
    return api_response(data=_serialize(report_settings), message="Report settings saved successfully")
