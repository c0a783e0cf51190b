from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.routes.auth import get_current_user
from app.features.scan.schemas.scan import ScanCreateRequest, ScanResponse
from app.features.scan.services.orchestration.orchestrator import ScanOrchestrator, get_orchestrator
from app.features.scan.services.scan.scan import list_user_scans
from app.platform.db.session import get_db
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/scans", tags=["Scans"])


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Start an accessibility scan",
    description=(
        "Stores a pending scan and starts the scan pipeline in the background. "
        "Poll GET /scans for the terminal status and the report URL."
    ),
)
async def start_scan(
    request: ScanCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
):
    scan = await orchestrator.submit(db, current_user.id, request.url)
    logger.info(f"User {current_user.id} started scan {scan.id} for {scan.url}")

    return api_response(
        data=ScanResponse.model_validate(scan),
        message="Scan started",
        status_code=status.HTTP_201_CREATED,
    )


@router.get(
    "",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="List the caller's scans, newest first",
)
async def get_scans(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    scans = await list_user_scans(db, current_user.id)
    return api_response(
        data=[ScanResponse.model_validate(scan) for scan in scans],
        message="Scans retrieved successfully",
    )
