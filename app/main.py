import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.features.reports.services.pdf_report import ReportRenderer
from app.features.scan.services.orchestration.orchestrator import ScanOrchestrator
from app.platform.config import settings
from app.platform.db.session import Database
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import LOG_FORMAT, get_logger

# Configure logging to show INFO level messages
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

logger = get_logger(__name__)

# Create reports directory if it doesn't exist
reports_dir = Path(settings.REPORTS_DIR)
reports_dir.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = Database(settings.DATABASE_URL, echo=False)
    if settings.AUTO_CREATE_TABLES:
        await db.create_all()

    app.state.db = db
    app.state.orchestrator = ScanOrchestrator(
        session_factory=db.sessionmaker,
        report_renderer=ReportRenderer(str(reports_dir)),
    )
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")

    try:
        yield
    finally:
        await app.state.orchestrator.shutdown()
        await db.dispose()
        logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title="AccessScan API",
    description="Web accessibility scanning with PDF compliance reports",
    version="1.0.0",
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "AccessScan API",
        "description": "Automated WCAG checks for any web page, delivered as a PDF report.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

# Generated PDF reports, addressed by Scan.report_url
app.mount("/reports", StaticFiles(directory=str(reports_dir)), name="reports")

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
