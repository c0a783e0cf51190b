from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings

PACKAGE_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "AccessScan"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Database ────────────────────────────────
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = True  # Alembic owns the schema outside local/test runs

    # ── JWT / Auth ──────────────────────────────
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    ALGORITHM: str = "HS256"

    # ── Reports ─────────────────────────────────
    REPORTS_DIR: str = "reports"
    FIXTURES_DIR: str = str(PACKAGE_ROOT / "features" / "scan" / "fixtures")

    # ── Fetcher ─────────────────────────────────
    FETCH_TIMEOUT_SECONDS: float = 15.0
    FETCH_RETRY_DELAY_SECONDS: float = 1.0
    FETCH_MAX_REDIRECTS: int = 5

    # ── Rule evaluation (axe-core) ──────────────
    AXE_RUN_TAGS: List[str] = ["wcag2a", "wcag2aa", "wcag21aa", "best-practice"]
    EVALUATION_TIMEOUT_SECONDS: int = 60
    LOAD_SUBRESOURCES: bool = True

    # ── Screenshots ─────────────────────────────
    SCREENSHOT_ENABLED: bool = True
    SCREENSHOT_TIMEOUT_SECONDS: int = 30
    SCREENSHOT_WAIT_SECONDS: float = 10.0

    CHROMEDRIVER_PATH: Optional[str] = None

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
