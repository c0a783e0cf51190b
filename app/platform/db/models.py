"""
Model registry.

Imported by Database.create_all and alembic so that Base.metadata knows every table.
"""
from app.features.auth.models.user import User
from app.features.reports.models.report_settings import ReportSettings
from app.features.scan.models.scan import Scan

__all__ = ["User", "Scan", "ReportSettings"]
