from sqlalchemy import JSON, Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class ReportSettings(BaseModel):
    """Per-user branding applied to generated PDF reports. At most one row per user."""

    __tablename__ = "report_settings"

    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    company_name = Column(String(255), nullable=True)
    # data:image/...;base64,... URI
    company_logo = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    website_url = Column(String(2048), nullable=True)

    # {"primary": "#2563eb", "secondary": ..., "accent": ..., "textPrimary": ..., ...}
    colors = Column(JSON, nullable=True)

    user = relationship("User", back_populates="report_settings")

    def __repr__(self):
        return f"<ReportSettings(user_id={self.user_id}, company_name={self.company_name})>"
