import enum

from sqlalchemy import Column, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class ScanStatus(enum.Enum):
    """Scan status state machine: pending -> completed | failed"""
    pending = "pending"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = frozenset({ScanStatus.completed, ScanStatus.failed})


class Scan(BaseModel):
    """
    One accessibility audit request.

    Written exactly twice: inserted as `pending` when the request is accepted,
    then moved to a terminal status by the background pipeline that owns it.
    """

    __tablename__ = "scans"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Bare domain, full URL or a reserved test token, exactly as submitted
    url = Column(Text, nullable=False)

    status = Column(Enum(ScanStatus), default=ScanStatus.pending, nullable=False, index=True)

    # /reports/<filename>; only set on completed scans
    report_url = Column(String(512), nullable=True)

    user = relationship("User", back_populates="scans")

    __table_args__ = (
        Index("idx_scans_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Scan(id={self.id}, url={self.url}, status={self.status})>"
