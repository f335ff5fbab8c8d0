"""
Import job model

Rows are written by the external importer; the API only reads them.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from knowledge_base.database import Base

IMPORT_JOB_STATUSES = ("pending", "processing", "completed", "failed")


def empty_stats() -> dict:
    return {"total": 0, "success": 0, "failed": 0}


class ImportJob(Base):
    """Import job status record"""
    __tablename__ = "import_jobs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, processing, completed, failed
    file_name = Column(String(255), nullable=False)
    stats = Column(JSON, nullable=False, default=empty_stats)
    errors = Column(JSON)  # [{"row": 3, "message": "..."}]
    started_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    completed_at = Column(DateTime(timezone=True))

    # Relationships
    creator = relationship("User")
