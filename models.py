# models.py

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from database import Base

STATUS_PENDING = "pending"
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"

WEBHOOK_PENDING = "pending"
WEBHOOK_SUCCESS = "success"
WEBHOOK_FAILED = "failed"


def utcnow():
    return datetime.now(timezone.utc)


class Job(Base):
    """Job model for tracking tasks through pending -> running -> completed."""

    __tablename__ = "jobs"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused after a delete

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    task_name = Column("taskName", Text, nullable=False)
    payload = Column(Text, nullable=True)  # JSON-serialized
    priority = Column(Text, nullable=False)
    status = Column(String, default=STATUS_PENDING, server_default=STATUS_PENDING)  # pending, running, completed
    created_at = Column("createdAt", DateTime, default=utcnow, server_default=func.now())
    updated_at = Column("updatedAt", DateTime, default=utcnow, server_default=func.now())
    completed_at = Column("completedAt", DateTime, nullable=True)
    webhook_status = Column("webhookStatus", String, default=WEBHOOK_PENDING, server_default=WEBHOOK_PENDING)  # pending, success, failed
