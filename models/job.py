"""ProcessingJob model - a batch of emails being processed."""

from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, DateTime
from models import Base


class ProcessingJob(Base):
    """A batch of emails run through the extraction rules."""

    __tablename__ = "processing_jobs"

    id = Column(String(36), primary_key=True)
    query = Column(Text, nullable=False, default="")
    date_range = Column(String(50))
    email_type = Column(String(50))
    status = Column(String(20), nullable=False, default="pending")
    total_emails = Column(Integer, default=0)
    processed_emails = Column(Integer, default=0)
    successful_emails = Column(Integer, default=0)
    failed_emails = Column(Integer, default=0)
    error_message = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime)

    # Valid statuses
    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_CANCELLED = "cancelled"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "query": self.query,
            "date_range": self.date_range,
            "email_type": self.email_type,
            "status": self.status,
            "total_emails": self.total_emails,
            "processed_emails": self.processed_emails,
            "successful_emails": self.successful_emails,
            "failed_emails": self.failed_emails,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
