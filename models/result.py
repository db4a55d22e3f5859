"""EmailResult model - stores the record extracted from one email."""

import json
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from models import Base


class EmailResult(Base):
    """Outcome of running one email through a matching rule."""

    __tablename__ = "email_results"

    id = Column(String(36), primary_key=True)
    job_id = Column(String(36), ForeignKey("processing_jobs.id", ondelete="CASCADE"))
    rule_id = Column(String(36), ForeignKey("processing_rules.id", ondelete="SET NULL"))
    email_id = Column(String(255), nullable=False)
    subject = Column(Text)
    sender = Column(Text)
    extracted_data_json = Column(Text, nullable=False, default="{}")
    document_path = Column(Text)
    status = Column(String(20), nullable=False, default="success")
    error_message = Column(Text)
    processed_at = Column(DateTime, default=datetime.utcnow)

    STATUS_SUCCESS = "success"
    STATUS_FAILED = "failed"

    @property
    def extracted_data(self) -> dict:
        """Parse extracted data JSON."""
        try:
            return json.loads(self.extracted_data_json) if self.extracted_data_json else {}
        except json.JSONDecodeError:
            return {}

    @extracted_data.setter
    def extracted_data(self, value: dict):
        """Serialize extracted data to JSON."""
        self.extracted_data_json = json.dumps(value)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "job_id": self.job_id,
            "rule_id": self.rule_id,
            "email_id": self.email_id,
            "subject": self.subject,
            "sender": self.sender,
            "extracted_data": self.extracted_data,
            "document_path": self.document_path,
            "status": self.status,
            "error_message": self.error_message,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
        }
