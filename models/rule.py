"""ProcessingRule model - a stored extraction rule."""

import json
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, DateTime
from models import Base

from core.extraction.rules import Rule


class ProcessingRule(Base):
    """An extraction rule matched against incoming emails."""

    __tablename__ = "processing_rules"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    pattern = Column(Text, nullable=False)
    fields_json = Column(Text, nullable=False, default="[]")
    output_template = Column(Text, nullable=False, default="")
    required_fields_json = Column(Text, default="[]")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def fields(self) -> list:
        """Parse fields JSON."""
        try:
            return json.loads(self.fields_json) if self.fields_json else []
        except json.JSONDecodeError:
            return []

    @fields.setter
    def fields(self, value: list):
        """Serialize fields to JSON."""
        self.fields_json = json.dumps(value)

    @property
    def required_fields(self) -> list:
        """Parse required fields JSON."""
        try:
            return json.loads(self.required_fields_json) if self.required_fields_json else []
        except json.JSONDecodeError:
            return []

    @required_fields.setter
    def required_fields(self, value: list):
        """Serialize required fields to JSON."""
        self.required_fields_json = json.dumps(value or [])

    def to_rule(self) -> Rule:
        """Decode into the extraction engine's Rule (raises RuleFormatError)."""
        return Rule.from_dict({
            "id": self.id,
            "name": self.name,
            "pattern": self.pattern,
            "fields": self.fields,
            "output_template": self.output_template,
            "required_fields": self.required_fields,
            "is_active": self.is_active,
        })

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "pattern": self.pattern,
            "fields": self.fields,
            "output_template": self.output_template,
            "required_fields": self.required_fields,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
