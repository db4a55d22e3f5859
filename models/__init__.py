"""SQLAlchemy models for Mailsieve."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

from models.job import ProcessingJob
from models.rule import ProcessingRule
from models.result import EmailResult

__all__ = ["Base", "ProcessingJob", "ProcessingRule", "EmailResult"]
