"""Database repositories."""

from database.repositories.job_repository import JobRepository
from database.repositories.result_repository import ResultRepository
from database.repositories.rule_repository import RuleRepository

__all__ = [
    "JobRepository",
    "ResultRepository",
    "RuleRepository",
]
