"""Job management module."""

from core.jobs.orchestrator import JobOrchestrator
from core.jobs.worker import EmailBatchWorker

__all__ = ["JobOrchestrator", "EmailBatchWorker"]
