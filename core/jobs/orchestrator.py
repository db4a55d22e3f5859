"""Job orchestrator for email processing jobs."""

import threading
from typing import Any, Dict, List, Optional

from core.extraction.engine import ExtractionEngine
from core.jobs.worker import EmailBatchWorker
from core.output.document_renderer import DocumentRenderer
from database.connection import remove_session
from database.repositories.job_repository import JobRepository
from models.job import ProcessingJob


class JobOrchestrator:
    """
    Starts batch workers and keeps their logs.

    Singleton: routes call ``JobOrchestrator()`` and always get the same
    instance, so a stop request reaches the worker that is running.
    The engine and renderer hold no per-job state and are shared by all
    workers.
    """

    MAX_LOG_ENTRIES = 1000

    _instance: Optional["JobOrchestrator"] = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.job_repo = JobRepository()
        self.engine = ExtractionEngine()
        self.renderer = DocumentRenderer()

        self._workers: Dict[str, EmailBatchWorker] = {}
        self._logs: Dict[str, List[Dict[str, Any]]] = {}
        self._logs_lock = threading.Lock()

        self._initialized = True

    def start_job(
        self,
        emails: List[Dict[str, Any]],
        query: str = "",
        date_range: Optional[str] = None,
        email_type: Optional[str] = None,
        background: bool = True,
    ) -> ProcessingJob:
        """
        Create a job for a batch of messages and process it.

        Args:
            emails: Gmail-API-shaped messages
            query: Search query the messages came from
            date_range: Date range label of the search
            email_type: Email type label of the search
            background: Run in a daemon thread; False runs inline and
                returns once the job has finished

        Returns:
            The created job
        """
        job = self.job_repo.create_job(
            query=query,
            total_emails=len(emails),
            date_range=date_range,
            email_type=email_type,
            status=ProcessingJob.STATUS_PROCESSING,
        )
        with self._logs_lock:
            self._logs[job.id] = []

        worker = EmailBatchWorker(
            job_id=job.id,
            emails=emails,
            on_log=self._append_log,
            engine=self.engine,
            renderer=self.renderer,
        )
        self._workers[job.id] = worker

        if background:
            threading.Thread(target=self._run_in_thread, args=(worker,), daemon=True).start()
        else:
            self._run(worker)

        return job

    def _run(self, worker: EmailBatchWorker):
        try:
            worker.run()
        finally:
            self._workers.pop(worker.job_id, None)

    def _run_in_thread(self, worker: EmailBatchWorker):
        try:
            self._run(worker)
        finally:
            # Each thread owns its scoped session
            remove_session()

    def stop_job(self, job_id: str) -> bool:
        """Ask a running job to stop after its current email. False if not running."""
        worker = self._workers.get(job_id)
        if not worker:
            return False
        worker.stop()
        return True

    def get_job_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Job row plus whether a worker is still attached."""
        job = self.job_repo.get_job(job_id)
        if not job:
            return None

        status = job.to_dict()
        status["is_running"] = job_id in self._workers
        return status

    def get_running_jobs(self) -> List[str]:
        return list(self._workers)

    def _append_log(self, job_id: str, entry: Dict[str, Any]):
        with self._logs_lock:
            logs = self._logs.setdefault(job_id, [])
            logs.append(entry)
            if len(logs) > self.MAX_LOG_ENTRIES:
                del logs[: len(logs) - self.MAX_LOG_ENTRIES]

    def get_job_logs(
        self,
        job_id: str,
        since_index: int = 0,
        level: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Log entries for a job, for polling.

        Args:
            job_id: The job ID
            since_index: Only return entries after this index
            level: Only return entries of this level (info, success,
                warning, error, debug)

        Returns:
            Dict with ``logs``, ``total_count`` and ``current_index``
        """
        with self._logs_lock:
            logs = list(self._logs.get(job_id, []))

        new_logs = logs[since_index:]
        if level:
            new_logs = [entry for entry in new_logs if entry.get("level") == level]

        return {
            "logs": new_logs,
            "total_count": len(logs),
            "current_index": len(logs),
        }
