"""Job worker for processing a batch of emails."""

import time
from typing import Dict, Optional, Callable, Any, List
from datetime import datetime

from database.repositories.job_repository import JobRepository
from database.repositories.rule_repository import RuleRepository
from database.repositories.result_repository import ResultRepository
from core.extraction.engine import ExtractionEngine, find_matching_rule, validate_required_fields
from core.extraction.message import extract_headers
from core.output.document_renderer import DocumentRenderer
from models.job import ProcessingJob
from models.result import EmailResult
from utils.logger import log_email_processed, log_job_complete, log_job_start, logger


class EmailBatchWorker:
    """
    Worker that runs a batch of emails through the extraction rules.

    Emails are processed sequentially. Job counters are written after
    every email; a failure on one email never stops the batch.
    """

    def __init__(
        self,
        job_id: str,
        emails: List[Dict[str, Any]],
        on_email_complete: Optional[Callable] = None,
        on_log: Optional[Callable] = None,
        engine: Optional[ExtractionEngine] = None,
        renderer: Optional[DocumentRenderer] = None,
    ):
        self.job_id = job_id
        self.emails = emails
        self.on_email_complete = on_email_complete
        self.on_log = on_log

        self.job_repo = JobRepository()
        self.rule_repo = RuleRepository()
        self.result_repo = ResultRepository()
        self.engine = engine or ExtractionEngine()
        self.renderer = renderer or DocumentRenderer()

        self.processed = 0
        self.successful = 0
        self.failed = 0

        self._running = False
        self._stop_requested = False
        self._logs: List[Dict[str, Any]] = []

    def _emit_log(self, level: str, message: str, data: Optional[Dict] = None):
        """Emit a log entry with timestamp."""
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,  # info, success, warning, error, debug
            "message": message,
            "data": data or {},
        }
        self._logs.append(log_entry)

        if self.on_log:
            self.on_log(self.job_id, log_entry)

    def get_logs(self) -> List[Dict[str, Any]]:
        """Get all logged entries."""
        return self._logs.copy()

    def run(self):
        """
        Main worker loop.

        Marks the job completed when every email has been handled,
        cancelled when stopped early, and failed if the batch itself
        cannot run (for example, a stored rule that does not decode).
        """
        self._running = True
        self._stop_requested = False
        start_time = time.time()
        total = len(self.emails)

        log_job_start(self.job_id, total)

        try:
            rules = self.rule_repo.load_rules()
            self._emit_log("info", f"Starting job with {total} emails to process", {
                "total_emails": total,
                "rules_count": len(rules),
            })

            for index, email in enumerate(self.emails, start=1):
                if self._stop_requested:
                    break

                self._emit_log("debug", f"[{index}/{total}] Processing {email.get('id', 'unknown')}")
                success = self._process_email(email, rules)

                self.processed += 1
                if success:
                    self.successful += 1
                else:
                    self.failed += 1

                self.job_repo.update_progress(
                    self.job_id, self.processed, self.successful, self.failed,
                )

                if self.on_email_complete:
                    self.on_email_complete(self.job_id, email.get("id"), success)

            if self._stop_requested:
                self.job_repo.update_status(self.job_id, ProcessingJob.STATUS_CANCELLED)
                self._emit_log("warning", f"Job stopped after {self.processed} emails.")
            else:
                self.job_repo.update_status(self.job_id, ProcessingJob.STATUS_COMPLETED)
                self._emit_log("info", f"Job complete. Processed {self.processed} emails.")

        except Exception as e:
            logger.error(f"Background processing error for job {self.job_id}: {e}", exc_info=True)
            self._emit_log("error", f"Job failed: {e}")
            self.job_repo.update_status(self.job_id, ProcessingJob.STATUS_FAILED, error_message=str(e))

        finally:
            self._running = False
            log_job_complete(self.job_id, self.successful, self.failed, time.time() - start_time)

    def _process_email(self, email: Dict[str, Any], rules: list) -> bool:
        """Process one email. Returns True if a result was stored."""
        email_id = email.get("id", "unknown")

        try:
            headers = extract_headers(email)
            subject = headers.get("Subject", "")
            sender = headers.get("From", "")

            rule = find_matching_rule(rules, subject, sender)
            if not rule:
                log_email_processed(email_id, None, False, "no matching rule")
                self._emit_log("warning", f"No rule matches: {subject[:80]}", {"email_id": email_id})
                return False

            record = self.engine.assemble(rule, email)

            if not validate_required_fields(record, rule.required_fields):
                missing = [name for name in rule.required_fields
                           if not validate_required_fields(record, [name])]
                log_email_processed(email_id, rule.name, False, f"missing {', '.join(missing)}")
                self._emit_log("warning", f"Required fields missing: {', '.join(missing)}", {
                    "email_id": email_id,
                    "rule": rule.name,
                    "missing": missing,
                })
                return False

            document_path = self.renderer.render(record, rule, email)

            self.result_repo.create_result(
                job_id=self.job_id,
                rule_id=rule.id,
                email_id=email_id,
                subject=subject,
                sender=sender,
                extracted_data=record,
                document_path=document_path,
                status=EmailResult.STATUS_SUCCESS,
            )

            log_email_processed(email_id, rule.name, True)
            self._emit_log("success", f"Extracted {len(record)} fields with '{rule.name}'", {
                "email_id": email_id,
                "rule": rule.name,
                "document_path": document_path,
            })
            return True

        except Exception as e:
            logger.error(f"Failed to process email {email_id}: {e}", exc_info=True)
            self._emit_log("error", f"Exception: {e}", {"email_id": email_id})
            return False

    def stop(self):
        """Request worker to stop after the current email."""
        self._stop_requested = True

    def is_running(self) -> bool:
        """Check if worker is running."""
        return self._running
