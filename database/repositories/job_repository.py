"""Job repository for database operations."""

from datetime import datetime
from typing import Optional, List
from uuid import uuid4

from database.connection import get_session
from models.job import ProcessingJob


class JobRepository:
    """Repository for ProcessingJob CRUD operations."""

    def create_job(
        self,
        query: str = "",
        total_emails: int = 0,
        date_range: Optional[str] = None,
        email_type: Optional[str] = None,
        status: str = ProcessingJob.STATUS_PENDING,
    ) -> ProcessingJob:
        """Create a new job."""
        session = get_session()
        try:
            job = ProcessingJob(
                id=str(uuid4()),
                query=query,
                date_range=date_range,
                email_type=email_type,
                status=status,
                total_emails=total_emails,
                processed_emails=0,
                successful_emails=0,
                failed_emails=0,
                created_at=datetime.utcnow(),
            )
            session.add(job)
            session.commit()
            session.refresh(job)
            return job
        except Exception:
            session.rollback()
            raise

    def get_job(self, job_id: str) -> Optional[ProcessingJob]:
        """Get a job by ID."""
        session = get_session()
        return session.query(ProcessingJob).filter(ProcessingJob.id == job_id).first()

    def list_jobs(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ProcessingJob]:
        """List jobs with optional filtering."""
        session = get_session()
        query = session.query(ProcessingJob)

        if status:
            query = query.filter(ProcessingJob.status == status)

        query = query.order_by(ProcessingJob.created_at.desc())
        return query.offset(offset).limit(limit).all()

    def update_job(self, job_id: str, **kwargs) -> Optional[ProcessingJob]:
        """Update job fields."""
        session = get_session()
        try:
            job = session.query(ProcessingJob).filter(ProcessingJob.id == job_id).first()
            if not job:
                return None

            for key, value in kwargs.items():
                if hasattr(job, key):
                    setattr(job, key, value)

            session.commit()
            session.refresh(job)
            return job
        except Exception:
            session.rollback()
            raise

    def update_status(
        self,
        job_id: str,
        status: str,
        error_message: Optional[str] = None,
    ) -> Optional[ProcessingJob]:
        """Update job status with timestamp."""
        updates = {"status": status}

        if status in (ProcessingJob.STATUS_COMPLETED, ProcessingJob.STATUS_FAILED,
                      ProcessingJob.STATUS_CANCELLED):
            updates["completed_at"] = datetime.utcnow()
        if error_message:
            updates["error_message"] = error_message

        return self.update_job(job_id, **updates)

    def update_progress(
        self,
        job_id: str,
        processed: int,
        successful: int,
        failed: int,
    ) -> Optional[ProcessingJob]:
        """Store the job's progress counters."""
        return self.update_job(
            job_id,
            processed_emails=processed,
            successful_emails=successful,
            failed_emails=failed,
        )
