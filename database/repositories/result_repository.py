"""Result repository for database operations."""

import json
from typing import Optional, List, Dict, Any
from uuid import uuid4
from datetime import datetime

from core.output.csv_exporter import parse_amount, pick_amount
from database.connection import get_session
from models.result import EmailResult


class ResultRepository:
    """Repository for EmailResult CRUD operations."""

    def create_result(
        self,
        email_id: str,
        extracted_data: dict,
        job_id: Optional[str] = None,
        rule_id: Optional[str] = None,
        subject: Optional[str] = None,
        sender: Optional[str] = None,
        document_path: Optional[str] = None,
        status: str = EmailResult.STATUS_SUCCESS,
        error_message: Optional[str] = None,
    ) -> EmailResult:
        """Create a new result."""
        session = get_session()
        try:
            result = EmailResult(
                id=str(uuid4()),
                job_id=job_id,
                rule_id=rule_id,
                email_id=email_id,
                subject=subject,
                sender=sender,
                extracted_data_json=json.dumps(extracted_data),
                document_path=document_path,
                status=status,
                error_message=error_message,
                processed_at=datetime.utcnow(),
            )
            session.add(result)
            session.commit()
            session.refresh(result)
            return result
        except Exception:
            session.rollback()
            raise

    def get_result(self, result_id: str) -> Optional[EmailResult]:
        """Get a result by ID."""
        session = get_session()
        return session.query(EmailResult).filter(EmailResult.id == result_id).first()

    def list_results(
        self,
        job_id: Optional[str] = None,
        limit: Optional[int] = 100,
        offset: int = 0,
    ) -> List[EmailResult]:
        """List results, newest first, optionally for one job."""
        session = get_session()
        query = session.query(EmailResult)

        if job_id:
            query = query.filter(EmailResult.job_id == job_id)

        query = query.order_by(EmailResult.processed_at.desc()).offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()

    def count_results(self, job_id: Optional[str] = None) -> int:
        """Count results."""
        session = get_session()
        query = session.query(EmailResult)
        if job_id:
            query = query.filter(EmailResult.job_id == job_id)
        return query.count()

    def get_processing_stats(self) -> Dict[str, Any]:
        """
        Aggregate stored results.

        Returns:
            Dict with total_processed, total_amount, uber_trips and
            uber_eats_orders
        """
        results = self.list_results(limit=None)

        total_amount = 0.0
        uber_trips = 0
        uber_eats_orders = 0

        for result in results:
            amount = parse_amount(pick_amount(result.extracted_data, ("amount", "total_amount")))
            if amount is not None:
                total_amount += amount

            subject = result.subject or ""
            if "Uber" in subject and "Eats" not in subject:
                uber_trips += 1
            elif "Uber Eats" in subject:
                uber_eats_orders += 1

        return {
            "total_processed": len(results),
            "total_amount": round(total_amount, 2),
            "uber_trips": uber_trips,
            "uber_eats_orders": uber_eats_orders,
        }
