"""Email processing endpoints."""

from flask import Blueprint, request, jsonify

import config
from api.middleware.exceptions import ValidationError
from core.jobs.orchestrator import JobOrchestrator

emails_bp = Blueprint("emails", __name__)


@emails_bp.route("/process", methods=["POST"])
def process_emails():
    """
    Start a processing job for a batch of fetched messages.

    Body: {"emails": [...], "query": str, "date_range": str, "email_type": str}
    Returns 202 with the created job; poll /api/jobs/<id> for progress.
    """
    data = request.get_json(silent=True) or {}
    emails = data.get("emails")

    if not isinstance(emails, list) or not emails:
        raise ValidationError("'emails' must be a non-empty list", {"field": "emails"})
    if len(emails) > config.MAX_EMAILS_PER_JOB:
        raise ValidationError(
            f"At most {config.MAX_EMAILS_PER_JOB} emails per job",
            {"field": "emails", "count": len(emails)},
        )
    if not all(isinstance(e, dict) for e in emails):
        raise ValidationError("Every email must be a message object", {"field": "emails"})

    job = JobOrchestrator().start_job(
        emails,
        query=data.get("query", ""),
        date_range=data.get("date_range"),
        email_type=data.get("email_type"),
        background=data.get("background", True),
    )
    return jsonify({"job": job.to_dict()}), 202
