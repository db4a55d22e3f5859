"""Job status endpoints."""

from flask import Blueprint, request, jsonify

from api.middleware.exceptions import ConflictError, NotFoundError
from core.jobs.orchestrator import JobOrchestrator
from database.repositories.job_repository import JobRepository

jobs_bp = Blueprint("jobs", __name__)
job_repo = JobRepository()


@jobs_bp.route("", methods=["GET"])
def list_jobs():
    """List jobs, newest first."""
    status = request.args.get("status")
    limit = request.args.get("limit", 50, type=int)
    jobs = job_repo.list_jobs(status=status, limit=limit)
    return jsonify({
        "jobs": [j.to_dict() for j in jobs],
        "total": len(jobs),
        "running": JobOrchestrator().get_running_jobs(),
    })


@jobs_bp.route("/<job_id>", methods=["GET"])
def get_job(job_id: str):
    """Get job progress."""
    status = JobOrchestrator().get_job_status(job_id)
    if not status:
        raise NotFoundError("Job", job_id)
    return jsonify({"job": status})


@jobs_bp.route("/<job_id>/logs", methods=["GET"])
def get_job_logs(job_id: str):
    """Get job log entries. Use ?since=<index> to poll for new ones."""
    if not job_repo.get_job(job_id):
        raise NotFoundError("Job", job_id)

    since = request.args.get("since", 0, type=int)
    level = request.args.get("level")
    return jsonify(JobOrchestrator().get_job_logs(job_id, since_index=since, level=level))


@jobs_bp.route("/<job_id>/stop", methods=["POST"])
def stop_job(job_id: str):
    """Ask a running job to stop after its current email."""
    if not job_repo.get_job(job_id):
        raise NotFoundError("Job", job_id)

    if not JobOrchestrator().stop_job(job_id):
        raise ConflictError("Job is not running", {"job_id": job_id})
    return jsonify({"message": "Stop requested"})
