"""Processing results endpoints."""

from flask import Blueprint, request, jsonify

import config
from api.middleware.exceptions import NotFoundError
from database.repositories.result_repository import ResultRepository

results_bp = Blueprint("results", __name__)
result_repo = ResultRepository()


@results_bp.route("", methods=["GET"])
def list_results():
    """Recent results, newest first. Optional ?job_id= and ?limit=."""
    job_id = request.args.get("job_id")
    limit = request.args.get("limit", config.DEFAULT_RESULTS_LIMIT, type=int)
    offset = request.args.get("offset", 0, type=int)

    results = result_repo.list_results(job_id=job_id, limit=limit, offset=offset)
    return jsonify({
        "results": [r.to_dict() for r in results],
        "total": result_repo.count_results(job_id),
    })


@results_bp.route("/stats", methods=["GET"])
def get_stats():
    """Aggregate totals over every stored result."""
    return jsonify(result_repo.get_processing_stats())


@results_bp.route("/<result_id>", methods=["GET"])
def get_result(result_id: str):
    """Get one result."""
    result = result_repo.get_result(result_id)
    if not result:
        raise NotFoundError("Result", result_id)
    return jsonify({"result": result.to_dict()})
