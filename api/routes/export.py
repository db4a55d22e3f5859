"""Export endpoints for downloading results and receipt documents."""

import os
import time

from flask import Blueprint, Response, request, send_file

from api.middleware.exceptions import NotFoundError
from core.output.csv_exporter import CsvExporter
from database.repositories.result_repository import ResultRepository

export_bp = Blueprint("export", __name__)
result_repo = ResultRepository()


@export_bp.route("/export/csv", methods=["GET"])
def export_csv():
    """Export results as CSV, optionally limited to one ?job_id=."""
    job_id = request.args.get("job_id")
    results = result_repo.list_results(job_id=job_id, limit=None)

    filename = f"email_results_{int(time.time() * 1000)}.csv"
    return Response(
        CsvExporter().to_csv(results),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@export_bp.route("/download/<result_id>", methods=["GET"])
def download_document(result_id: str):
    """Download the receipt document rendered for a result."""
    result = result_repo.get_result(result_id)
    if not result:
        raise NotFoundError("Result", result_id)

    if not result.document_path or not os.path.exists(result.document_path):
        raise NotFoundError("Document", result_id)

    return send_file(
        result.document_path,
        as_attachment=True,
        download_name=os.path.basename(result.document_path),
    )
