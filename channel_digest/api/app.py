"""
Flask application factory for the HTTP ingress.

Routes:
    POST /submit          create a job from {channel, email}
    GET  /jobs/<job_id>   return the stored job record
"""

from flask import Flask, request

from channel_digest.logging import get_logger
from channel_digest.persistence.exceptions import StoreError
from channel_digest.persistence.store import JobStore
from channel_digest.pipeline.models import INTERNAL_ERROR_BODY
from channel_digest.pipeline.submission import SubmissionStage

logger = get_logger(__name__, component="api")


def create_app(submission_stage: SubmissionStage, job_store: JobStore) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    @app.route("/submit", methods=["POST"])
    def submit():
        """Accept a submission; non-JSON bodies count as empty."""
        body = request.get_json(silent=True)
        response = submission_stage.submit(body)
        return response.body, response.status_code

    @app.route("/jobs/<job_id>")
    def get_job(job_id):
        try:
            record = job_store.get(job_id)
        except StoreError as e:
            logger.error(f"Job lookup failed: {e}", extra={"event": "api.lookup.failed", "job_id": job_id})
            return dict(INTERNAL_ERROR_BODY), 500

        if record is None:
            return {"error": "Job not found"}, 404
        return record.to_document()

    return app
