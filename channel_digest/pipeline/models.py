"""Data models returned by pipeline entry points."""

from dataclasses import dataclass, field
from typing import Any, Dict

INTERNAL_ERROR_BODY = {"error": "Internal Server Error"}


@dataclass
class SubmissionResponse:
    """
    Outcome of a submission, ready to be rendered by the HTTP layer.

    Attributes:
        status_code: HTTP status (201, 400 or 500)
        body: JSON-serializable response body
    """

    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.status_code == 201

    @property
    def job_id(self):
        return self.body.get("jobID")

    @classmethod
    def bad_request(cls, message: str) -> "SubmissionResponse":
        return cls(status_code=400, body={"error": message})

    @classmethod
    def internal_error(cls) -> "SubmissionResponse":
        return cls(status_code=500, body=dict(INTERNAL_ERROR_BODY))
