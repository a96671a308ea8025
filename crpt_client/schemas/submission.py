"""Result types reported for each document submission."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SubmissionStatus = Literal["accepted", "rejected", "failed"]


@dataclass(frozen=True)
class SubmissionOutcome:
    """Outcome of one create-document call.

    Attributes:
        submission_id: Correlation id assigned to the submission.
        status: ``accepted`` for HTTP 200, ``rejected`` for any other status,
            ``failed`` when no response was received.
        status_code: HTTP status returned by the registry, if any.
        error: Failure reason for ``failed`` submissions.
        waited_seconds: Time spent waiting for an admission permit.
    """

    submission_id: str
    status: SubmissionStatus
    status_code: int | None = None
    error: str | None = None
    waited_seconds: float = 0.0

    @property
    def accepted(self) -> bool:
        return self.status == "accepted"
