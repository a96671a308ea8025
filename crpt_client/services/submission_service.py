"""Document submission service gating registry calls behind admission control.

This service is the orchestration layer of the client. For every document it:
- Serializes the payload to JSON bytes
- Acquires an admission permit (blocking while the window is exhausted)
- Sends the payload to the registry
- Reports the outcome to an observer (logging by default)

The permit is always acquired before the network call and is never handed
back early: once granted it counts against the current window.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from crpt_client.adapters.rate_limit.base import (
    AbstractAdmissionController,
    AbstractAsyncAdmissionController,
)
from crpt_client.adapters.rate_limit.cancellation import CancellationToken
from crpt_client.adapters.registry.base import (
    AbstractAsyncRegistryTransport,
    AbstractRegistryTransport,
)
from crpt_client.core.errors import TransportAppError, ValidationAppError
from crpt_client.core.logging import clear_submission_id, set_submission_id
from crpt_client.schemas.document import Document
from crpt_client.schemas.submission import SubmissionOutcome

logger = logging.getLogger(__name__)

SubmissionObserver = Callable[[SubmissionOutcome], None]

SUCCESS_STATUS_CODE = 200


def serialize_document(document: Document | Mapping[str, Any]) -> bytes:
    """Serialize a document to the registry's JSON wire format.

    Args:
        document: Document model, or a mapping validated into one (either
            camelCase or snake_case keys are accepted).

    Returns:
        UTF-8 encoded JSON with camelCase keys.

    Raises:
        ValidationAppError: If the mapping does not describe a valid document.
    """
    if not isinstance(document, Document):
        try:
            document = Document.model_validate(document)
        except ValidationError as exc:
            raise ValidationAppError(
                code="invalid_document",
                message="Document payload failed validation",
                details={"context": {"errors": exc.errors(include_input=False)}},
            ) from exc

    return document.model_dump_json(by_alias=True).encode("utf-8")


def log_submission_outcome(outcome: SubmissionOutcome) -> None:
    """Default observer: one log line per submission."""

    extra = {
        "submission_id": outcome.submission_id,
        "status_code": outcome.status_code,
        "waited_s": round(outcome.waited_seconds, 4),
    }
    if outcome.status == "accepted":
        logger.info("submission.accepted", extra=extra)
    elif outcome.status == "rejected":
        logger.warning("submission.rejected", extra=extra)
    else:
        logger.error("submission.failed", extra={**extra, "reason": outcome.error})


def _validate_signature(signature: str) -> None:
    if not signature or not signature.strip():
        raise ValidationAppError(
            code="missing_signature",
            message="A document signature is required",
        )


def _outcome_from_status(submission_id: str, status_code: int, waited: float) -> SubmissionOutcome:
    return SubmissionOutcome(
        submission_id=submission_id,
        status="accepted" if status_code == SUCCESS_STATUS_CODE else "rejected",
        status_code=status_code,
        waited_seconds=waited,
    )


def _failed_outcome(submission_id: str, exc: TransportAppError, waited: float) -> SubmissionOutcome:
    return SubmissionOutcome(
        submission_id=submission_id,
        status="failed",
        error=exc.message,
        waited_seconds=waited,
    )


class DocumentSubmissionService:
    """Submits documents to the registry at no more than the admitted rate.

    Safe to share between threads: all coordination happens in the admission
    controller.

    Attributes:
        controller: Admission controller gating every outbound request.
        transport: Registry transport performing the HTTP call.
        observer: Callback receiving each SubmissionOutcome.
        acquire_timeout: Default permit wait bound in seconds (None waits forever).
    """

    def __init__(
        self,
        controller: AbstractAdmissionController,
        transport: AbstractRegistryTransport,
        observer: SubmissionObserver | None = None,
        acquire_timeout: float | None = None,
    ) -> None:
        self.controller = controller
        self.transport = transport
        self.observer = observer or log_submission_outcome
        self.acquire_timeout = acquire_timeout

    def __enter__(self) -> "DocumentSubmissionService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _acquire_permit(
        self,
        cancellation: CancellationToken | None,
        timeout: float | None,
    ) -> float:
        """Block until admitted and return the seconds spent waiting."""
        started = time.monotonic()
        self.controller.acquire(
            cancellation=cancellation,
            timeout=timeout if timeout is not None else self.acquire_timeout,
        )
        return time.monotonic() - started

    def create_document(
        self,
        document: Document | Mapping[str, Any],
        signature: str,
        *,
        cancellation: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> SubmissionOutcome:
        """Submit one document to the create-document endpoint.

        Args:
            document: Document model or mapping.
            signature: Signature sent in the signature header.
            cancellation: Token that abandons the permit wait.
            timeout: Permit wait bound overriding ``acquire_timeout``.

        Returns:
            SubmissionOutcome with ``accepted`` or ``rejected`` status.

        Raises:
            ValidationAppError: If the document or signature is invalid.
            CancellationAppError: If the permit wait was abandoned; nothing was sent.
            TransportAppError: If the registry could not be reached.
        """
        submission_id = str(uuid.uuid4())
        set_submission_id(submission_id)
        try:
            # Step 1: Serialize and validate before touching the permit pool
            body = serialize_document(document)
            _validate_signature(signature)

            # Step 2: Wait for admission
            waited = self._acquire_permit(cancellation, timeout)

            # Step 3: Send
            try:
                status_code = self.transport.send(body, signature=signature)
            except TransportAppError as exc:
                self.observer(_failed_outcome(submission_id, exc, waited))
                raise

            # Step 4: Report
            outcome = _outcome_from_status(submission_id, status_code, waited)
            self.observer(outcome)
            return outcome
        finally:
            clear_submission_id()

    def close(self) -> None:
        """Stop the refill schedule and close the transport."""
        self.controller.shutdown()
        self.transport.close()


class AsyncDocumentSubmissionService:
    """asyncio counterpart of DocumentSubmissionService."""

    def __init__(
        self,
        controller: AbstractAsyncAdmissionController,
        transport: AbstractAsyncRegistryTransport,
        observer: SubmissionObserver | None = None,
        acquire_timeout: float | None = None,
    ) -> None:
        self.controller = controller
        self.transport = transport
        self.observer = observer or log_submission_outcome
        self.acquire_timeout = acquire_timeout

    async def __aenter__(self) -> "AsyncDocumentSubmissionService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def create_document(
        self,
        document: Document | Mapping[str, Any],
        signature: str,
        *,
        timeout: float | None = None,
    ) -> SubmissionOutcome:
        """Submit one document; see DocumentSubmissionService.create_document.

        Task cancellation while waiting for a permit propagates as
        ``asyncio.CancelledError`` and nothing is sent.
        """
        submission_id = str(uuid.uuid4())
        set_submission_id(submission_id)
        try:
            body = serialize_document(document)
            _validate_signature(signature)

            started = time.monotonic()
            await self.controller.acquire(
                timeout=timeout if timeout is not None else self.acquire_timeout,
            )
            waited = time.monotonic() - started

            try:
                status_code = await self.transport.send(body, signature=signature)
            except TransportAppError as exc:
                self.observer(_failed_outcome(submission_id, exc, waited))
                raise

            outcome = _outcome_from_status(submission_id, status_code, waited)
            self.observer(outcome)
            return outcome
        finally:
            clear_submission_id()

    async def aclose(self) -> None:
        await self.controller.aclose()
        await self.transport.aclose()
