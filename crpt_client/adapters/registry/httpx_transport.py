"""httpx-based registry transports."""

from __future__ import annotations

import logging

import httpx

from crpt_client.adapters.registry.base import (
    AbstractAsyncRegistryTransport,
    AbstractRegistryTransport,
)
from crpt_client.core.errors import TransportAppError

logger = logging.getLogger(__name__)


def _build_headers(signature_header: str, signature: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        signature_header: signature,
    }


def _transport_error(exc: httpx.HTTPError, endpoint: str) -> TransportAppError:
    logger.warning(
        "registry.transport_error",
        extra={"endpoint": endpoint, "error_type": type(exc).__name__},
    )
    return TransportAppError(
        code="registry_transport_error",
        message=f"Registry request failed: {exc}",
        details={"endpoint": endpoint, "error_type": type(exc).__name__},
    )


class HttpxRegistryTransport(AbstractRegistryTransport):
    """Blocking transport posting documents with a pooled ``httpx.Client``."""

    def __init__(
        self,
        base_url: str,
        create_document_path: str,
        signature_header: str = "Signature",
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Scheme and host of the registration API.
            create_document_path: Path of the create-document endpoint.
            signature_header: Header name carrying the document signature.
            timeout_seconds: Timeout for requests in seconds.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
        """
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )
        self.create_document_path = create_document_path
        self.signature_header = signature_header

    def send(self, body: bytes, *, signature: str) -> int:
        try:
            response = self.client.post(
                self.create_document_path,
                content=body,
                headers=_build_headers(self.signature_header, signature),
            )
        except httpx.HTTPError as exc:
            raise _transport_error(exc, self.create_document_path) from exc
        return response.status_code

    def close(self) -> None:
        self.client.close()


class AsyncHttpxRegistryTransport(AbstractAsyncRegistryTransport):
    """Async transport posting documents with a pooled ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        create_document_path: str,
        signature_header: str = "Signature",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )
        self.create_document_path = create_document_path
        self.signature_header = signature_header

    async def send(self, body: bytes, *, signature: str) -> int:
        try:
            response = await self.client.post(
                self.create_document_path,
                content=body,
                headers=_build_headers(self.signature_header, signature),
            )
        except httpx.HTTPError as exc:
            raise _transport_error(exc, self.create_document_path) from exc
        return response.status_code

    async def aclose(self) -> None:
        await self.client.aclose()
