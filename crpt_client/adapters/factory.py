"""Factory functions building controllers, transports and services from settings."""

from crpt_client.adapters.rate_limit.async_in_memory import AsyncInMemoryAdmissionController
from crpt_client.adapters.rate_limit.in_memory import InMemoryAdmissionController
from crpt_client.adapters.registry.httpx_transport import (
    AsyncHttpxRegistryTransport,
    HttpxRegistryTransport,
)
from crpt_client.core import config
from crpt_client.core.config import RateLimitSettings, RegistrySettings
from crpt_client.core.errors import ConfigurationAppError
from crpt_client.services.submission_service import (
    AsyncDocumentSubmissionService,
    DocumentSubmissionService,
    SubmissionObserver,
)


def _rate_limit(rate_limit: RateLimitSettings | None) -> RateLimitSettings:
    return rate_limit or config.settings.rate_limit


def _registry(registry: RegistrySettings | None) -> RegistrySettings:
    registry = registry or config.settings.registry
    if not registry.base_url:
        raise ConfigurationAppError(
            code="registry_missing_base_url",
            message="Registry transport requires REGISTRY_BASE_URL",
        )
    return registry


def create_admission_controller(
    rate_limit: RateLimitSettings | None = None,
) -> InMemoryAdmissionController:
    """Build a threaded admission controller from settings.

    Raises:
        ConfigurationAppError: If the limits are invalid.
    """
    cfg = _rate_limit(rate_limit)
    return InMemoryAdmissionController(
        request_limit=cfg.request_limit,
        window_seconds=cfg.window_seconds,
    )


def create_async_admission_controller(
    rate_limit: RateLimitSettings | None = None,
) -> AsyncInMemoryAdmissionController:
    """Build an asyncio admission controller; call from a running event loop."""
    cfg = _rate_limit(rate_limit)
    return AsyncInMemoryAdmissionController(
        request_limit=cfg.request_limit,
        window_seconds=cfg.window_seconds,
    )


def create_transport(registry: RegistrySettings | None = None) -> HttpxRegistryTransport:
    cfg = _registry(registry)
    return HttpxRegistryTransport(
        base_url=cfg.base_url,
        create_document_path=cfg.create_document_path,
        signature_header=cfg.signature_header,
        timeout_seconds=cfg.timeout_seconds,
    )


def create_async_transport(registry: RegistrySettings | None = None) -> AsyncHttpxRegistryTransport:
    cfg = _registry(registry)
    return AsyncHttpxRegistryTransport(
        base_url=cfg.base_url,
        create_document_path=cfg.create_document_path,
        signature_header=cfg.signature_header,
        timeout_seconds=cfg.timeout_seconds,
    )


def create_submission_service(
    observer: SubmissionObserver | None = None,
    *,
    rate_limit: RateLimitSettings | None = None,
    registry: RegistrySettings | None = None,
) -> DocumentSubmissionService:
    """Factory function wiring a ready-to-use threaded submission service.

    Reads configuration from crpt_client.core.config.settings unless explicit
    settings objects are passed.

    Returns:
        DocumentSubmissionService: Service owning a started admission
            controller and an httpx transport. Close it when done.

    Raises:
        ConfigurationAppError: If the configuration cannot produce a client.
    """
    cfg = _rate_limit(rate_limit)
    registry_cfg = _registry(registry)
    controller = create_admission_controller(cfg)
    return DocumentSubmissionService(
        controller=controller,
        transport=create_transport(registry_cfg),
        observer=observer,
        acquire_timeout=cfg.acquire_timeout_seconds,
    )


def create_async_submission_service(
    observer: SubmissionObserver | None = None,
    *,
    rate_limit: RateLimitSettings | None = None,
    registry: RegistrySettings | None = None,
) -> AsyncDocumentSubmissionService:
    """Async counterpart of create_submission_service; call from a running loop."""
    cfg = _rate_limit(rate_limit)
    registry_cfg = _registry(registry)
    controller = create_async_admission_controller(cfg)
    return AsyncDocumentSubmissionService(
        controller=controller,
        transport=create_async_transport(registry_cfg),
        observer=observer,
        acquire_timeout=cfg.acquire_timeout_seconds,
    )
