"""Tests for settings-driven factories and configuration loading."""

import pytest
from pydantic import ValidationError

from crpt_client.adapters import factory
from crpt_client.adapters.rate_limit import (
    AsyncInMemoryAdmissionController,
    InMemoryAdmissionController,
)
from crpt_client.adapters.registry import AsyncHttpxRegistryTransport, HttpxRegistryTransport
from crpt_client.core.config import RateLimitSettings, RegistrySettings, settings
from crpt_client.core.errors import ConfigurationAppError
from crpt_client.services.submission_service import (
    AsyncDocumentSubmissionService,
    DocumentSubmissionService,
)


class TestSettings:
    """Environment-driven configuration."""

    def test_test_environment_defaults(self) -> None:
        assert settings.app_env == "testing"
        assert settings.registry.base_url == "https://registry.test"
        assert settings.registry.create_document_path == "/api/v3/lk/documents/create"
        assert settings.registry.signature_header == "Signature"
        assert settings.rate_limit.request_limit == 5

    def test_rate_limit_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATE_LIMIT_REQUEST_LIMIT", "7")
        monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "2.5")
        monkeypatch.setenv("RATE_LIMIT_ACQUIRE_TIMEOUT_SECONDS", "10")

        cfg = RateLimitSettings()

        assert cfg.request_limit == 7
        assert cfg.window_seconds == 2.5
        assert cfg.acquire_timeout_seconds == 10

    @pytest.mark.parametrize("request_limit", [0, -1])
    def test_rate_limit_rejects_non_positive_limit(self, request_limit: int) -> None:
        with pytest.raises(ValidationError):
            RateLimitSettings(request_limit=request_limit)


class TestFactories:
    """Factories build wired components from settings."""

    def test_create_admission_controller_uses_settings(self) -> None:
        controller = factory.create_admission_controller(
            RateLimitSettings(request_limit=4, window_seconds=30)
        )
        try:
            assert isinstance(controller, InMemoryAdmissionController)
            assert controller.request_limit == 4
            assert controller.window_seconds == 30
            assert controller.snapshot().available_permits == 4
        finally:
            controller.shutdown()

    def test_create_admission_controller_defaults_to_global_settings(self) -> None:
        controller = factory.create_admission_controller()
        try:
            assert controller.request_limit == settings.rate_limit.request_limit
        finally:
            controller.shutdown()

    def test_create_transport_uses_registry_settings(self) -> None:
        transport = factory.create_transport(
            RegistrySettings(
                base_url="https://other.test",
                create_document_path="/documents",
                signature_header="X-Sign",
                timeout_seconds=5,
            )
        )
        try:
            assert isinstance(transport, HttpxRegistryTransport)
            assert transport.client.base_url.host == "other.test"
            assert transport.create_document_path == "/documents"
            assert transport.signature_header == "X-Sign"
        finally:
            transport.close()

    def test_create_transport_requires_base_url(self) -> None:
        with pytest.raises(ConfigurationAppError) as exc:
            factory.create_transport(RegistrySettings(base_url=""))

        assert exc.value.code == "registry_missing_base_url"

    def test_create_submission_service_wires_components(self) -> None:
        service = factory.create_submission_service(
            rate_limit=RateLimitSettings(request_limit=2, window_seconds=10, acquire_timeout_seconds=3),
        )
        with service:
            assert isinstance(service, DocumentSubmissionService)
            assert service.acquire_timeout == 3
            assert service.controller.snapshot().request_limit == 2

        assert service.controller.snapshot().closed is True

    def test_create_submission_service_without_base_url_starts_nothing(self) -> None:
        with pytest.raises(ConfigurationAppError):
            factory.create_submission_service(registry=RegistrySettings(base_url=""))

    @pytest.mark.asyncio
    async def test_create_async_submission_service(self) -> None:
        service = factory.create_async_submission_service(
            rate_limit=RateLimitSettings(request_limit=3, window_seconds=10),
        )
        async with service:
            assert isinstance(service, AsyncDocumentSubmissionService)
            assert isinstance(service.controller, AsyncInMemoryAdmissionController)
            assert isinstance(service.transport, AsyncHttpxRegistryTransport)
            assert service.controller.snapshot().available_permits == 3

        assert service.controller.snapshot().closed is True
