"""Registry adapter layer - delivers serialized documents to the registration API."""

from crpt_client.adapters.registry.base import (
    AbstractAsyncRegistryTransport,
    AbstractRegistryTransport,
)
from crpt_client.adapters.registry.httpx_transport import (
    AsyncHttpxRegistryTransport,
    HttpxRegistryTransport,
)

__all__ = [
    "AbstractAsyncRegistryTransport",
    "AbstractRegistryTransport",
    "AsyncHttpxRegistryTransport",
    "HttpxRegistryTransport",
]
