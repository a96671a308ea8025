"""Admission control adapters.

A small abstraction layer over the permit pool that gates outbound registry
requests, with threaded and asyncio flavours sharing the same semantics.
"""

from crpt_client.adapters.rate_limit.async_in_memory import AsyncInMemoryAdmissionController
from crpt_client.adapters.rate_limit.base import (
    AbstractAdmissionController,
    AbstractAsyncAdmissionController,
    PermitSnapshot,
)
from crpt_client.adapters.rate_limit.cancellation import CancellationToken
from crpt_client.adapters.rate_limit.in_memory import InMemoryAdmissionController

__all__ = [
    "AbstractAdmissionController",
    "AbstractAsyncAdmissionController",
    "AsyncInMemoryAdmissionController",
    "CancellationToken",
    "InMemoryAdmissionController",
    "PermitSnapshot",
]
