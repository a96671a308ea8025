from abc import ABC, abstractmethod


class AbstractRegistryTransport(ABC):
	"""Interface for blocking transports that deliver documents to the registry."""

	@abstractmethod
	def send(self, body: bytes, *, signature: str) -> int:
		"""Send a serialized document to the create-document endpoint.

		Args:
			body: UTF-8 JSON document payload.
			signature: Document signature sent alongside the payload.

		Returns:
			int: HTTP status code returned by the registry.

		Raises:
			TransportAppError: If no response could be obtained.
		"""
		...

	def close(self) -> None:
		"""Release any pooled connections."""


class AbstractAsyncRegistryTransport(ABC):
	"""Interface for asyncio transports that deliver documents to the registry."""

	@abstractmethod
	async def send(self, body: bytes, *, signature: str) -> int:
		"""Async counterpart of AbstractRegistryTransport.send."""
		...

	async def aclose(self) -> None:
		"""Release any pooled connections."""
