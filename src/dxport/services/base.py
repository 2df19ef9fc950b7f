"""
Base class and helpers shared by services.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, TypeVar

from dxport.exceptions import TransportFailureError
from dxport.logging import get_logger

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient

T = TypeVar("T")

logger = get_logger(__name__)


class BaseService:
    """Service bound to a platform client."""

    def __init__(self, client: AsyncPlatformClient) -> None:
        self._client = client

    @property
    def client(self) -> AsyncPlatformClient:
        return self._client


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    retries: int,
    label: str,
    on_retry: Callable[[int, Exception], None] | None = None,
) -> T:
    """
    Run an idempotent operation, re-issuing it on transport failures.

    Only TransportFailureError is retried; structured platform rejections
    propagate immediately. ``retries=0`` runs the operation exactly once.

    Args:
        operation: Zero-argument coroutine factory.
        retries: Extra attempts after the first.
        label: Used in log messages.
        on_retry: Called with (attempt, error) before each retry.
    """
    for attempt in range(retries + 1):
        try:
            return await operation()
        except TransportFailureError as e:
            if attempt >= retries:
                raise
            logger.warning(f"{label} failed (attempt {attempt + 1}/{retries + 1}): {e}")
            if on_retry:
                on_retry(attempt + 1, e)
            await asyncio.sleep(2**attempt)

    raise AssertionError("unreachable")
