"""
Shared plumbing for services that mutate inventory state.

Every mutation runs as one unit of work. A version conflict on an item row
re-runs the whole unit, so availability is re-read and re-validated on each
attempt. Events are published only after the unit has committed.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar, cast

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger
from src.core.entities.events import InventoryEvent
from src.core.exceptions import ConcurrencyConflictError
from src.core.interfaces.events import IEventPublisher
from src.core.interfaces.unit_of_work import ITransaction, IUnitOfWork

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy for optimistic version conflicts."""

    retries: int = 3
    delay: float = 0.05
    multiplier: float = 2.0


class TransactionalService:
    """Base for services that run their mutations through a unit of work."""

    def __init__(
        self,
        uow: IUnitOfWork,
        publisher: IEventPublisher | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.uow = uow
        self.publisher = publisher
        self.retry_policy = retry_policy or RetryPolicy()

    def _get_retry_decorator(self) -> Any:
        """Get tenacity retry decorator for version conflicts."""
        policy = self.retry_policy
        return retry(
            stop=stop_after_attempt(policy.retries + 1),
            wait=wait_exponential(
                multiplier=policy.delay,
                min=policy.delay,
                max=policy.delay * (policy.multiplier**3),
            ),
            retry=retry_if_exception_type(ConcurrencyConflictError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "concurrency_conflict_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _in_transaction(
        self, operation: Callable[[ITransaction], Awaitable[T]]
    ) -> T:
        """Run operation inside a write transaction, retrying on version conflicts."""

        async def attempt() -> T:
            async with self.uow.begin() as tx:
                return await operation(tx)

        result = await self._get_retry_decorator()(attempt)()
        return cast(T, result)

    async def _publish(self, *events: InventoryEvent) -> None:
        if self.publisher is None:
            return
        for event in events:
            await self.publisher.publish(event)
