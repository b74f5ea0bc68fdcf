"""Infrastructure service interfaces for cross-cutting concerns.

Infrastructure Domain Services:
- Transaction Manager: one atomic unit of work per orchestrator operation
- Event Publisher: Domain event publishing and distribution
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, List

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.events.identity_events import BaseDomainEvent


class ITransactionManager(ABC):
    """Interface for opening the atomic unit of work of an operation.

    The returned context manager yields an open transaction. Leaving the block
    normally commits it; leaving it with an exception rolls it back before the
    exception propagates. The handle must not be used after the block exits.
    """

    @abstractmethod
    def begin(self, operation: str) -> AsyncContextManager[AsyncSession]:
        """Opens a transaction for the named operation.

        Raises:
            TransactionStartError: If the transaction cannot be opened.
        """
        raise NotImplementedError


class IEventPublisher(ABC):
    """Interface for domain event publishing and distribution.

    Decouples the orchestrator, which raises events, from the listeners that
    handle them.
    """

    @abstractmethod
    async def publish(self, event: BaseDomainEvent) -> None:
        """Publishes a single domain event."""
        raise NotImplementedError

    @abstractmethod
    async def publish_many(self, events: List[BaseDomainEvent]) -> None:
        """Publishes the events of one committed operation, in order."""
        raise NotImplementedError
