"""Abstract interface for reorder request storage."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from stockledger.core.entities.inventory import InventoryMovement
from stockledger.core.entities.material import Material
from stockledger.core.entities.reorder import (
    ReorderFilter,
    ReorderRequest,
    ReorderStatus,
)


class IReorderStore(ABC):
    """Persistence for reorder requests."""

    @abstractmethod
    async def create_request(self, request: ReorderRequest) -> ReorderRequest:
        """Insert a new request."""

    @abstractmethod
    async def get_request(self, request_id: str) -> ReorderRequest | None:
        """Get request by ID."""

    @abstractmethod
    async def find_pending(self, material_id: str) -> ReorderRequest | None:
        """Oldest PENDING request for a material, if any."""

    @abstractmethod
    async def list_requests(
        self,
        filters: ReorderFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ReorderRequest]:
        """List requests, newest first."""

    @abstractmethod
    def iter_requests(
        self, filters: ReorderFilter | None = None, batch_size: int = 200
    ) -> AsyncIterator[ReorderRequest]:
        """Lazily iterate requests, newest first."""

    @abstractmethod
    async def save_transition(
        self, request: ReorderRequest, expected_status: ReorderStatus
    ) -> ReorderRequest:
        """
        Persist a transitioned request.

        Applies only if the stored status is still ``expected_status``;
        otherwise raises ConcurrencyConflictError and writes nothing.
        """

    @abstractmethod
    async def commit_receipt(
        self,
        request: ReorderRequest,
        expected_status: ReorderStatus,
        movement: InventoryMovement,
        expected_version: int,
    ) -> tuple[ReorderRequest, InventoryMovement, Material]:
        """
        Mark a request RECEIVED and book its PURCHASE movement atomically.

        Either the status change, the movement and the stock update all
        commit, or none of them do.
        """
