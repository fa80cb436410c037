"""Abstract interface for the append-only movement ledger."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from decimal import Decimal

from stockledger.core.entities.inventory import InventoryMovement, MovementFilter
from stockledger.core.entities.material import Material


class ILedgerStore(ABC):
    """Persistence for inventory movements and the cached stock counter."""

    @abstractmethod
    async def commit_movement(
        self, movement: InventoryMovement, expected_version: int
    ) -> tuple[InventoryMovement, Material]:
        """
        Append a movement and add its quantity to the material's stock.

        Both writes happen in one transaction. The stock update only applies
        if the material is still at ``expected_version``; otherwise nothing is
        written and ConcurrencyConflictError is raised. ``recorded_at`` is set
        at commit time.

        Returns:
            The stored movement and the material with its new stock.
        """

    @abstractmethod
    async def get_movement(self, movement_id: str) -> InventoryMovement | None:
        """Get a single movement by ID."""

    @abstractmethod
    def iter_movements(
        self, filters: MovementFilter | None = None, batch_size: int = 200
    ) -> AsyncIterator[InventoryMovement]:
        """Lazily iterate movements, newest first."""

    @abstractmethod
    async def list_movements(
        self,
        filters: MovementFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[InventoryMovement]:
        """List movements, newest first."""

    @abstractmethod
    async def sum_movements(self, material_id: str) -> tuple[Decimal, int]:
        """Exact ledger sum and row count for a material."""

    @abstractmethod
    async def repair_stock(
        self, material_id: str, stock: Decimal, expected_version: int
    ) -> Material:
        """Overwrite the cached counter with the ledger sum (CAS on version)."""
