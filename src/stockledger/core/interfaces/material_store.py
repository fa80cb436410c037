"""
Abstract interface for the material catalog.

The catalog is owned by the surrounding application. The ledger reads
materials through this port; the stock counter is written only through
the ledger store.
"""

from abc import ABC, abstractmethod

from stockledger.core.entities.material import Material


class IMaterialStore(ABC):
    """Catalog access used by the ledger and the reorder workflow."""

    @abstractmethod
    async def create_material(self, material: Material) -> Material:
        """Create a new material record (catalog seeding)."""

    @abstractmethod
    async def get_material(self, material_id: str) -> Material | None:
        """Get material by ID, enabled or not."""

    @abstractmethod
    async def list_materials(
        self,
        enabled_only: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Material]:
        """List materials with pagination."""

    @abstractmethod
    async def set_enabled(self, material_id: str, enabled: bool) -> Material | None:
        """Soft-enable or soft-disable a material. Materials are never deleted."""
