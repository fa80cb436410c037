"""
Movement Ledger service.

Layer-pure: depends only on core entities, interfaces and exceptions.
The ledger is the source of truth for stock; ``Material.current_stock``
is a cache that is only ever changed in the same transaction that
appends a movement (or by an explicit repair from the ledger sum).

Writes on one material are serialized by a per-material lock, and the
store re-checks the material's stock version at commit, so a write
racing from another process fails with ConcurrencyConflictError instead
of losing an update.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from decimal import Decimal

from stockledger.config import get_logger
from stockledger.core.entities.actor import Actor
from stockledger.core.entities.inventory import (
    InventoryMovement,
    MovementFilter,
    MovementSummary,
    MovementType,
    derive_signed_quantity,
)
from stockledger.core.entities.material import Material
from stockledger.core.entities.stock import StockAssessment, StockReconciliation
from stockledger.core.exceptions import (
    AdjustmentLimitExceededError,
    InsufficientStockError,
    MaterialDisabledError,
    MaterialNotFoundError,
)
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.core.interfaces.material_store import IMaterialStore
from stockledger.core.services.keyed_lock import KeyedLock
from stockledger.core.services.stock_alerts import StockAlertEvaluator

logger = get_logger(__name__)

StockListener = Callable[[Material, InventoryMovement], None]


@dataclass
class LedgerCommit:
    """Outcome of a committed movement."""

    movement: InventoryMovement
    material: Material
    assessment: StockAssessment | None = None


@dataclass
class MovementPage:
    """A movement listing with its summary."""

    movements: list[InventoryMovement]
    summary: MovementSummary = field(default_factory=MovementSummary)


class MovementLedgerService:
    """Records movements and keeps the cached stock counter in step."""

    def __init__(
        self,
        material_store: IMaterialStore,
        ledger_store: ILedgerStore,
        alert_evaluator: StockAlertEvaluator | None = None,
        locks: KeyedLock | None = None,
        adjustment_limit: Decimal | None = None,
        adjustment_floor_enabled: bool = False,
    ) -> None:
        self._materials = material_store
        self._ledger = ledger_store
        self._alerts = alert_evaluator or StockAlertEvaluator()
        self._locks = locks or KeyedLock()
        self._adjustment_limit = adjustment_limit
        self._adjustment_floor = adjustment_floor_enabled
        self._listeners: list[StockListener] = []

    # ------------------------------------------------------------------
    # Locking and change events

    def material_lock(self, material_id: str) -> AbstractAsyncContextManager[None]:
        """Lock that serializes every stock write on one material."""
        return self._locks.hold(f"material:{material_id}")

    def subscribe(self, listener: StockListener) -> None:
        """Register a callback run after each committed stock change."""
        self._listeners.append(listener)

    def publish(self, material: Material, movement: InventoryMovement) -> StockAssessment:
        """Notify the alert evaluator and listeners of a committed change."""
        assessment = self._alerts.on_stock_changed(material)
        for listener in self._listeners:
            # Movement is already committed; listener errors are logged only
            try:
                listener(material, movement)
            except Exception as e:
                logger.error(
                    "stock_listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    material_id=material.id,
                    error=str(e),
                )
        return assessment

    # ------------------------------------------------------------------
    # Validation

    async def get_material(self, material_id: str, require_enabled: bool = True) -> Material:
        material = await self._materials.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        if require_enabled and not material.is_enabled:
            raise MaterialDisabledError(material_id)
        return material

    def prepare_movement(
        self,
        material: Material,
        movement_type: MovementType,
        quantity: Decimal,
        unit_cost: Decimal | None = None,
        reference: str | None = None,
        notes: str | None = None,
        actor: Actor | None = None,
        reorder_request_id: str | None = None,
    ) -> InventoryMovement:
        """
        Validate an intent against a material snapshot and build the row.

        Raises:
            InvalidQuantityError: zero/negative magnitude, stock floor breach,
                or adjustment beyond the configured limit.
        """
        signed = derive_signed_quantity(movement_type, quantity)
        material_id = material.id or ""

        if movement_type is MovementType.ADJUSTMENT and self._adjustment_limit is not None:
            if abs(signed) > self._adjustment_limit:
                raise AdjustmentLimitExceededError(
                    material_id, signed, self._adjustment_limit
                )

        floor_applies = movement_type.is_depletion or (
            movement_type is MovementType.ADJUSTMENT and self._adjustment_floor
        )
        if floor_applies and material.current_stock + signed < 0:
            raise InsufficientStockError(
                material_id=material_id,
                requested=abs(signed),
                available=material.current_stock,
            )

        total_cost = abs(signed) * unit_cost if unit_cost is not None else None
        return InventoryMovement(
            material_id=material_id,
            type=movement_type,
            quantity=signed,
            unit_cost=unit_cost,
            total_cost=total_cost,
            reference=reference,
            notes=notes,
            recorded_by=actor.id if actor else None,
            reorder_request_id=reorder_request_id,
        )

    # ------------------------------------------------------------------
    # Operations

    async def record_movement(
        self,
        material_id: str,
        movement_type: MovementType,
        quantity: Decimal,
        unit_cost: Decimal | None = None,
        reference: str | None = None,
        notes: str | None = None,
        actor: Actor | None = None,
    ) -> LedgerCommit:
        """
        Append one movement and update the material's stock atomically.

        ``quantity`` is a magnitude for every type except ADJUSTMENT, where
        it is the signed correction.

        Raises:
            MaterialNotFoundError / MaterialDisabledError: unknown or disabled material.
            InvalidQuantityError: see ``prepare_movement``.
            ConcurrencyConflictError: stock changed underneath; re-read and retry.
        """
        async with self.material_lock(material_id):
            material = await self.get_material(material_id)
            movement = self.prepare_movement(
                material,
                movement_type,
                quantity,
                unit_cost=unit_cost,
                reference=reference,
                notes=notes,
                actor=actor,
            )
            movement, material = await self._ledger.commit_movement(
                movement, expected_version=material.stock_version
            )

        logger.info(
            "movement_recorded",
            movement_id=movement.id,
            material_id=material_id,
            type=movement.type.value,
            quantity=str(movement.quantity),
            new_stock=str(material.current_stock),
        )
        assessment = self.publish(material, movement)
        return LedgerCommit(movement=movement, material=material, assessment=assessment)

    async def current_stock(self, material_id: str) -> Decimal:
        """Cached stock counter (hot path, no ledger scan)."""
        material = await self.get_material(material_id, require_enabled=False)
        return material.current_stock

    async def reconcile(self, material_id: str) -> StockReconciliation:
        """Compare the cached counter with the ledger sum without writing."""
        material = await self.get_material(material_id, require_enabled=False)
        ledger_stock, count = await self._ledger.sum_movements(material_id)
        return StockReconciliation(
            material_id=material_id,
            cached_stock=material.current_stock,
            ledger_stock=ledger_stock,
            movement_count=count,
        )

    async def recompute_from_ledger(self, material_id: str) -> StockReconciliation:
        """Rewrite the cached counter from the ledger sum if they drifted."""
        async with self.material_lock(material_id):
            material = await self.get_material(material_id, require_enabled=False)
            ledger_stock, count = await self._ledger.sum_movements(material_id)
            result = StockReconciliation(
                material_id=material_id,
                cached_stock=material.current_stock,
                ledger_stock=ledger_stock,
                movement_count=count,
            )
            if result.consistent:
                logger.info("stock_reconciled", material_id=material_id, stock=str(ledger_stock))
                return result

            logger.warning(
                "stock_drift_detected",
                material_id=material_id,
                cached=str(material.current_stock),
                ledger=str(ledger_stock),
                drift=str(result.drift),
            )
            await self._ledger.repair_stock(
                material_id, ledger_stock, expected_version=material.stock_version
            )
            result.repaired = True
            return result

    def iter_movements(self, filters: MovementFilter | None = None) -> AsyncIterator[InventoryMovement]:
        """Lazy, newest-first iteration over the ledger."""
        return self._ledger.iter_movements(filters)

    async def list_movements(
        self,
        filters: MovementFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> MovementPage:
        """One page of movements; the summary covers every match, not just the page."""
        movements = await self._ledger.list_movements(filters, limit=limit, offset=offset)
        summary = MovementSummary()
        async for movement in self._ledger.iter_movements(filters):
            summary.add(movement)
        return MovementPage(movements=movements, summary=summary)

    async def evaluate(self, material_id: str) -> StockAssessment:
        material = await self.get_material(material_id, require_enabled=False)
        return self._alerts.evaluate(material)

    async def low_stock(self, page_size: int = 500) -> list[StockAssessment]:
        """Assess the whole enabled catalog, read in pages of ``page_size``."""
        alerts: list[StockAssessment] = []
        offset = 0
        while True:
            materials = await self._materials.list_materials(
                enabled_only=True, limit=page_size, offset=offset
            )
            alerts.extend(self._alerts.low_stock(materials))
            if len(materials) < page_size:
                break
            offset += page_size
        return sorted(alerts, key=lambda a: a.current_stock)
