"""
Reorder Workflow service.

Drives a reorder request through the state machine defined in
``core.entities.reorder``. Every transition is validated against the
transition table and its guard before anything is written, and the
store only applies it if the request is still in the status that was
validated.

Receipt is the one transition that touches stock: the status change and
the PURCHASE movement are committed by the store in a single transaction.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from stockledger.config import get_logger
from stockledger.core.entities.actor import Actor
from stockledger.core.entities.inventory import InventoryMovement, MovementType
from stockledger.core.entities.reorder import (
    ReorderAction,
    ReorderFilter,
    ReorderRequest,
    ReorderStatus,
    ReorderSummary,
    TransitionPayload,
    next_status,
)
from stockledger.core.entities.stock import StockAssessment
from stockledger.core.exceptions import (
    ApprovalNotAuthorizedError,
    DuplicateReorderRequestError,
    InvalidQuantityError,
    InvalidStateTransitionError,
    MissingTransitionFieldError,
    ReorderRequestNotFoundError,
)
from stockledger.core.interfaces.reorder_store import IReorderStore
from stockledger.core.services.keyed_lock import KeyedLock
from stockledger.core.services.movement_ledger import MovementLedgerService

logger = get_logger(__name__)

DEFAULT_APPROVER_ROLES = ["ADMIN", "SUPERVISOR"]


@dataclass
class TransitionOutcome:
    """A committed transition; receipt also carries the booked movement."""

    request: ReorderRequest
    previous_status: ReorderStatus
    movement: InventoryMovement | None = None
    assessment: StockAssessment | None = None


@dataclass
class ReorderPage:
    requests: list[ReorderRequest]
    summary: ReorderSummary = field(default_factory=ReorderSummary)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class ReorderWorkflowService:
    """Creates reorder requests and applies workflow transitions."""

    def __init__(
        self,
        reorder_store: IReorderStore,
        ledger: MovementLedgerService,
        locks: KeyedLock | None = None,
        approver_roles: list[str] | None = None,
        allow_duplicate_pending: bool = False,
    ) -> None:
        self._store = reorder_store
        self._ledger = ledger
        self._locks = locks or KeyedLock()
        self._approver_roles = approver_roles or list(DEFAULT_APPROVER_ROLES)
        self._allow_duplicates = allow_duplicate_pending

    def is_approver(self, actor: Actor) -> bool:
        return actor.has_role(self._approver_roles)

    # ------------------------------------------------------------------
    # Create / read

    async def create_request(
        self,
        material_id: str,
        requested_quantity: Decimal,
        notes: str | None = None,
        actor: Actor | None = None,
    ) -> ReorderRequest:
        """
        Open a PENDING request for a material.

        Raises:
            InvalidQuantityError: quantity is not a positive number.
            MaterialNotFoundError / MaterialDisabledError: unknown or disabled material.
            DuplicateReorderRequestError: a PENDING request already exists.
        """
        if not requested_quantity.is_finite() or requested_quantity <= 0:
            raise InvalidQuantityError(
                f"Requested quantity must be positive, got {requested_quantity}",
                details={"material_id": material_id, "quantity": str(requested_quantity)},
            )

        async with self._locks.hold(f"reorder-create:{material_id}"):
            await self._ledger.get_material(material_id)

            if not self._allow_duplicates:
                existing = await self._store.find_pending(material_id)
                if existing is not None:
                    raise DuplicateReorderRequestError(material_id, existing.id or "")

            request = await self._store.create_request(
                ReorderRequest(
                    material_id=material_id,
                    requested_quantity=requested_quantity,
                    notes=notes,
                    requested_by=actor.id if actor else None,
                )
            )

        logger.info(
            "reorder_request_created",
            request_id=request.id,
            material_id=material_id,
            quantity=str(requested_quantity),
            requested_by=request.requested_by,
        )
        return request

    async def get_request(self, request_id: str) -> ReorderRequest:
        request = await self._store.get_request(request_id)
        if request is None:
            raise ReorderRequestNotFoundError(request_id)
        return request

    async def list_requests(
        self,
        filters: ReorderFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> ReorderPage:
        requests = await self._store.list_requests(filters, limit=limit, offset=offset)
        summary = ReorderSummary()
        async for request in self._store.iter_requests(filters):
            summary.add(request)
        return ReorderPage(requests=requests, summary=summary)

    def iter_requests(self, filters: ReorderFilter | None = None) -> AsyncIterator[ReorderRequest]:
        return self._store.iter_requests(filters)

    # ------------------------------------------------------------------
    # Transitions

    async def transition(
        self,
        request_id: str,
        action: ReorderAction,
        actor: Actor,
        payload: TransitionPayload | None = None,
    ) -> TransitionOutcome:
        """
        Apply one workflow action.

        Raises:
            ReorderRequestNotFoundError: unknown request.
            InvalidStateTransitionError: the action is not legal from the
                current status, or its guard fails. Nothing is written.
            ConcurrencyConflictError: the request (or the material's stock)
                changed between validation and commit.
        """
        payload = payload or TransitionPayload()

        async with self._locks.hold(f"reorder:{request_id}"):
            request = await self.get_request(request_id)
            target = next_status(request.status, action)
            if target is None:
                raise InvalidStateTransitionError(request_id, request.status.value, action.value)

            self._check_guard(request, action, actor, payload)

            if action is ReorderAction.RECEIVE:
                outcome = await self._receive(request, actor)
            else:
                updated = self._apply(request, target, action, actor, payload)
                saved = await self._store.save_transition(updated, expected_status=request.status)
                outcome = TransitionOutcome(request=saved, previous_status=request.status)

        logger.info(
            "reorder_request_transitioned",
            request_id=request_id,
            action=action.value,
            from_status=outcome.previous_status.value,
            to_status=outcome.request.status.value,
            actor_id=actor.id,
        )
        return outcome

    def _check_guard(
        self,
        request: ReorderRequest,
        action: ReorderAction,
        actor: Actor,
        payload: TransitionPayload,
    ) -> None:
        request_id = request.id or ""
        status = request.status.value

        if action in (ReorderAction.APPROVE, ReorderAction.REJECT):
            if not self.is_approver(actor):
                raise ApprovalNotAuthorizedError(request_id, status, action.value, actor.id)
        if action is ReorderAction.REJECT and _blank(payload.rejection_reason):
            raise MissingTransitionFieldError(request_id, status, action.value, "rejection_reason")
        if action is ReorderAction.ORDER and _blank(payload.order_number):
            raise MissingTransitionFieldError(request_id, status, action.value, "order_number")
        if action is ReorderAction.CANCEL:
            if actor.id != request.requested_by and not self.is_approver(actor):
                raise ApprovalNotAuthorizedError(request_id, status, action.value, actor.id)

    @staticmethod
    def _apply(
        request: ReorderRequest,
        target: ReorderStatus,
        action: ReorderAction,
        actor: Actor,
        payload: TransitionPayload,
    ) -> ReorderRequest:
        now = datetime.now(UTC)
        changes: dict = {"status": target}
        if payload.notes:
            changes["notes"] = payload.notes

        if action is ReorderAction.APPROVE:
            changes.update(approved_at=now, approved_by=actor.id)
        elif action is ReorderAction.REJECT:
            changes.update(
                rejected_at=now,
                rejected_by=actor.id,
                rejection_reason=(payload.rejection_reason or "").strip(),
            )
        elif action is ReorderAction.ORDER:
            changes.update(ordered_at=now, order_number=(payload.order_number or "").strip())
        elif action is ReorderAction.CANCEL:
            changes.update(cancelled_at=now, cancelled_by=actor.id)
        elif action is ReorderAction.RECEIVE:
            changes.update(received_at=now, received_by=actor.id)

        return request.model_copy(update=changes)

    async def _receive(self, request: ReorderRequest, actor: Actor) -> TransitionOutcome:
        """Book the PURCHASE movement and mark RECEIVED in one commit."""
        async with self._ledger.material_lock(request.material_id):
            material = await self._ledger.get_material(request.material_id)
            movement = self._ledger.prepare_movement(
                material,
                MovementType.PURCHASE,
                request.requested_quantity,
                unit_cost=material.unit_cost,
                reference=request.order_number or "Reorder",
                notes=f"Received from reorder request {request.id}",
                actor=actor,
                reorder_request_id=request.id,
            )
            updated = self._apply(
                request, ReorderStatus.RECEIVED, ReorderAction.RECEIVE, actor, TransitionPayload()
            )
            saved, movement, material = await self._store.commit_receipt(
                updated,
                expected_status=request.status,
                movement=movement,
                expected_version=material.stock_version,
            )

        logger.info(
            "reorder_receipt_booked",
            request_id=saved.id,
            movement_id=movement.id,
            material_id=material.id,
            quantity=str(movement.quantity),
            new_stock=str(material.current_stock),
        )
        assessment = self._ledger.publish(material, movement)
        return TransitionOutcome(
            request=saved,
            previous_status=request.status,
            movement=movement,
            assessment=assessment,
        )
