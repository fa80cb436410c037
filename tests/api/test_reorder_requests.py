"""API tests for reorder request endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from stockledger.api.dependencies import (
    get_create_reorder_request_use_case,
    get_get_reorder_request_use_case,
    get_list_reorder_requests_use_case,
    get_transition_reorder_request_use_case,
)
from stockledger.api.main import app
from stockledger.application.use_cases import (
    CreateReorderRequestUseCase,
    GetReorderRequestUseCase,
    ListReorderRequestsUseCase,
    TransitionReorderRequestUseCase,
)
from stockledger.core.entities import (
    Actor,
    InventoryMovement,
    MovementType,
    ReorderAction,
    ReorderRequest,
    ReorderStatus,
    ReorderSummary,
)
from stockledger.core.exceptions import (
    ApprovalNotAuthorizedError,
    DuplicateReorderRequestError,
    InvalidQuantityError,
    InvalidStateTransitionError,
    MissingTransitionFieldError,
    ReorderRequestNotFoundError,
)
from stockledger.core.services.reorder_workflow import ReorderPage, TransitionOutcome

BASE = "/api/inventory/reorder-requests"


@pytest.fixture
def workflow_service():
    return AsyncMock()


@pytest.fixture(autouse=True)
def override_use_cases(workflow_service):
    app.dependency_overrides[get_create_reorder_request_use_case] = lambda: (
        CreateReorderRequestUseCase(workflow_service)
    )
    app.dependency_overrides[get_transition_reorder_request_use_case] = lambda: (
        TransitionReorderRequestUseCase(workflow_service)
    )
    app.dependency_overrides[get_list_reorder_requests_use_case] = lambda: (
        ListReorderRequestsUseCase(workflow_service)
    )
    app.dependency_overrides[get_get_reorder_request_use_case] = lambda: (
        GetReorderRequestUseCase(workflow_service)
    )


def _request(status: ReorderStatus = ReorderStatus.PENDING, **kwargs) -> ReorderRequest:
    return ReorderRequest(
        id="REQ-1",
        material_id="MAT-001",
        requested_quantity=Decimal("20"),
        status=status,
        requested_by="user-worker",
        **kwargs,
    )


class TestCreate:
    async def test_created(self, async_client, workflow_service):
        workflow_service.create_request.return_value = _request()

        response = await async_client.post(
            BASE,
            json={"material_id": "MAT-001", "requested_quantity": "20"},
            headers={"X-Actor-Id": "user-worker"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["allowed_actions"] == ["approve", "reject", "cancel"]
        assert workflow_service.create_request.call_args.kwargs["actor"].id == "user-worker"

    async def test_duplicate_pending(self, async_client, workflow_service):
        workflow_service.create_request.side_effect = DuplicateReorderRequestError(
            "MAT-001", "REQ-1"
        )

        response = await async_client.post(
            BASE, json={"material_id": "MAT-001", "requested_quantity": "20"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_REORDER_REQUEST"

    async def test_non_positive_quantity(self, async_client, workflow_service):
        workflow_service.create_request.side_effect = InvalidQuantityError(
            "Requested quantity must be positive, got 0"
        )

        response = await async_client.post(
            BASE, json={"material_id": "MAT-001", "requested_quantity": "0"}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_QUANTITY"


class TestRead:
    async def test_get(self, async_client, workflow_service):
        workflow_service.get_request.return_value = _request(ReorderStatus.APPROVED)

        response = await async_client.get(f"{BASE}/REQ-1")

        assert response.status_code == 200
        assert response.json()["allowed_actions"] == ["order", "cancel"]

    async def test_get_not_found(self, async_client, workflow_service):
        workflow_service.get_request.side_effect = ReorderRequestNotFoundError("nope")

        response = await async_client.get(f"{BASE}/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "REORDER_REQUEST_NOT_FOUND"

    async def test_list_by_status(self, async_client, workflow_service):
        requests = [_request()]
        workflow_service.list_requests.return_value = ReorderPage(
            requests=requests, summary=ReorderSummary.from_requests(requests)
        )

        response = await async_client.get(BASE, params={"status": "PENDING"})

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["by_status"]["PENDING"]["count"] == 1
        assert workflow_service.list_requests.call_args.args[0].status is ReorderStatus.PENDING


class TestTransition:
    async def test_approve_with_role_header(self, async_client, workflow_service):
        workflow_service.transition.return_value = TransitionOutcome(
            request=_request(ReorderStatus.APPROVED, approved_by="boss"),
            previous_status=ReorderStatus.PENDING,
        )

        response = await async_client.post(
            f"{BASE}/REQ-1/transition",
            json={"action": "approve"},
            headers={"X-Actor-Id": "boss", "X-Actor-Role": "SUPERVISOR"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["previous_status"] == "PENDING"
        assert data["request"]["status"] == "APPROVED"
        args = workflow_service.transition.call_args.args
        assert args[1] is ReorderAction.APPROVE
        assert args[2] == Actor(id="boss", role="SUPERVISOR")

    async def test_receive_returns_movement(self, async_client, workflow_service):
        workflow_service.transition.return_value = TransitionOutcome(
            request=_request(ReorderStatus.RECEIVED),
            previous_status=ReorderStatus.ORDERED,
            movement=InventoryMovement(
                id="MOV-R",
                material_id="MAT-001",
                type=MovementType.PURCHASE,
                quantity=Decimal("20"),
                reorder_request_id="REQ-1",
            ),
        )

        response = await async_client.post(f"{BASE}/REQ-1/transition", json={"action": "receive"})

        assert response.status_code == 200
        assert response.json()["movement"]["reorder_request_id"] == "REQ-1"

    @pytest.mark.parametrize(
        "error,error_code",
        [
            (
                InvalidStateTransitionError("REQ-1", "PENDING", "receive"),
                "INVALID_STATE_TRANSITION",
            ),
            (
                MissingTransitionFieldError("REQ-1", "PENDING", "reject", "rejection_reason"),
                "MISSING_TRANSITION_FIELD",
            ),
            (
                ApprovalNotAuthorizedError("REQ-1", "PENDING", "approve", "user-worker"),
                "NOT_AUTHORIZED",
            ),
        ],
    )
    async def test_rejected_transitions_are_conflicts(
        self, async_client, workflow_service, error, error_code
    ):
        workflow_service.transition.side_effect = error

        response = await async_client.post(f"{BASE}/REQ-1/transition", json={"action": "approve"})

        assert response.status_code == 409
        assert response.json()["error_code"] == error_code

    async def test_unknown_action(self, async_client, workflow_service):
        response = await async_client.post(f"{BASE}/REQ-1/transition", json={"action": "ship"})

        assert response.status_code == 422
        workflow_service.transition.assert_not_awaited()
