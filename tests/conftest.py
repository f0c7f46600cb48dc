"""Shared fakes: manual clock, in-memory processor and gateway, app client."""
import itertools

import pytest
from fastapi.testclient import TestClient

from app.artifacts.lifecycle import LifecycleController
from app.artifacts.store import ArtifactStore
from app.services.payments.base import (
    CheckoutHandle,
    CheckoutStatus,
    EventVerificationError,
    GatewayEvent,
    PaymentGateway,
    PaymentGatewayError,
)
from app.services.processing.base import (
    DocumentProcessingError,
    DocumentProcessor,
    ProcessedDocument,
)

TTL = 600


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProcessor(DocumentProcessor):
    def __init__(self) -> None:
        self.fail_with: str | None = None
        self.calls: list[tuple[bytes, str]] = []

    def is_available(self) -> bool:
        return True

    def process(self, file_bytes: bytes, file_name: str) -> ProcessedDocument:
        self.calls.append((file_bytes, file_name))
        if self.fail_with:
            raise DocumentProcessingError(self.fail_with, {"status_code": 500})
        text = file_bytes.decode("utf-8", "replace")
        return ProcessedDocument(
            content=f"fixed:{text}",
            file_name=file_name,
            original_length=len(text),
            fixed_length=len(text),
        )


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.fail = False
        self.sessions: dict[str, CheckoutStatus] = {}
        self._ids = itertools.count(1)

    def is_available(self) -> bool:
        return True

    def create_checkout(self, artifact_id: str, display_name: str) -> CheckoutHandle:
        if self.fail:
            raise PaymentGatewayError("timed out")
        checkout_id = f"cs_test_{next(self._ids)}"
        self.sessions[checkout_id] = CheckoutStatus(
            id=checkout_id,
            paid=False,
            payment_status="unpaid",
            artifact_id=artifact_id,
            metadata={"fileId": artifact_id, "fileName": display_name},
        )
        return CheckoutHandle(id=checkout_id, url=f"https://checkout.test/{checkout_id}")

    def pay(self, checkout_id: str) -> None:
        status = self.sessions[checkout_id]
        status.paid = True
        status.payment_status = "paid"

    def get_checkout(self, checkout_id: str) -> CheckoutStatus:
        if self.fail:
            raise PaymentGatewayError("gateway down", {"http_status": 503})
        if checkout_id not in self.sessions:
            raise PaymentGatewayError("No such checkout.session", {"http_status": 404})
        return self.sessions[checkout_id]

    def parse_event(self, payload: bytes, signature: str | None) -> GatewayEvent:
        raise EventVerificationError("fake gateway does not sign events")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> ArtifactStore:
    return ArtifactStore(ttl_seconds=TTL, clock=clock)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor()


@pytest.fixture
def controller(store: ArtifactStore, gateway: FakeGateway) -> LifecycleController:
    return LifecycleController(store, gateway)


@pytest.fixture
def client(store, processor, gateway) -> TestClient:
    from app.main import create_app

    return TestClient(create_app(store=store, processor=processor, gateway=gateway))
