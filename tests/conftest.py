"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Reloj fake (FakeClock) que registra cada espera de backoff/polling
- Transporte in-memory programable (StubSupplierTransport)
- Bundle de casos de uso y cliente HTTP de prueba (FastAPI TestClient)
- Reset del circuit breaker antes y después de cada test
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from hotel_booking.api.dependencies import build_use_cases, get_use_cases
from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.interfaces.clock import FakeClock
from hotel_booking.application.interfaces.partner_order_id_generator import (
    FakePartnerOrderIdGenerator,
)
from hotel_booking.application.use_cases.order_form import OrderFormUseCase
from hotel_booking.application.use_cases.recover_order import OrderRecoveryResolver
from hotel_booking.config import Settings
from hotel_booking.infrastructure.circuit_breaker import reset_supplier_breaker
from hotel_booking.infrastructure.in_memory.supplier_transport import StubSupplierTransport
from hotel_booking.main import app


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests across several layers or the HTTP API")


@pytest.fixture(autouse=True)
def _reset_circuit_breaker():
    reset_supplier_breaker()
    yield
    reset_supplier_breaker()


# ============================================================================
# FIXTURES DE APLICACIÓN
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(fixed_time=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))


@pytest.fixture
def transport() -> StubSupplierTransport:
    return StubSupplierTransport()


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(user_id="user-42", user_ip="203.0.113.7", language="en")


@pytest.fixture
def order_form_use_case(transport, clock) -> OrderFormUseCase:
    return OrderFormUseCase(
        transport=transport,
        recovery_resolver=OrderRecoveryResolver(transport=transport),
        clock=clock,
    )


@pytest.fixture
def use_cases(transport, clock) -> dict:
    return build_use_cases(
        settings=Settings(use_in_memory=True),
        transport=transport,
        clock=clock,
        partner_order_id_generator=FakePartnerOrderIdGenerator(),
    )


# ============================================================================
# FIXTURES DE API
# ============================================================================


@pytest.fixture
def client(use_cases):
    """TestClient con el bundle de casos de uso apuntando al transporte fake."""
    app.dependency_overrides[get_use_cases] = lambda: use_cases
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
