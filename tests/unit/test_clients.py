"""Unit tests for payment, storage and availability collaborators"""

import httpx
import pytest
from datetime import date
from unittest.mock import AsyncMock, patch

from driveflow.domain.exceptions import PaymentFailedError, StorageError
from driveflow.domain.models import PaymentMethod
from driveflow.infrastructure.clients.availability import StoreAvailabilityChecker
from driveflow.infrastructure.clients.payment import PaymentGatewayClient
from driveflow.infrastructure.clients.storage import StorageClient, build_object_path
from driveflow.infrastructure.database.repositories import BookingRepository


def gateway_response(status_code: int, payload: dict | None = None) -> httpx.Response:
    return httpx.Response(
        status_code,
        json=payload or {},
        request=httpx.Request("POST", "http://payments.test/payments/charge"),
    )


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_gateway_success(mock_post: AsyncMock):
    mock_post.return_value = gateway_response(200, {"success": True, "reference": "QGH7TR2"})
    client = PaymentGatewayClient(base_url="http://payments.test")

    result = await client.charge_difference(1_500_000, PaymentMethod.MPESA, "key-1")

    assert result.success
    assert result.reference == "QGH7TR2"
    _, kwargs = mock_post.call_args
    assert kwargs["json"] == {"amount_cents": 1_500_000, "method": "mpesa"}
    assert kwargs["headers"]["Idempotency-Key"] == "key-1"


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_gateway_decline_is_unsuccessful_result(mock_post: AsyncMock):
    mock_post.return_value = gateway_response(200, {"success": False, "message": "Insufficient funds"})

    result = await PaymentGatewayClient(base_url="http://payments.test").charge_difference(100, PaymentMethod.CARD, "key-2")

    assert not result.success
    assert result.message == "Insufficient funds"


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_gateway_http_error_raises(mock_post: AsyncMock):
    mock_post.return_value = gateway_response(502)

    with pytest.raises(PaymentFailedError, match="502"):
        await PaymentGatewayClient(base_url="http://payments.test").charge_difference(100, PaymentMethod.MPESA, "key-3")


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_gateway_timeout_raises(mock_post: AsyncMock):
    mock_post.side_effect = httpx.ReadTimeout("slow")

    with pytest.raises(PaymentFailedError, match="timeout"):
        await PaymentGatewayClient(base_url="http://payments.test", timeout=1.0).charge_difference(100, PaymentMethod.MPESA, "key-3")


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_storage_upload_returns_public_url(mock_post: AsyncMock):
    mock_post.return_value = gateway_response(200, {"Key": "fleet-media/units/x.jpg"})
    storage = StorageClient(base_url="http://storage.test", bucket="fleet-media", api_key="k")

    url = await storage.upload(b"\xff\xd8", "front.jpg", "units")

    assert url.startswith("http://storage.test/storage/v1/object/public/fleet-media/units/")
    assert url.endswith(".jpg")
    args, kwargs = mock_post.call_args
    assert args[0].startswith("http://storage.test/storage/v1/object/fleet-media/units/")
    assert kwargs["headers"]["Content-Type"] == "image/jpeg"


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
async def test_storage_error_raises(mock_post: AsyncMock):
    mock_post.return_value = gateway_response(409)

    with pytest.raises(StorageError):
        await StorageClient(base_url="http://storage.test").upload(b"data", "id.png", "kyc")


def test_object_path_is_unique_and_keeps_extension():
    first = build_object_path("licence.PNG", "kyc/")
    second = build_object_path("licence.PNG", "kyc")

    assert first.startswith("kyc/") and first.endswith(".PNG")
    assert first != second
    assert build_object_path("noext", "units").endswith(".bin")


async def test_store_checker_detects_overlap(db, make_booking, fleet_unit):
    extended = make_booking(start=date(2025, 11, 20), end=date(2025, 11, 28))
    make_booking(start=date(2025, 12, 3), end=date(2025, 12, 6), status="pending")

    checker = StoreAvailabilityChecker(BookingRepository(db), exclude_booking_id=extended.id)

    assert await checker.check_availability(fleet_unit.id, date(2025, 11, 29), date(2025, 12, 2))
    assert not await checker.check_availability(fleet_unit.id, date(2025, 11, 29), date(2025, 12, 3))


async def test_store_checker_ignores_cancelled_and_own_booking(db, make_booking, fleet_unit):
    extended = make_booking(start=date(2025, 11, 20), end=date(2025, 11, 28))
    make_booking(start=date(2025, 11, 30), end=date(2025, 12, 2), status="cancelled")

    checker = StoreAvailabilityChecker(BookingRepository(db), exclude_booking_id=extended.id)

    assert await checker.check_availability(fleet_unit.id, date(2025, 11, 20), date(2025, 12, 5))
