"""
Tests for the SSLCommerz IPN endpoint.
"""

import pytest
from decimal import Decimal

from sqlalchemy import func, select

from storefront.fsm.states import PaymentStatus
from storefront.models.enrollment import Enrollment
from storefront.models.payment import Payment

IPN_PATH = "/webhooks/sslcommerz/ipn"


async def add_ssl_payment(db, profile, course, transaction_id="TXN_1") -> Payment:
    payment = Payment(
        user_id=profile.id,
        course_id=course.id,
        amount=Decimal("2500"),
        status=PaymentStatus.PENDING.value,
        payment_method="sslcommerz",
        transaction_id=transaction_id,
        gateway_session_id="SESSION1",
    )
    db.add(payment)
    await db.commit()
    return payment


async def enrollment_count(db) -> int:
    return (await db.execute(select(func.count()).select_from(Enrollment))).scalar_one()


@pytest.mark.asyncio
async def test_ipn_failed_validation(client, db, fake_gateway, profile, course, gateway_settings):
    """FAILED notification: payment marked failed, no enrollment, still 200 OK."""
    await add_ssl_payment(db, profile, course)
    fake_gateway.on("/validationserverAPI.php", {"status": "FAILED", "tran_id": "TXN_1"})

    response = await client.post(
        IPN_PATH,
        data={"tran_id": "TXN_1", "status": "FAILED", "amount": "2500.00", "val_id": "v1"},
    )

    assert response.status_code == 200
    assert response.text == "OK"

    payment = (await db.execute(select(Payment))).scalar_one()
    assert payment.status == "failed"
    assert await enrollment_count(db) == 0


@pytest.mark.asyncio
async def test_ipn_valid_payment(client, db, fake_gateway, profile, course, gateway_settings):
    await add_ssl_payment(db, profile, course)
    fake_gateway.on("/validationserverAPI.php", {
        "status": "VALIDATED",
        "tran_id": "TXN_1",
        "bank_tran_id": "BANK1",
    })

    response = await client.post(
        IPN_PATH,
        data={"tran_id": "TXN_1", "status": "VALID", "amount": "2500.00", "val_id": "v1"},
    )

    assert response.status_code == 200
    payment = (await db.execute(select(Payment))).scalar_one()
    assert payment.status == "completed"
    assert payment.gateway_transaction_id == "BANK1"
    assert await enrollment_count(db) == 1

    # Gateway retries the same notification
    again = await client.post(
        IPN_PATH,
        data={"tran_id": "TXN_1", "status": "VALID", "amount": "2500.00", "val_id": "v1"},
    )
    assert again.status_code == 200
    assert await enrollment_count(db) == 1
    assert len(fake_gateway.calls("/validationserverAPI.php")) == 1


@pytest.mark.asyncio
async def test_ipn_without_val_id(client, db, fake_gateway, profile, course, gateway_settings):
    await add_ssl_payment(db, profile, course)

    response = await client.post(IPN_PATH, data={"tran_id": "TXN_1", "status": "FAILED"})

    assert response.status_code == 200
    assert fake_gateway.requests == []
    payment = (await db.execute(select(Payment))).scalar_one()
    assert payment.status == "pending"


@pytest.mark.asyncio
async def test_ipn_unknown_transaction(client, db, fake_gateway, gateway_settings):
    fake_gateway.on("/validationserverAPI.php", {"status": "VALID", "tran_id": "TXN_404"})

    response = await client.post(
        IPN_PATH, data={"tran_id": "TXN_404", "status": "VALID", "val_id": "v404"}
    )

    assert response.status_code == 200
    assert await enrollment_count(db) == 0


@pytest.mark.asyncio
async def test_ipn_validator_unreachable(client, db, fake_gateway, profile, course, gateway_settings):
    """Internal errors answer 500 so the notification is delivered again."""
    await add_ssl_payment(db, profile, course)
    fake_gateway.on("/validationserverAPI.php", status_code=503, text="down")

    response = await client.post(
        IPN_PATH, data={"tran_id": "TXN_1", "status": "VALID", "val_id": "v1"}
    )

    assert response.status_code == 500
    assert response.text == "Error"


@pytest.mark.asyncio
async def test_ipn_rejects_get(client):
    response = await client.get(IPN_PATH)
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_ipn_preflight(client):
    response = await client.options(IPN_PATH)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_cors_preflight(client):
    response = await client.options(
        IPN_PATH,
        headers={
            "Origin": "https://shop.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "POST"])
async def test_unknown_path_is_not_found(client, method):
    response = await client.request(method, "/no/such/route")
    assert response.status_code == 404
