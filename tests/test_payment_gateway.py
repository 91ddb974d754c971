import asyncio
import base64
import json

import httpx
import pytest

from donation_api.services.payment_gateway import MidtransClient


def create(server_key, handler):
    async def call():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = MidtransClient(server_key, http_client=http)
            return await client.create_transaction(
                order_id="DONATION-0123456789ab-1760000000000",
                amount=50350,
                customer_name="Budi Santoso",
                customer_email="budi@example.com",
                origin="https://donasi.example.org",
            )

    return asyncio.run(call())


def test_sandbox_request_shape():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"token": "tok", "redirect_url": "https://pay/tok"})

    result = create("SB-Mid-server-abc", handler)

    assert result == {"token": "tok", "redirect_url": "https://pay/tok"}
    assert seen["url"] == "https://app.sandbox.midtrans.com/snap/v1/transactions"
    assert seen["auth"] == "Basic " + base64.b64encode(b"SB-Mid-server-abc:").decode()
    assert seen["body"] == {
        "transaction_details": {"order_id": "DONATION-0123456789ab-1760000000000", "gross_amount": 50350},
        "customer_details": {"first_name": "Budi Santoso", "email": "budi@example.com"},
        "callbacks": {"finish": "https://donasi.example.org/", "error": "https://donasi.example.org/"},
    }


def test_production_key_uses_production_host():
    seen = {}

    def handler(request):
        seen["host"] = request.url.host
        return httpx.Response(201, json={"token": "tok"})

    create("Mid-server-live", handler)

    assert seen["host"] == "app.midtrans.com"
    assert MidtransClient("Mid-server-live").fallback_payment_url("tok") == "https://app.midtrans.com/snap/v2/vtweb/tok"
    assert (
        MidtransClient("SB-Mid-server-x").fallback_payment_url("tok")
        == "https://app.sandbox.midtrans.com/snap/v2/vtweb/tok"
    )


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error_messages": ["boom"]}),
        httpx.Response(401, text="Unauthorized"),
        httpx.Response(201, text="<html>not json</html>"),
    ],
)
def test_unsuccessful_answers_return_none(response):
    assert create("SB-Mid-server-abc", lambda request: response) is None


@pytest.mark.parametrize("payload", [["x"], "token", None, 42])
def test_non_object_json_returns_none(payload):
    assert create("SB-Mid-server-abc", lambda request: httpx.Response(201, json=payload)) is None


def test_network_error_returns_none():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert create("SB-Mid-server-abc", handler) is None


def test_notification_signature():
    client = MidtransClient("SB-Mid-server-abc")
    notification = {"order_id": "DONATION-x-1", "status_code": "200", "gross_amount": "50350.00"}

    notification["signature_key"] = client.signature_for("DONATION-x-1", "200", "50350.00")
    assert client.verify_notification(notification)

    notification["gross_amount"] = "1.00"
    assert not client.verify_notification(notification)
