"""Midtrans Snap adapter: turns a donation into a hosted payment session."""

import hashlib
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

PRODUCTION_BASE_URL = "https://app.midtrans.com"
SANDBOX_BASE_URL = "https://app.sandbox.midtrans.com"
SNAP_TRANSACTIONS_PATH = "/snap/v1/transactions"

# Sandbox server keys look like "SB-Mid-server-..."
SANDBOX_KEY_MARKER = "SB-Mid"


class MidtransClient:
    def __init__(self, server_key: Optional[str], http_client: Optional[httpx.AsyncClient] = None):
        self.server_key = server_key or ""
        self._http_client = http_client

    @property
    def is_production(self) -> bool:
        return bool(self.server_key) and SANDBOX_KEY_MARKER not in self.server_key

    @property
    def base_url(self) -> str:
        return PRODUCTION_BASE_URL if self.is_production else SANDBOX_BASE_URL

    @property
    def transactions_url(self) -> str:
        return self.base_url + SNAP_TRANSACTIONS_PATH

    def fallback_payment_url(self, token: str) -> str:
        return f"{self.base_url}/snap/v2/vtweb/{token}"

    async def create_transaction(
        self,
        order_id: str,
        amount: int,
        customer_name: str,
        customer_email: str,
        origin: str,
    ) -> Optional[Dict[str, Any]]:
        """Create a Snap session.

        ``amount`` is the fee-inclusive total. Returns Midtrans' JSON answer
        (``token`` and usually ``redirect_url``) or ``None`` when the call
        did not succeed; no retry is attempted.
        """
        body = {
            "transaction_details": {"order_id": order_id, "gross_amount": amount},
            "customer_details": {"first_name": customer_name, "email": customer_email},
            "callbacks": {"finish": f"{origin}/", "error": f"{origin}/"},
        }

        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, body)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, body)
        except httpx.HTTPError:
            logger.exception("Midtrans request failed", extra={"order_id": order_id})
            return None

        if not response.is_success:
            logger.error(
                "Midtrans API error",
                extra={"order_id": order_id, "status": response.status_code, "error": response.text},
            )
            return None

        try:
            result = response.json()
        except ValueError:
            logger.error("Midtrans returned a non-JSON body", extra={"order_id": order_id})
            return None

        if not isinstance(result, dict):
            logger.error(
                "Midtrans returned an unexpected body",
                extra={"order_id": order_id, "body_type": type(result).__name__},
            )
            return None

        logger.info("Midtrans transaction created", extra={"order_id": order_id, "amount": amount})
        return result

    async def _post(self, client: httpx.AsyncClient, body: Dict[str, Any]) -> httpx.Response:
        return await client.post(
            self.transactions_url,
            json=body,
            auth=(self.server_key, ""),
            headers={"Accept": "application/json"},
        )

    def signature_for(self, order_id: str, status_code: str, gross_amount: str) -> str:
        """Signature Midtrans puts in ``signature_key`` of its notifications."""
        raw = f"{order_id}{status_code}{gross_amount}{self.server_key}"
        return hashlib.sha512(raw.encode("utf-8")).hexdigest()

    def verify_notification(self, notification: Dict[str, Any]) -> bool:
        expected = self.signature_for(
            str(notification.get("order_id", "")),
            str(notification.get("status_code", "")),
            str(notification.get("gross_amount", "")),
        )
        return notification.get("signature_key") == expected
