"""Donation lifecycle: submission, public feed and gateway-driven status changes."""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.core import errors
from donation_api.models.donation import (
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SUCCESS,
    Donation,
)
from donation_api.services.pagination import Pagination
from donation_api.services.payment_gateway import MidtransClient
from donation_api.services.validation import DonationInput

logger = logging.getLogger(__name__)

ORDER_ID_PREFIX = "DONATION"
ANONYMOUS_DONOR_NAME = "Donatur Anonim"

SUCCESS_TRANSACTION_STATUSES = {"capture", "settlement"}
FAILED_TRANSACTION_STATUSES = {"cancel", "deny", "expire"}
TERMINAL_STATUSES = {STATUS_SUCCESS, STATUS_FAILED}


def generate_order_id() -> str:
    """``DONATION-<random>-<epoch ms>``, known before the row is written."""
    return f"{ORDER_ID_PREFIX}-{uuid.uuid4().hex[:12]}-{int(time.time() * 1000)}"


async def create_donation(
    db: AsyncSession,
    donation_in: DonationInput,
    gateway: MidtransClient,
    origin: str,
) -> Dict[str, Any]:
    order_id = generate_order_id()
    donation = Donation(
        name=donation_in.name,
        email=donation_in.email,
        phone=donation_in.phone,
        amount=donation_in.amount,
        message=donation_in.message,
        anonymous=donation_in.anonymous,
        status=STATUS_PENDING,
        order_id=order_id,
    )
    db.add(donation)
    await db.commit()
    await db.refresh(donation)

    session = await gateway.create_transaction(
        order_id=order_id,
        amount=donation_in.total,
        customer_name=donation_in.name,
        customer_email=donation_in.email,
        origin=origin,
    )

    if not isinstance(session, dict) or not session.get("token"):
        donation.status = STATUS_FAILED
        await db.commit()
        logger.error(
            "Payment initialization failed",
            extra={"donation_id": donation.id, "order_id": order_id},
        )
        raise errors.external_service_error("Midtrans", "Payment initialization failed")

    logger.info(
        "Donation created successfully",
        extra={
            "donation_id": donation.id,
            "order_id": order_id,
            "amount": donation_in.amount,
            "fee": donation_in.fee,
        },
    )
    return {
        "donation_id": donation.id,
        "order_id": order_id,
        "payment_url": session.get("redirect_url") or gateway.fallback_payment_url(session["token"]),
    }


def public_donation(donation: Donation) -> Dict[str, Any]:
    """Feed representation: no email or phone, and no name for anonymous donors."""
    item = {
        "name": ANONYMOUS_DONOR_NAME if donation.anonymous else donation.name,
        "amount": donation.amount,
        "created_at": donation.created_at,
    }
    if donation.message:
        item["message"] = donation.message
    return item


async def list_public_donations(
    db: AsyncSession, pagination: Pagination
) -> Tuple[List[Dict[str, Any]], int]:
    total_count = await db.scalar(
        select(func.count(Donation.id)).where(Donation.status == STATUS_SUCCESS)
    )
    result = await db.execute(
        select(Donation)
        .where(Donation.status == STATUS_SUCCESS)
        .order_by(Donation.created_at.desc(), Donation.id.desc())
        .limit(pagination.limit)
        .offset(pagination.offset)
    )
    donations = result.scalars().all()
    return [public_donation(d) for d in donations], int(total_count or 0)


def map_transaction_status(transaction_status: Any, fraud_status: Any) -> Optional[str]:
    """Internal status a Midtrans notification moves a donation to, if any."""
    if fraud_status != "accept":
        return None
    if transaction_status in SUCCESS_TRANSACTION_STATUSES:
        return STATUS_SUCCESS
    if transaction_status in FAILED_TRANSACTION_STATUSES:
        return STATUS_FAILED
    return None


async def apply_notification(db: AsyncSession, notification: Dict[str, Any]) -> Optional[str]:
    """Apply a Midtrans notification; returns the status written, if any.

    The write is a plain ``UPDATE ... WHERE order_id = ?``: replays are
    harmless, but ordering is not enforced, so a late ``cancel`` can still
    overwrite a ``settlement``. That case is logged as a reversal.
    """
    order_id = notification.get("order_id")
    transaction_status = notification.get("transaction_status")
    fraud_status = notification.get("fraud_status")

    new_status = map_transaction_status(transaction_status, fraud_status)
    if new_status is None or not order_id:
        logger.info(
            "Midtrans notification ignored",
            extra={
                "order_id": order_id,
                "transaction_status": transaction_status,
                "fraud_status": fraud_status,
            },
        )
        return None

    previous = await db.scalar(select(Donation.status).where(Donation.order_id == order_id))
    if previous is None:
        logger.warning("Midtrans notification for unknown order", extra={"order_id": order_id})
    elif previous in TERMINAL_STATUSES and previous != new_status:
        logger.warning(
            "webhook status reversal",
            extra={"order_id": order_id, "from_status": previous, "to_status": new_status},
        )

    await db.execute(
        update(Donation).where(Donation.order_id == order_id).values(status=new_status)
    )
    await db.commit()

    log = logger.info if new_status == STATUS_SUCCESS else logger.warning
    log(
        "Payment successful" if new_status == STATUS_SUCCESS else "Payment failed",
        extra={"order_id": order_id, "transaction_status": transaction_status},
    )
    return new_status
