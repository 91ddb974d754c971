import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.core.config import Settings, get_settings
from donation_api.core.dependencies import get_payment_gateway
from donation_api.db.session import get_db
from donation_api.services import donation_service
from donation_api.services.payment_gateway import MidtransClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/midtrans/notification", response_class=PlainTextResponse)
async def midtrans_notification(
    request: Request,
    db: AsyncSession = Depends(get_db),
    gateway: MidtransClient = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Midtrans payment notification.
    Always answers 200 so Midtrans does not keep re-sending; anything that
    goes wrong is only logged.
    """
    try:
        notification = await request.json()
        if not isinstance(notification, dict):
            logger.warning("Midtrans notification is not a JSON object")
            return "OK"

        if settings.midtrans_verify_signature and not gateway.verify_notification(notification):
            logger.warning(
                "Midtrans notification signature mismatch",
                extra={"order_id": notification.get("order_id")},
            )
            return "OK"

        await donation_service.apply_notification(db, notification)
    except Exception:
        logger.exception("Midtrans webhook processing failed")

    return "OK"
