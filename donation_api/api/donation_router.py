from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.api.schemas import DonationCreatedResponse, DonationFeedResponse, StatsResponse
from donation_api.core import errors
from donation_api.core.config import Settings, get_settings
from donation_api.core.dependencies import get_payment_gateway
from donation_api.db.session import get_db
from donation_api.services import donation_service, stats_service
from donation_api.services.pagination import parse_pagination
from donation_api.services.payment_gateway import MidtransClient
from donation_api.services.validation import validate_donation

router = APIRouter()


def callback_origin(request: Request, settings: Settings) -> str:
    if settings.site_url:
        return settings.site_url.rstrip("/")
    return f"{request.url.scheme}://{request.url.netloc}"


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    return await stats_service.get_stats(db)


@router.get("/donations", response_model=DonationFeedResponse, response_model_exclude_none=True)
async def list_donations(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    pagination = parse_pagination(page, limit)
    donations, total_count = await donation_service.list_public_donations(db, pagination)
    return {"donations": donations, "pagination": pagination.meta(total_count)}


@router.post("/donations", response_model=DonationCreatedResponse)
async def create_donation(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    gateway: MidtransClient = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Records a pending donation and opens a Midtrans Snap session for it.
    Body:
    {
      "name": "Budi",
      "email": "budi@example.com",
      "phone": "081234567890",   # optional
      "amount": 50000,           # rupiah, before the 0.7% gateway fee
      "message": "Semangat!",    # optional
      "anonymous": false
    }
    """
    if not settings.donations_open:
        raise errors.donations_closed()

    donation_in = validate_donation(payload)
    return await donation_service.create_donation(
        db, donation_in, gateway, callback_origin(request, settings)
    )
