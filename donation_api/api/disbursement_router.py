from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.api.schemas import DisbursementFeedResponse
from donation_api.db.session import get_db
from donation_api.services import disbursement_service
from donation_api.services.pagination import parse_pagination

router = APIRouter()


@router.get("/disbursements", response_model=DisbursementFeedResponse)
async def list_disbursements(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Public disbursement ledger, each entry with its activity timeline and files."""
    pagination = parse_pagination(page, limit)
    disbursements, total_count = await disbursement_service.list_disbursements_page(db, pagination)
    return {"disbursements": disbursements, "pagination": pagination.meta(total_count)}
