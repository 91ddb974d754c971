"""Public fundraising totals, computed fresh on every call."""

from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.models.disbursement import Disbursement
from donation_api.models.donation import STATUS_SUCCESS, Donation


async def get_stats(db: AsyncSession) -> Dict[str, int]:
    total_raised = await db.scalar(
        select(func.coalesce(func.sum(Donation.amount), 0)).where(Donation.status == STATUS_SUCCESS)
    )
    total_disbursed = await db.scalar(select(func.coalesce(func.sum(Disbursement.amount), 0)))
    donor_count = await db.scalar(
        select(func.count(Donation.id)).where(Donation.status == STATUS_SUCCESS)
    )
    return {
        "total_raised": int(total_raised or 0),
        "total_disbursed": int(total_disbursed or 0),
        "donor_count": int(donor_count or 0),
    }
