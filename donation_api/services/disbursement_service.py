"""Operations for :class:`Disbursement` records and their activity timeline."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from donation_api.core import errors
from donation_api.models.disbursement import ActivityFile, Disbursement, DisbursementActivity
from donation_api.services.pagination import Pagination
from donation_api.services.validation import sanitize_html, sanitize_text

# One statement per level instead of one per row
_TREE_OPTIONS = (
    selectinload(Disbursement.activities).selectinload(DisbursementActivity.files),
)


def serialize_file(file: ActivityFile) -> Dict[str, Any]:
    return {
        "id": file.id,
        "file_url": file.file_url,
        "file_name": file.file_name,
        "file_type": file.file_type,
        "created_at": file.created_at,
    }


def serialize_activity(activity: DisbursementActivity) -> Dict[str, Any]:
    return {
        "id": activity.id,
        "activity_time": activity.activity_time,
        "description": activity.description,
        "created_at": activity.created_at,
        "files": [serialize_file(f) for f in activity.files],
    }


def serialize_disbursement(disbursement: Disbursement) -> Dict[str, Any]:
    return {
        "id": disbursement.id,
        "amount": disbursement.amount,
        "description": disbursement.description,
        "created_at": disbursement.created_at,
        "activities": [serialize_activity(a) for a in disbursement.activities],
    }


async def list_disbursements_page(
    db: AsyncSession, pagination: Pagination
) -> Tuple[List[Dict[str, Any]], int]:
    total_count = await db.scalar(select(func.count(Disbursement.id)))
    result = await db.execute(
        select(Disbursement)
        .options(*_TREE_OPTIONS)
        .order_by(Disbursement.created_at.desc(), Disbursement.id.desc())
        .limit(pagination.limit)
        .offset(pagination.offset)
    )
    return [serialize_disbursement(d) for d in result.scalars().all()], int(total_count or 0)


async def list_all_disbursements(db: AsyncSession) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(Disbursement)
        .options(*_TREE_OPTIONS)
        .order_by(Disbursement.created_at.desc(), Disbursement.id.desc())
    )
    return [serialize_disbursement(d) for d in result.scalars().all()]


async def create_disbursement(db: AsyncSession, amount: int, description: str) -> Disbursement:
    clean_description = sanitize_html(description)
    if amount <= 0 or not clean_description:
        raise errors.validation_error(
            "Invalid disbursement data",
            {"amount": amount, "description": bool(clean_description)},
        )

    disbursement = Disbursement(amount=amount, description=clean_description)
    db.add(disbursement)
    await db.commit()
    await db.refresh(disbursement)
    return disbursement


async def get_disbursement_or_404(db: AsyncSession, disbursement_id: int) -> Disbursement:
    disbursement = await db.get(Disbursement, disbursement_id)
    if disbursement is None:
        raise errors.not_found("Disbursement")
    return disbursement


async def list_activities(db: AsyncSession, disbursement_id: int) -> List[Dict[str, Any]]:
    await get_disbursement_or_404(db, disbursement_id)
    result = await db.execute(
        select(DisbursementActivity)
        .options(selectinload(DisbursementActivity.files))
        .where(DisbursementActivity.disbursement_id == disbursement_id)
        .order_by(DisbursementActivity.activity_time.asc(), DisbursementActivity.id.asc())
    )
    return [serialize_activity(a) for a in result.scalars().all()]


async def create_activity(
    db: AsyncSession,
    disbursement_id: int,
    activity_time: datetime,
    description: str,
    files: Optional[Iterable[Dict[str, Any]]] = None,
) -> DisbursementActivity:
    """Record an activity and its evidence files.

    File entries without both a URL and a name are skipped, not rejected.
    """
    await get_disbursement_or_404(db, disbursement_id)

    clean_description = sanitize_html(description)
    if not clean_description:
        raise errors.missing_required_field("description")

    if activity_time.tzinfo is not None:
        activity_time = activity_time.astimezone(timezone.utc).replace(tzinfo=None)

    activity = DisbursementActivity(
        disbursement_id=disbursement_id,
        activity_time=activity_time,
        description=clean_description,
    )
    db.add(activity)
    await db.flush()

    for file in files or []:
        if not file.get("file_url") or not file.get("file_name"):
            continue
        db.add(
            ActivityFile(
                activity_id=activity.id,
                file_url=sanitize_text(file["file_url"], 500),
                file_name=sanitize_text(file["file_name"], 255),
                file_type=sanitize_text(file.get("file_type"), 50) or None,
            )
        )

    await db.commit()
    await db.refresh(activity)
    return activity
