import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.api.schemas import (
    ActivityCreate,
    ActivityCreatedResponse,
    ActivityOut,
    DisbursementCreate,
    DisbursementCreatedResponse,
    DisbursementOut,
    LoginRequest,
    LoginResponse,
    LogSinkConfig,
    UploadResponse,
)
from donation_api.core import errors
from donation_api.core.config import Settings, get_settings
from donation_api.core.dependencies import get_blob_store, get_credential_validator, require_admin
from donation_api.db.session import get_db
from donation_api.services import disbursement_service
from donation_api.services.auth_service import CredentialValidator, expires_at_iso
from donation_api.services.blob_store import (
    ALLOWED_CONTENT_TYPES,
    MAX_UPLOAD_BYTES,
    BlobStore,
    build_file_key,
)

admin_router = APIRouter(prefix="/api/admin")
logger = logging.getLogger(__name__)


@admin_router.post("/login", response_model=LoginResponse)
async def admin_login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    validator: CredentialValidator = Depends(get_credential_validator),
):
    if not body.password:
        raise errors.missing_required_field("password")

    session = await validator.login(db, body.password)
    if session is None:
        logger.warning("Failed admin login attempt")
        raise errors.invalid_credentials()

    logger.info("Admin login successful", extra={"session_id": session.id})
    return {"token": session.token, "expires_at": expires_at_iso(session.expires_at)}


@admin_router.get(
    "/disbursements",
    response_model=list[DisbursementOut],
    dependencies=[Depends(require_admin)],
)
async def admin_list_disbursements(db: AsyncSession = Depends(get_db)):
    return await disbursement_service.list_all_disbursements(db)


@admin_router.post(
    "/disbursements",
    response_model=DisbursementCreatedResponse,
    dependencies=[Depends(require_admin)],
)
async def admin_create_disbursement(body: DisbursementCreate, db: AsyncSession = Depends(get_db)):
    disbursement = await disbursement_service.create_disbursement(db, body.amount, body.description)
    logger.info(
        "Disbursement created",
        extra={"disbursement_id": disbursement.id, "amount": disbursement.amount},
    )
    return {"success": True, "disbursement_id": disbursement.id}


@admin_router.get(
    "/disbursements/{disbursement_id}/activities",
    response_model=list[ActivityOut],
    dependencies=[Depends(require_admin)],
)
async def admin_list_activities(disbursement_id: int, db: AsyncSession = Depends(get_db)):
    return await disbursement_service.list_activities(db, disbursement_id)


@admin_router.post(
    "/disbursements/{disbursement_id}/activities",
    response_model=ActivityCreatedResponse,
    dependencies=[Depends(require_admin)],
)
async def admin_create_activity(
    disbursement_id: int,
    body: ActivityCreate,
    db: AsyncSession = Depends(get_db),
):
    activity = await disbursement_service.create_activity(
        db,
        disbursement_id,
        activity_time=body.activity_time,
        description=body.description,
        files=[f.model_dump() for f in body.files],
    )
    logger.info(
        "Disbursement activity created",
        extra={"disbursement_id": disbursement_id, "activity_id": activity.id},
    )
    return {"success": True, "activity_id": activity.id}


@admin_router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(require_admin)],
)
async def admin_upload(
    file: Optional[UploadFile] = File(None),
    store: BlobStore = Depends(get_blob_store),
):
    """Store an evidence file (photo, receipt, video) and return its public URL."""
    if file is None:
        raise errors.validation_error("No file provided")

    # At most one byte past the limit
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise errors.validation_error(
            "File size exceeds 10MB limit",
            {"max_size": MAX_UPLOAD_BYTES, "file_size": file.size or len(data)},
        )

    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise errors.validation_error(
            "File type not allowed",
            {"allowed_types": list(ALLOWED_CONTENT_TYPES), "file_type": content_type},
        )

    key = build_file_key(file.filename)
    url = await store.put(key, data, content_type)
    logger.info(
        "File uploaded successfully",
        extra={"file_key": key, "file_size": len(data), "file_type": content_type},
    )
    return {
        "success": True,
        "file_url": url,
        "file_key": key,
        "file_name": file.filename or key,
        "file_size": len(data),
        "file_type": content_type,
    }


@admin_router.get(
    "/grafana-config",
    response_model=LogSinkConfig,
    dependencies=[Depends(require_admin)],
)
async def admin_log_sink_config(settings: Settings = Depends(get_settings)):
    return {"enabled": settings.log_sink_enabled}
