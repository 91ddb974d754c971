from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from donation_api.core import errors
from donation_api.core.config import Settings, get_settings
from donation_api.db.session import get_db
from donation_api.models.admin_session import AdminSession
from donation_api.services.auth_service import CredentialValidator, PlaintextSessionValidator
from donation_api.services.blob_store import BlobStore, LocalBlobStore
from donation_api.services.payment_gateway import MidtransClient

security = HTTPBearer(auto_error=False)


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> MidtransClient:
    return MidtransClient(server_key=settings.midtrans_server_key)


def get_blob_store(settings: Settings = Depends(get_settings)) -> BlobStore:
    return LocalBlobStore(settings.upload_dir, settings.public_files_base_url)


def get_credential_validator(settings: Settings = Depends(get_settings)) -> CredentialValidator:
    return PlaintextSessionValidator(settings.admin_password)


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    validator: CredentialValidator = Depends(get_credential_validator),
) -> AdminSession:
    """Missing, malformed, unknown and expired tokens all get the same 401."""
    token = credentials.credentials if credentials else None
    session = await validator.validate(db, token)
    if session is None:
        raise errors.unauthorized()
    return session
