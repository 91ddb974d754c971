from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    total_raised: int
    total_disbursed: int
    donor_count: int


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PublicDonation(BaseModel):
    name: str
    amount: int
    message: Optional[str] = None
    created_at: datetime


class DonationFeedResponse(BaseModel):
    donations: List[PublicDonation]
    pagination: PaginationMeta


class DonationCreatedResponse(BaseModel):
    donation_id: int
    order_id: str
    payment_url: str


class ActivityFileOut(BaseModel):
    id: int
    file_url: str
    file_name: str
    file_type: Optional[str] = None
    created_at: datetime


class ActivityOut(BaseModel):
    id: int
    activity_time: datetime
    description: str
    created_at: datetime
    files: List[ActivityFileOut] = []


class DisbursementOut(BaseModel):
    id: int
    amount: int
    description: str
    created_at: datetime
    activities: List[ActivityOut] = []


class DisbursementFeedResponse(BaseModel):
    disbursements: List[DisbursementOut]
    pagination: PaginationMeta


class LoginRequest(BaseModel):
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    expires_at: str


class DisbursementCreate(BaseModel):
    amount: int = Field(..., gt=0)
    description: str


class DisbursementCreatedResponse(BaseModel):
    success: bool = True
    disbursement_id: int


class ActivityFileIn(BaseModel):
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None


class ActivityCreate(BaseModel):
    activity_time: datetime
    description: str
    files: List[ActivityFileIn] = []


class ActivityCreatedResponse(BaseModel):
    success: bool = True
    activity_id: int


class UploadResponse(BaseModel):
    success: bool = True
    file_url: str
    file_key: str
    file_name: str
    file_size: int
    file_type: str


class ClientLogEntry(BaseModel):
    level: Optional[str] = None
    message: Optional[str] = None
    context: Dict[str, Any] = {}
    error: Optional[Dict[str, Any]] = None
    serviceName: str = "gdg-donation-frontend"
    source: str = "public-frontend"


class LogSinkConfig(BaseModel):
    enabled: bool
