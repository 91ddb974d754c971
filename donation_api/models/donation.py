from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from donation_api.db.base_class import Base, utcnow

STATUS_PENDING = "pending"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class Donation(Base):
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(20), nullable=True)
    # Smallest currency unit, gateway fee excluded
    amount = Column(Integer, nullable=False)
    message = Column(Text, nullable=True)
    anonymous = Column(Boolean, default=False, nullable=False)
    status = Column(String(16), default=STATUS_PENDING, nullable=False, index=True)
    # Shared with Midtrans to correlate the payment session
    order_id = Column(String(64), unique=True, index=True, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
