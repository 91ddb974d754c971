from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from donation_api.db.base_class import Base, utcnow


class Disbursement(Base):
    __tablename__ = "disbursements"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    activities = relationship(
        "DisbursementActivity",
        back_populates="disbursement",
        cascade="all, delete-orphan",
        order_by="(DisbursementActivity.activity_time, DisbursementActivity.id)",
    )


class DisbursementActivity(Base):
    __tablename__ = "disbursement_activities"

    id = Column(Integer, primary_key=True, index=True)
    disbursement_id = Column(
        Integer, ForeignKey("disbursements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # When the activity happened, as reported by the admin
    activity_time = Column(DateTime, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    disbursement = relationship("Disbursement", back_populates="activities")
    files = relationship(
        "ActivityFile",
        back_populates="activity",
        cascade="all, delete-orphan",
        order_by="(ActivityFile.created_at, ActivityFile.id)",
    )


class ActivityFile(Base):
    __tablename__ = "activity_files"

    id = Column(Integer, primary_key=True, index=True)
    activity_id = Column(
        Integer,
        ForeignKey("disbursement_activities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_url = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    activity = relationship("DisbursementActivity", back_populates="files")
