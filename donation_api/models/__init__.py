from donation_api.models.admin_session import AdminSession
from donation_api.models.disbursement import ActivityFile, Disbursement, DisbursementActivity
from donation_api.models.donation import Donation

__all__ = [
    "ActivityFile",
    "AdminSession",
    "Disbursement",
    "DisbursementActivity",
    "Donation",
]
