from donor_api.models.blood_center import BloodCenter
from donor_api.models.donation import TERMINAL_STATUSES, Donation, DonationStatus
from donor_api.models.user import AccountStatus, BloodType, Gender, Role, User

__all__ = [
    "AccountStatus",
    "BloodCenter",
    "BloodType",
    "Donation",
    "DonationStatus",
    "Gender",
    "Role",
    "TERMINAL_STATUSES",
    "User",
]
