"""Persistence layer: one repository per aggregate over a shared session."""

from __future__ import annotations

from donor_api.repositories.base import BaseRepository, Page, Pagination
from donor_api.repositories.blood_center import BloodCenterRepository
from donor_api.repositories.donation import DonationRepository
from donor_api.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "BloodCenterRepository",
    "DonationRepository",
    "Page",
    "Pagination",
    "UserRepository",
]
