"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, RegisterSchema, SessionSchema
from .blood_center import (
    BloodCenterCreateSchema,
    BloodCenterFilterSchema,
    BloodCenterSchema,
    BloodCenterUpdateSchema,
)
from .common import PaginationQuerySchema, PaginationSchema, SortQuerySchema, build_pagination
from .donation import (
    DonationCreateSchema,
    DonationFilterSchema,
    DonationSchema,
    DonationUpdateSchema,
)
from .user import PasswordChangeSchema, UserFilterSchema, UserSchema, UserUpdateSchema

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "SessionSchema",
    "BloodCenterCreateSchema",
    "BloodCenterFilterSchema",
    "BloodCenterSchema",
    "BloodCenterUpdateSchema",
    "PaginationQuerySchema",
    "PaginationSchema",
    "SortQuerySchema",
    "build_pagination",
    "DonationCreateSchema",
    "DonationFilterSchema",
    "DonationSchema",
    "DonationUpdateSchema",
    "PasswordChangeSchema",
    "UserFilterSchema",
    "UserSchema",
    "UserUpdateSchema",
]
