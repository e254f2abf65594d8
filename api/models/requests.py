# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from .base import CamelModel
from .entities import Location
from .enums import IssueCategory, IssueStatus, IssuePriority


def _clean_email(v):
    if v is None:
        return v
    return v.strip().lower()


# Path parameters

class IssuePath(BaseModel):
    issue_id: str = Field(..., description="Issue identifier")


class EventPath(BaseModel):
    event_id: str = Field(..., description="Event identifier")


class NgoPath(BaseModel):
    email: str = Field(..., description="NGO email")


# Issues

class CreateIssueRequest(CamelModel):
    """Citizen report. Lifecycle fields are assigned by the server."""

    title: str = Field(..., min_length=1, description="Short summary")
    description: str = Field(default="")
    category: IssueCategory = Field(default=IssueCategory.OTHER)
    location: Location = Field(default_factory=Location)
    reported_by: str = Field(default="anonymous")
    reporter_email: Optional[str] = None
    reported_at: Optional[datetime] = None
    priority: IssuePriority = Field(default=IssuePriority.MEDIUM)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()

    @field_validator('reporter_email')
    @classmethod
    def validate_reporter_email(cls, v):
        return _clean_email(v) or None

    @field_validator('reported_at')
    @classmethod
    def to_naive_utc(cls, v):
        """Stored timestamps are naive UTC."""
        if v is not None and v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class UpdateIssueRequest(CamelModel):
    """Plain field edits. Status and claim fields have dedicated endpoints."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[IssueCategory] = None
    priority: Optional[IssuePriority] = None
    location: Optional[Location] = None
    verification_count: Optional[int] = Field(None, ge=0)
    event_id: Optional[str] = None


class StatusChangeRequest(CamelModel):
    status: IssueStatus
    note: Optional[str] = Field(None, description="Optional note appended as an update")
    actor: Optional[str] = Field(None, description="Defaults to the caller or 'admin'")


class AddUpdateRequest(CamelModel):
    text: str = ""
    status: Optional[IssueStatus] = None
    by: Optional[str] = Field(None, description="Author, defaults to 'system'")


class ClaimRequest(CamelModel):
    ngo: str = Field(..., description="Claiming NGO name")

    @field_validator('ngo')
    @classmethod
    def validate_ngo(cls, v):
        if not v.strip():
            raise ValueError('ngo is required')
        return v.strip()


class ClaimUpdateRequest(CamelModel):
    update: str = Field(..., min_length=1)
    ngo: str = ""


class NgoClaimRequest(CamelModel):
    ngo_email: str = Field(..., min_length=1)

    @field_validator('ngo_email')
    @classmethod
    def validate_ngo_email(cls, v):
        return _clean_email(v)


class NgoUpdateRequest(CamelModel):
    ngo_email: Optional[str] = None
    text: str = ""
    status: Optional[IssueStatus] = None

    @field_validator('ngo_email')
    @classmethod
    def validate_ngo_email(cls, v):
        return _clean_email(v) or None


# Auth

class SignupRequest(CamelModel):
    full_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Optional[str] = None
    role_passcode: Optional[str] = None
    organization: str = ""

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v)


class NgoSignupRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    profile: str = ""
    role_passcode: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v)


# Events

class CreateEventRequest(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    ngo: str = Field(..., min_length=1)
    issue_id: Optional[str] = None
    date: datetime


class VolunteerRequest(CamelModel):
    name: str = ""
    email: str = ""


class WishlistItemRequest(CamelModel):
    item: str = Field(..., min_length=1)
    quantity: Optional[int] = Field(None, ge=1)


class DonateItemRequest(CamelModel):
    item: str = Field(..., min_length=1)
    quantity: Optional[int] = Field(None, ge=1)


# NGOs and profiles

class FollowRequest(CamelModel):
    email: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v)


class ProfileRequest(CamelModel):
    email: str = Field(..., min_length=1)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    notify_by_email: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v)
