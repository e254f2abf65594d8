# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the CityBeatFlow platform.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import Field, field_validator, model_validator
from .base import CamelModel, BaseDocument
from .enums import (
    IssueCategory,
    IssueStatus,
    IssuePriority,
    ClaimStatus,
    UserRole
)


class Location(CamelModel):
    """Geographic position of a reported issue."""

    lat: float = Field(default=0, description="Latitude")
    lng: float = Field(default=0, description="Longitude")
    address: str = Field(default="", description="Human-readable address")


class Attachment(CamelModel):
    """Uploaded file reference."""

    url: str
    filename: str
    content_type: Optional[str] = None


class StatusHistoryEntry(CamelModel):
    """One recorded status transition."""

    status: IssueStatus
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    actor: str = Field(default="system", description="Who made the change")


class IssueUpdate(CamelModel):
    """Free-text progress note on an issue."""

    text: str = ""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    actor: str = "system"


class ClaimUpdate(CamelModel):
    """Progress note posted by the claiming NGO."""

    update: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    ngo: str = ""


class Issue(BaseDocument):
    """Civic issue reported by a citizen."""

    title: str = Field(..., min_length=1, description="Short summary")
    description: str = Field(default="", description="Detailed description")
    category: IssueCategory = Field(default=IssueCategory.OTHER)
    status: IssueStatus = Field(default=IssueStatus.PENDING)
    location: Location = Field(default_factory=Location)
    reported_by: str = Field(default="anonymous")
    reporter_email: Optional[str] = None
    reported_at: datetime = Field(default_factory=datetime.utcnow)
    verification_count: int = Field(default=0, ge=0)
    priority: IssuePriority = Field(default=IssuePriority.MEDIUM)
    attachments: List[Attachment] = Field(default_factory=list)
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    updates: List[IssueUpdate] = Field(default_factory=list)
    claim_updates: List[ClaimUpdate] = Field(default_factory=list)
    claimed_by_ngo: str = Field(default="", alias="claimedByNGO")
    claim_status: ClaimStatus = Field(default=ClaimStatus.NONE)
    escalated: bool = False
    event_id: Optional[str] = None

    @model_validator(mode='after')
    def validate_claim_consistency(self):
        """A claiming NGO is recorded exactly when the issue is claimed."""
        claimed = self.claim_status != ClaimStatus.NONE.value
        if claimed != bool(self.claimed_by_ngo):
            raise ValueError('claimedByNGO must be set if and only if claimStatus is not "none"')
        return self


class ImpactStats(CamelModel):
    """Cumulative NGO activity counters. Never decrease."""

    issues_claimed: int = Field(default=0, ge=0)
    issues_solved: int = Field(default=0, ge=0)
    volunteer_hours: int = Field(default=0, ge=0)
    resources_raised: int = Field(default=0, ge=0)


class NGO(BaseDocument):
    """Registered non-governmental organization."""

    name: str = Field(..., min_length=1)
    email: str
    profile: str = ""
    impact_stats: ImpactStats = Field(default_factory=ImpactStats)
    followers: List[str] = Field(default_factory=list)
    events: List[str] = Field(default_factory=list)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class Volunteer(CamelModel):
    name: str = ""
    email: str = ""


class WishlistItem(CamelModel):
    """Resource an event needs; donated may exceed quantity."""

    item: str
    quantity: int = 1
    donated: int = 0


class Event(BaseDocument):
    """NGO-organized activity, optionally tied to an issue."""

    title: str = Field(..., min_length=1)
    description: str = ""
    ngo: str = Field(default="", description="Owning NGO name or email")
    issue_id: Optional[str] = None
    date: Optional[datetime] = None
    volunteers: List[Volunteer] = Field(default_factory=list)
    wishlist: List[WishlistItem] = Field(default_factory=list)


class Profile(BaseDocument):
    """Citizen contact preferences, keyed by email."""

    full_name: str = ""
    email: str
    phone: str = ""
    gender: str = ""
    date_of_birth: Optional[str] = None
    notify_by_email: bool = True


class User(BaseDocument):
    """Account with credentials."""

    full_name: str = Field(..., min_length=1)
    email: str
    password_hash: str
    role: UserRole = Field(default=UserRole.CITIZEN)
    organization: str = ""

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    def to_public(self) -> Dict[str, Any]:
        """Account summary safe to return to clients."""
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role
        }
