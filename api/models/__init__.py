# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for CityBeatFlow.
"""

# Base models
from .base import CamelModel, BaseDocument

# Enumerations
from .enums import (
    IssueCategory,
    IssueStatus,
    IssuePriority,
    ClaimStatus,
    UserRole,
    SOLVED_STATUSES
)

# Core entities
from .entities import (
    Location,
    Attachment,
    StatusHistoryEntry,
    IssueUpdate,
    ClaimUpdate,
    Issue,
    ImpactStats,
    NGO,
    Volunteer,
    WishlistItem,
    Event,
    Profile,
    User
)

# Request models
from .requests import (
    IssuePath,
    EventPath,
    NgoPath,
    CreateIssueRequest,
    UpdateIssueRequest,
    StatusChangeRequest,
    AddUpdateRequest,
    ClaimRequest,
    ClaimUpdateRequest,
    NgoClaimRequest,
    NgoUpdateRequest,
    SignupRequest,
    LoginRequest,
    NgoSignupRequest,
    CreateEventRequest,
    VolunteerRequest,
    WishlistItemRequest,
    DonateItemRequest,
    FollowRequest,
    ProfileRequest
)

# Response models
from .responses import (
    UserSummary,
    AuthResponse,
    NgoAuthResponse,
    IssueStatsResponse,
    NgoStatsResponse,
    ErrorResponse,
    HealthCheckResponse
)
