# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from .base import CamelModel
from .entities import ImpactStats


class UserSummary(BaseModel):
    """Account summary returned by auth endpoints."""

    id: Optional[str] = None
    fullName: str
    email: str
    role: str


class AuthResponse(BaseModel):
    token: str = Field(..., description="Bearer token, valid 7 days")
    user: UserSummary


class NgoAuthResponse(BaseModel):
    token: str
    ngo: Dict[str, Any] = Field(..., description="NGO record")


class IssueStatsResponse(CamelModel):
    """Headline counts for the admin dashboard."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0


class NgoStatsResponse(CamelModel):
    impact_stats: ImpactStats
    followers: int = Field(..., description="Follower count")


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str = Field(..., description="Human-readable message")
    details: Optional[List[Dict[str, Any]]] = Field(None, description="Field-level validation errors")


class HealthCheckResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    checks: Dict[str, Any] = Field(default_factory=dict)
