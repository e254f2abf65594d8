# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the CityBeatFlow platform.
"""

from enum import Enum


class IssueCategory(str, Enum):
    """Kind of civic problem being reported."""
    POTHOLE = "pothole"
    STREETLIGHT = "streetlight"
    TRASH = "trash"
    WATER = "water"
    OTHER = "other"


class IssueStatus(str, Enum):
    """Issue lifecycle status. Any status may follow any other."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CLAIMED = "claimed"
    COMMUNITY_IN_PROGRESS = "community-in-progress"
    SOLVED = "solved"


class IssuePriority(str, Enum):
    """Triage priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClaimStatus(str, Enum):
    """NGO adoption state of an issue."""
    NONE = "none"
    CLAIMED = "claimed"
    COMMUNITY_IN_PROGRESS = "community-in-progress"
    SOLVED = "solved"


class UserRole(str, Enum):
    """Account roles."""
    CITIZEN = "citizen"
    NGO = "ngo"
    ADMIN = "admin"


# Statuses that count as a finished piece of work for NGO impact stats
SOLVED_STATUSES = frozenset({IssueStatus.SOLVED.value, IssueStatus.RESOLVED.value})
