# SPDX-License-Identifier: Apache-2.0

"""
Issue lifecycle domain logic.

Pure functions that build new issues and the update operations applied to
them. Every status change produced here pairs the new ``status`` with a
matching ``statusHistory`` append so both land in one document write.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from models.entities import Issue, StatusHistoryEntry, IssueUpdate, ClaimUpdate
from models.enums import IssueStatus, ClaimStatus, SOLVED_STATUSES
from models.requests import CreateIssueRequest

DEFAULT_ESCALATION_DAYS = 10


@dataclass
class IssueChange:
    """Update operations for a single issue document."""
    set_fields: Dict[str, Any] = field(default_factory=dict)
    push: Dict[str, Any] = field(default_factory=dict)

    def as_operations(self) -> Dict[str, Any]:
        return {"set_fields": self.set_fields, "push": self.push}


def new_issue(request: CreateIssueRequest, now: Optional[datetime] = None) -> Issue:
    """
    Build a freshly reported issue.

    Status is always pending and the history, updates and claim fields start
    empty regardless of what the reporter sent.
    """
    data = request.model_dump(exclude_none=True)
    data.setdefault("reported_at", now or datetime.utcnow())
    return Issue(**data)


def history_entry(status: str, actor: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    entry = StatusHistoryEntry(status=status, actor=actor, timestamp=now or datetime.utcnow())
    return entry.model_dump(by_alias=True)


def update_entry(text: str, actor: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    entry = IssueUpdate(text=text or "", actor=actor, timestamp=now or datetime.utcnow())
    return entry.model_dump(by_alias=True)


def claim_update_entry(update: str, ngo: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    entry = ClaimUpdate(update=update, ngo=ngo, timestamp=now or datetime.utcnow())
    return entry.model_dump(by_alias=True)


def status_change(status: str, actor: str, note: Optional[str] = None,
                  now: Optional[datetime] = None) -> IssueChange:
    """Set a new status with its history entry, plus an optional note."""
    now = now or datetime.utcnow()
    change = IssueChange(
        set_fields={"status": status},
        push={"statusHistory": history_entry(status, actor, now)}
    )
    if note:
        change.push["updates"] = update_entry(note, actor, now)
    return change


def progress_update(text: str, actor: str, status: Optional[str] = None,
                    now: Optional[datetime] = None) -> IssueChange:
    """An update note, optionally carrying a status change."""
    now = now or datetime.utcnow()
    change = IssueChange(push={"updates": update_entry(text, actor, now)})
    if status:
        change.set_fields["status"] = status
        change.push["statusHistory"] = history_entry(status, actor, now)
    return change


def claim_change(ngo_name: str, now: Optional[datetime] = None) -> IssueChange:
    """Hand an issue to an NGO: claim fields, community status and history."""
    if not ngo_name:
        raise ValueError("A claim requires a non-empty NGO name")
    status = IssueStatus.COMMUNITY_IN_PROGRESS.value
    return IssueChange(
        set_fields={
            "claimedByNGO": ngo_name,
            "claimStatus": ClaimStatus.CLAIMED.value,
            "status": status
        },
        push={"statusHistory": history_entry(status, ngo_name, now)}
    )


def is_solved_status(status: Optional[str]) -> bool:
    return status in SOLVED_STATUSES


def is_solved_transition(before: Dict[str, Any], new_status: Optional[str]) -> bool:
    """
    True when an issue moves from an unsolved status into solved/resolved.

    Repeating a solved status on an already solved issue is not a transition.
    """
    if not is_solved_status(new_status):
        return False
    return not is_solved_status(before.get("status"))


def is_claimed(issue: Dict[str, Any]) -> bool:
    return issue.get("claimStatus", ClaimStatus.NONE.value) != ClaimStatus.NONE.value


def ngo_actor(ngo: Optional[Dict[str, Any]], ngo_email: Optional[str]) -> str:
    """Name shown on NGO-authored entries."""
    if ngo and ngo.get("name"):
        return ngo["name"]
    return ngo_email or "ngo"


def escalation_cutoff(now: Optional[datetime] = None, days: int = DEFAULT_ESCALATION_DAYS) -> datetime:
    return (now or datetime.utcnow()) - timedelta(days=days)


def overdue_filter(now: Optional[datetime] = None, days: int = DEFAULT_ESCALATION_DAYS) -> Dict[str, Any]:
    """Store query for pending issues reported at least ``days`` ago."""
    return {
        "status": IssueStatus.PENDING.value,
        "reportedAt": {"$lte": escalation_cutoff(now, days)}
    }
