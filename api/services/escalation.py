# SPDX-License-Identifier: Apache-2.0

"""
Escalation of issues left pending too long.

Scanning is on demand (API query or the ``escalate_overdue`` script run by
an external scheduler); nothing runs on a timer inside the service.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from opentelemetry import trace

from domain.issues import overdue_filter, DEFAULT_ESCALATION_DAYS
from middleware.error_handler import NotFoundException
from services.mongodb import MongoDBService, ISSUES

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class EscalationScanner:
    """Finds and flags pending issues older than the threshold."""

    def __init__(self, mongodb_service: MongoDBService, threshold_days: int = DEFAULT_ESCALATION_DAYS):
        self.mongodb_service = mongodb_service
        self.threshold_days = threshold_days

    def find_overdue(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Pending issues reported at least ``threshold_days`` before ``now``."""
        with tracer.start_as_current_span("escalation.find_overdue") as span:
            issues = self.mongodb_service.find(
                ISSUES, overdue_filter(now, self.threshold_days), sort_by="reportedAt", sort_order=1
            )
            span.set_attribute("escalation.overdue_count", len(issues))
            return issues

    def escalate(self, issue_id: str) -> Dict[str, Any]:
        issue = self.mongodb_service.update(ISSUES, issue_id, set_fields={"escalated": True})
        if issue is None:
            raise NotFoundException("Issue not found")
        logger.info("Issue escalated", extra={"issue_id": issue_id})
        return issue

    def escalate_overdue(self, now: Optional[datetime] = None) -> List[str]:
        """Flag every overdue issue not yet escalated; returns their ids."""
        escalated = []
        for issue in self.find_overdue(now):
            if issue.get("escalated"):
                continue
            self.escalate(issue["id"])
            escalated.append(issue["id"])

        logger.info("Escalation sweep finished", extra={"escalated_count": len(escalated)})
        return escalated
