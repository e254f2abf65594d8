# SPDX-License-Identifier: Apache-2.0

"""
Issue lifecycle service.

Creates issues, applies status changes and progress updates, and keeps the
claiming NGO's solved counter in step with real transitions into a solved
status.
"""

import logging
from typing import Any, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from domain import issues as issue_domain
from domain.notifications import status_change_message, update_message, ngo_update_message
from middleware.error_handler import NotFoundException
from models.enums import ClaimStatus, IssueStatus
from models.requests import CreateIssueRequest, UpdateIssueRequest
from services.mongodb import MongoDBService, ISSUES, NGOS
from services.notifications import ReporterNotifier
from services.storage import AttachmentStorage

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class IssueLifecycleService:
    """Issue creation, editing and status workflow."""

    def __init__(self, mongodb_service: MongoDBService, notifier: ReporterNotifier,
                 storage: Optional[AttachmentStorage] = None):
        self.mongodb_service = mongodb_service
        self.notifier = notifier
        self.storage = storage

    def _require(self, issue: Optional[Dict[str, Any]], issue_id: str) -> Dict[str, Any]:
        if issue is None:
            logger.debug("Issue not found", extra={"issue_id": issue_id})
            raise NotFoundException("Issue not found")
        return issue

    def create_issue(self, request: CreateIssueRequest) -> Dict[str, Any]:
        with tracer.start_as_current_span("issues.create") as span:
            issue = issue_domain.new_issue(request)
            record = self.mongodb_service.create(ISSUES, issue.to_document())
            span.set_attribute("issue.id", record["id"])
            logger.info(
                "Issue reported",
                extra={"issue_id": record["id"], "category": record["category"]}
            )
            return record

    def get_issue(self, issue_id: str) -> Dict[str, Any]:
        return self._require(self.mongodb_service.find_one(ISSUES, issue_id), issue_id)

    def list_issues(self, reporter: Optional[str] = None,
                    claimed_by_ngo: Optional[str] = None) -> List[Dict[str, Any]]:
        """List issues newest first. The NGO filter wins over the reporter filter."""
        filters: Dict[str, Any] = {}
        if reporter:
            filters = {"reporterEmail": reporter.strip().lower()}
        if claimed_by_ngo:
            filters = {"claimedByNGO": claimed_by_ngo}
        return self.mongodb_service.find(ISSUES, filters)

    def update_issue(self, issue_id: str, request: UpdateIssueRequest) -> Dict[str, Any]:
        """Edit plain fields. Status and claim fields are not reachable here."""
        with tracer.start_as_current_span("issues.update", attributes={"issue.id": issue_id}):
            fields = request.model_dump(by_alias=True, exclude_none=True)
            if not fields:
                return self.get_issue(issue_id)
            issue = self.mongodb_service.update(ISSUES, issue_id, set_fields=fields)
            return self._require(issue, issue_id)

    def change_status(self, issue_id: str, status: str, actor: str = "admin",
                      note: Optional[str] = None) -> Dict[str, Any]:
        """
        Set a new status, recording it in the history, and email the reporter.

        Any status may follow any other.
        """
        with tracer.start_as_current_span(
            "issues.change_status",
            attributes={"issue.id": issue_id, "issue.status": status, "actor": actor}
        ):
            change = issue_domain.status_change(status, actor, note)
            issue = self._require(
                self.mongodb_service.update(ISSUES, issue_id, **change.as_operations()),
                issue_id
            )
            logger.info("Issue status changed", extra={"issue_id": issue_id, "status": status})
            self.notifier.notify(status_change_message(issue, status))
            return issue

    def add_update(self, issue_id: str, text: str, status: Optional[str] = None,
                   actor: str = "system") -> Dict[str, Any]:
        """Append a progress note, optionally changing status, and email the reporter."""
        with tracer.start_as_current_span(
            "issues.add_update",
            attributes={"issue.id": issue_id, "actor": actor}
        ):
            change = issue_domain.progress_update(text, actor, status)
            issue = self._require(
                self.mongodb_service.update(ISSUES, issue_id, **change.as_operations()),
                issue_id
            )
            self.notifier.notify(update_message(issue, actor, text or ""))
            return issue

    def ngo_update(self, issue_id: str, ngo_email: Optional[str], text: str,
                   status: Optional[str] = None) -> Dict[str, Any]:
        """
        Post an NGO progress note.

        When the note moves the issue into solved/resolved, the NGO's
        ``issuesSolved`` counter is incremented once and a claim, if any, is
        marked solved. The pre-update document is read in the same atomic write, so
        concurrent or repeated solved updates count only once.
        """
        with tracer.start_as_current_span(
            "issues.ngo_update",
            attributes={"issue.id": issue_id, "issue.status": status or ""}
        ) as span:
            ngo = self.mongodb_service.find_one_by(NGOS, {"email": ngo_email}) if ngo_email else None
            actor = issue_domain.ngo_actor(ngo, ngo_email)

            change = issue_domain.progress_update(text, actor, status)
            before = self._require(
                self.mongodb_service.update(
                    ISSUES, issue_id, return_original=True, **change.as_operations()
                ),
                issue_id
            )

            if issue_domain.is_solved_transition(before, status):
                if issue_domain.is_claimed(before):
                    self.mongodb_service.update(
                        ISSUES, issue_id, set_fields={"claimStatus": ClaimStatus.SOLVED.value}
                    )
                if ngo:
                    self._record_solved(ngo, issue_id, span)

            issue = self.get_issue(issue_id)
            self.notifier.notify(ngo_update_message(issue, actor, text or "", status))
            return issue

    def _record_solved(self, ngo: Dict[str, Any], issue_id: str, span) -> None:
        try:
            self.mongodb_service.update(NGOS, ngo["id"], inc={"impactStats.issuesSolved": 1})
            span.set_attribute("ngo.issues_solved_incremented", True)
        except Exception as e:
            # Issue already written; reconcile_impact_stats repairs the counter.
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, "NGO counter update failed"))
            logger.error(
                f"Failed to increment issuesSolved: {e}",
                extra={"ngo_id": ngo["id"], "issue_id": issue_id}
            )

    def add_attachment(self, issue_id: str, file) -> Dict[str, Any]:
        """Store an uploaded file and append its reference to the issue."""
        with tracer.start_as_current_span("issues.add_attachment", attributes={"issue.id": issue_id}):
            self.get_issue(issue_id)
            attachment = self.storage.save(file)
            issue = self.mongodb_service.update(ISSUES, issue_id, push={"attachments": attachment})
            return self._require(issue, issue_id)

    def issue_stats(self) -> Dict[str, int]:
        count = self.mongodb_service.count
        return {
            "total": count(ISSUES),
            "pending": count(ISSUES, {"status": IssueStatus.PENDING.value}),
            "inProgress": count(ISSUES, {"status": IssueStatus.IN_PROGRESS.value}),
            "resolved": count(ISSUES, {"status": IssueStatus.RESOLVED.value})
        }
