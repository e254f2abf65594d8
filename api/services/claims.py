# SPDX-License-Identifier: Apache-2.0

"""
Claim coordination between NGOs and issues.

A claim writes two documents: the issue (claim fields, status, history) and,
for the NGO-scoped entry point, the NGO's ``issuesClaimed`` counter. The
store has no multi-document transactions, so the counter write is
best-effort: if it fails after the issue write, the failure is logged and
``reconcile_impact_stats`` later raises the counters to match the issues.
Counters only ever move up, through ``$inc`` and ``$max``.
"""

import logging
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from domain import issues as issue_domain
from domain.notifications import claim_message
from middleware.error_handler import NotFoundException, ValidationException
from models.enums import ClaimStatus, SOLVED_STATUSES
from services.mongodb import MongoDBService, ISSUES, NGOS
from services.notifications import ReporterNotifier

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ClaimCoordinator:
    """Associates NGOs with issues and keeps NGO impact counters."""

    def __init__(self, mongodb_service: MongoDBService, notifier: ReporterNotifier):
        self.mongodb_service = mongodb_service
        self.notifier = notifier

    def _apply_claim(self, issue_id: str, ngo_name: str) -> Dict[str, Any]:
        try:
            change = issue_domain.claim_change(ngo_name)
        except ValueError as e:
            raise ValidationException(str(e))

        issue = self.mongodb_service.update(ISSUES, issue_id, **change.as_operations())
        if issue is None:
            raise NotFoundException("Issue not found")
        return issue

    def claim(self, issue_id: str, ngo_name: str) -> Dict[str, Any]:
        """
        Claim an issue by NGO display name.

        Sets the claim fields and community status in one write and emails
        the reporter. NGO counters are left untouched.
        """
        with tracer.start_as_current_span(
            "claims.claim",
            attributes={"issue.id": issue_id, "ngo.name": ngo_name}
        ):
            issue = self._apply_claim(issue_id, ngo_name)
            logger.info("Issue claimed", extra={"issue_id": issue_id, "ngo": ngo_name})
            self.notifier.notify(claim_message(issue, ngo_name))
            return issue

    def claim_for_ngo(self, issue_id: str, ngo_email: str) -> Dict[str, Any]:
        """
        Claim an issue on behalf of a registered NGO and count the claim.

        Re-claiming is not guarded: a second call overwrites the claim and
        increments ``issuesClaimed`` again.

        Raises:
            NotFoundException: If the NGO or the issue does not exist
        """
        with tracer.start_as_current_span(
            "claims.claim_for_ngo",
            attributes={"issue.id": issue_id, "ngo.email": ngo_email}
        ) as span:
            ngo = self.mongodb_service.find_one_by(NGOS, {"email": ngo_email})
            if ngo is None:
                raise NotFoundException("NGO not found")

            issue = self._apply_claim(issue_id, ngo["name"])

            try:
                self.mongodb_service.update(NGOS, ngo["id"], inc={"impactStats.issuesClaimed": 1})
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, "NGO counter update failed"))
                logger.error(
                    f"Issue claimed but issuesClaimed not incremented: {e}",
                    extra={"issue_id": issue_id, "ngo_id": ngo["id"]}
                )

            logger.info("Issue claimed by NGO", extra={"issue_id": issue_id, "ngo_id": ngo["id"]})
            self.notifier.notify(claim_message(issue, ngo["name"]))
            return issue

    def add_claim_update(self, issue_id: str, update: str, ngo: str = "") -> Dict[str, Any]:
        """Append a progress note from the claiming NGO."""
        entry = issue_domain.claim_update_entry(update, ngo)
        issue = self.mongodb_service.update(ISSUES, issue_id, push={"claimUpdates": entry})
        if issue is None:
            raise NotFoundException("Issue not found")
        return issue

    def reconcile_impact_stats(self, ngo_email: str) -> Optional[Dict[str, Any]]:
        """
        Raise an NGO's claim counters to at least what its issues show.

        ``issuesClaimed`` is bounded below by the issues currently claimed by
        the NGO and ``issuesSolved`` by those in a solved status. Counters are
        never lowered.

        Returns:
            The updated NGO, or None if no NGO has that email
        """
        with tracer.start_as_current_span("claims.reconcile", attributes={"ngo.email": ngo_email}):
            ngo = self.mongodb_service.find_one_by(NGOS, {"email": ngo_email})
            if ngo is None:
                return None

            claimed_filter = {
                "claimedByNGO": ngo["name"],
                "claimStatus": {"$ne": ClaimStatus.NONE.value}
            }
            claimed = self.mongodb_service.count(ISSUES, claimed_filter)
            solved = self.mongodb_service.count(
                ISSUES, dict(claimed_filter, status={"$in": sorted(SOLVED_STATUSES)})
            )

            updated = self.mongodb_service.update(
                NGOS,
                ngo["id"],
                maximum={
                    "impactStats.issuesClaimed": claimed,
                    "impactStats.issuesSolved": solved
                }
            )
            logger.info(
                "Impact stats reconciled",
                extra={"ngo_id": ngo["id"], "claimed_floor": claimed, "solved_floor": solved}
            )
            return updated

    def reconcile_all(self) -> int:
        """Reconcile every NGO; returns how many were processed."""
        ngos = self.mongodb_service.find(NGOS)
        for ngo in ngos:
            self.reconcile_impact_stats(ngo["email"])
        return len(ngos)
