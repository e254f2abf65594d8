# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Issue endpoints: reporting, status workflow, claims, attachments and escalation.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from middleware.auth import optional_auth
from middleware.error_handler import ValidationException
from middleware.validation import validate_json
from models.entities import Issue
from models.requests import (
    IssuePath,
    CreateIssueRequest,
    UpdateIssueRequest,
    StatusChangeRequest,
    AddUpdateRequest,
    ClaimRequest,
    ClaimUpdateRequest
)
from models.responses import IssueStatsResponse, ErrorResponse
from utils.request import RequestParser, ResponseBuilder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

issues_tag = Tag(name="Issues", description="Civic issue reporting and lifecycle")
issues_bp = APIBlueprint(
    'issues',
    __name__,
    url_prefix='/api/issues',
    abp_tags=[issues_tag]
)

stats_bp = APIBlueprint(
    'stats',
    __name__,
    url_prefix='/api',
    abp_tags=[issues_tag]
)


@issues_bp.get('')
def list_issues():
    """
    List issues, newest first.

    ``?reporter=<email>`` limits to one reporter's issues and
    ``?claimedByNGO=<name>`` to one NGO's claims; the NGO filter wins when
    both are given.
    """
    with tracer.start_as_current_span("issue.list") as span:
        issues = current_app.issue_service.list_issues(
            reporter=RequestParser.get_query_param('reporter'),
            claimed_by_ngo=RequestParser.get_query_param('claimedByNGO')
        )
        span.set_attribute("issue.count", len(issues))
        return ResponseBuilder.json_list(Issue, issues)


@issues_bp.post('', responses={201: Issue, 400: ErrorResponse})
@validate_json(CreateIssueRequest)
def create_issue(payload: CreateIssueRequest):
    """Report a new issue. It always starts as pending with empty history."""
    issue = current_app.issue_service.create_issue(payload)
    return ResponseBuilder.json(Issue, issue, 201)


@issues_bp.get('/escalated')
def list_escalated_issues():
    """Pending issues reported at least ten days ago."""
    issues = current_app.escalation_scanner.find_overdue()
    return ResponseBuilder.json_list(Issue, issues)


@issues_bp.get('/<issue_id>', responses={200: Issue, 404: ErrorResponse})
def get_issue(path: IssuePath):
    return ResponseBuilder.json(Issue, current_app.issue_service.get_issue(path.issue_id))


@issues_bp.put('/<issue_id>', responses={200: Issue, 404: ErrorResponse})
@validate_json(UpdateIssueRequest)
def update_issue(path: IssuePath, payload: UpdateIssueRequest):
    """Edit descriptive fields. Use the status and claim endpoints for workflow changes."""
    issue = current_app.issue_service.update_issue(path.issue_id, payload)
    return ResponseBuilder.json(Issue, issue)


@issues_bp.put('/<issue_id>/status', responses={200: Issue, 404: ErrorResponse})
@optional_auth
@validate_json(StatusChangeRequest)
def change_issue_status(path: IssuePath, user_context, payload: StatusChangeRequest):
    """
    Change an issue's status and record it in the history.

    The actor is the explicit ``actor`` field, else the authenticated caller,
    else ``admin``.
    """
    actor = payload.actor or (user_context.actor if user_context else "admin")
    with tracer.start_as_current_span(
        "issue.change_status",
        attributes={"issue.id": path.issue_id, "issue.status": payload.status, "actor": actor}
    ):
        issue = current_app.issue_service.change_status(
            path.issue_id, payload.status, actor=actor, note=payload.note
        )
        return ResponseBuilder.json(Issue, issue)


@issues_bp.post('/<issue_id>/add-update', responses={200: Issue, 404: ErrorResponse})
@validate_json(AddUpdateRequest)
def add_issue_update(path: IssuePath, payload: AddUpdateRequest):
    issue = current_app.issue_service.add_update(
        path.issue_id, payload.text, status=payload.status, actor=payload.by or "system"
    )
    return ResponseBuilder.json(Issue, issue)


@issues_bp.post('/<issue_id>/claim', responses={200: Issue, 404: ErrorResponse})
@validate_json(ClaimRequest)
def claim_issue(path: IssuePath, payload: ClaimRequest):
    """Claim an issue by NGO name. NGO counters are not changed."""
    issue = current_app.claim_coordinator.claim(path.issue_id, payload.ngo)
    return ResponseBuilder.json(Issue, issue)


@issues_bp.post('/<issue_id>/claim-update', responses={200: Issue, 404: ErrorResponse})
@validate_json(ClaimUpdateRequest)
def add_claim_update(path: IssuePath, payload: ClaimUpdateRequest):
    issue = current_app.claim_coordinator.add_claim_update(path.issue_id, payload.update, payload.ngo)
    return ResponseBuilder.json(Issue, issue)


@issues_bp.post('/<issue_id>/attachments', responses={200: Issue, 400: ErrorResponse, 404: ErrorResponse})
def upload_attachment(path: IssuePath):
    """Attach a file sent as multipart field ``file``."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        raise ValidationException("file is required")

    with tracer.start_as_current_span("issue.upload_attachment", attributes={"issue.id": path.issue_id}):
        issue = current_app.issue_service.add_attachment(path.issue_id, upload)
        return ResponseBuilder.json(Issue, issue)


@issues_bp.post('/<issue_id>/escalate', responses={200: Issue, 404: ErrorResponse})
def escalate_issue(path: IssuePath):
    issue = current_app.escalation_scanner.escalate(path.issue_id)
    return ResponseBuilder.json(Issue, issue)


@stats_bp.get('/stats', responses={200: IssueStatsResponse})
def issue_stats():
    """Issue counts for the admin dashboard."""
    return jsonify(current_app.issue_service.issue_stats())
