# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
NGO-scoped endpoints: NGO account auth, issue claims and progress updates.
"""

from flask import jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from middleware.validation import validate_json
from models.entities import Issue, NGO
from models.requests import (
    IssuePath,
    LoginRequest,
    NgoSignupRequest,
    NgoClaimRequest,
    NgoUpdateRequest
)
from models.responses import NgoAuthResponse, ErrorResponse
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ngo_tag = Tag(name="NGO", description="NGO accounts and issue adoption")
ngo_bp = APIBlueprint(
    'ngo',
    __name__,
    url_prefix='/api/ngo',
    abp_tags=[ngo_tag]
)


@ngo_bp.post('/auth/signup', responses={201: NgoAuthResponse, 403: ErrorResponse, 409: ErrorResponse})
@validate_json(NgoSignupRequest)
def ngo_signup(payload: NgoSignupRequest):
    """Register an NGO account and its public profile. Requires the NGO passcode."""
    token, ngo = current_app.auth_service.ngo_signup(payload)
    return jsonify({"token": token, "ngo": ResponseBuilder.record(NGO, ngo)}), 201


@ngo_bp.post('/auth/login', responses={200: NgoAuthResponse, 401: ErrorResponse})
@validate_json(LoginRequest)
def ngo_login(payload: LoginRequest):
    token, ngo = current_app.auth_service.ngo_login(payload)
    ngo_json = ResponseBuilder.record(NGO, ngo)
    return jsonify({"token": token, "ngo": ngo_json})


@ngo_bp.post('/issues/<issue_id>/claim', responses={404: ErrorResponse})
@validate_json(NgoClaimRequest)
def claim_issue_for_ngo(path: IssuePath, payload: NgoClaimRequest):
    """
    Claim an issue for a registered NGO.

    Increments the NGO's ``issuesClaimed`` counter on every call.
    """
    with tracer.start_as_current_span(
        "ngo.claim_issue",
        attributes={"issue.id": path.issue_id, "ngo.email": payload.ngo_email}
    ):
        issue = current_app.claim_coordinator.claim_for_ngo(path.issue_id, payload.ngo_email)
        return ResponseBuilder.json(Issue, issue)


@ngo_bp.post('/issues/<issue_id>/update', responses={404: ErrorResponse})
@validate_json(NgoUpdateRequest)
def post_ngo_update(path: IssuePath, payload: NgoUpdateRequest):
    """
    Post an NGO progress note, optionally with a new status.

    Moving a claimed issue into ``solved`` or ``resolved`` counts towards the
    NGO's ``issuesSolved``.
    """
    with tracer.start_as_current_span(
        "ngo.update_issue",
        attributes={"issue.id": path.issue_id, "issue.status": payload.status or ""}
    ):
        issue = current_app.issue_service.ngo_update(
            path.issue_id, payload.ngo_email, payload.text, payload.status
        )
        return ResponseBuilder.json(Issue, issue)
