# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication endpoints for citizen, NGO and admin accounts.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from middleware.validation import validate_json
from models.requests import SignupRequest, LoginRequest
from models.responses import AuthResponse, ErrorResponse

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

auth_tag = Tag(name="Authentication", description="Account signup and login")
auth_bp = APIBlueprint(
    'auth',
    __name__,
    url_prefix='/api/auth',
    abp_tags=[auth_tag]
)


@auth_bp.post('/signup', responses={201: AuthResponse, 400: ErrorResponse, 403: ErrorResponse, 409: ErrorResponse})
@validate_json(SignupRequest)
def signup(payload: SignupRequest):
    """
    Register an account and return a bearer token.

    Registering as ``ngo`` or ``admin`` requires that role's passcode.
    """
    with tracer.start_as_current_span(
        "auth.signup",
        attributes={"ip_address": request.remote_addr or ""}
    ):
        token, user = current_app.auth_service.signup(payload)
        return jsonify({"token": token, "user": user.to_public()}), 201


@auth_bp.post('/login', responses={200: AuthResponse, 400: ErrorResponse, 401: ErrorResponse})
@validate_json(LoginRequest)
def login(payload: LoginRequest):
    """Authenticate with email and password."""
    with tracer.start_as_current_span(
        "auth.login",
        attributes={"ip_address": request.remote_addr or ""}
    ):
        token, user = current_app.auth_service.login(payload)
        logger.info("User logged in", extra={"user_id": user.id})
        return jsonify({"token": token, "user": user.to_public()})
