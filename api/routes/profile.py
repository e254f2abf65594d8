# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Citizen profile endpoints.
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag

from middleware.error_handler import ValidationException
from middleware.validation import validate_json
from models.entities import Profile
from models.requests import ProfileRequest
from models.responses import ErrorResponse
from utils.request import RequestParser, ResponseBuilder

profile_tag = Tag(name="Profile", description="Citizen profiles and email preferences")
profile_bp = APIBlueprint(
    'profile',
    __name__,
    url_prefix='/api/profile',
    abp_tags=[profile_tag]
)


@profile_bp.get('', responses={400: ErrorResponse})
def get_profile():
    """
    Profile for ``?email=``; seeded from the account on first access.

    Returns ``null`` when neither a profile nor an account exists.
    """
    email = RequestParser.get_query_param('email')
    if not email:
        raise ValidationException("email is required")
    return ResponseBuilder.json(Profile, current_app.profile_service.get_profile(email))


@profile_bp.post('', responses={200: Profile, 400: ErrorResponse})
@validate_json(ProfileRequest)
def save_profile(payload: ProfileRequest):
    """Create or update a profile. Omitting ``notifyByEmail`` sets it to true."""
    return ResponseBuilder.json(Profile, current_app.profile_service.save_profile(payload))
