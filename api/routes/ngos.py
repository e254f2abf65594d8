# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Public NGO directory endpoints.
"""

from flask import jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
import logging

from middleware.validation import validate_json
from models.entities import NGO, Event
from models.requests import NgoPath, FollowRequest
from models.responses import NgoStatsResponse, ErrorResponse
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)

ngos_tag = Tag(name="NGOs", description="Public NGO profiles and impact")
ngos_bp = APIBlueprint(
    'ngos',
    __name__,
    url_prefix='/api/ngos',
    abp_tags=[ngos_tag]
)


@ngos_bp.get('/<email>', responses={404: ErrorResponse})
def get_ngo(path: NgoPath):
    """NGO profile with its events embedded."""
    ngo = current_app.ngo_directory.get_ngo(path.email)
    body = ResponseBuilder.record(NGO, ngo)
    body["events"] = ResponseBuilder.records(
        Event, current_app.event_service.get_events(ngo.get("events", []))
    )
    return jsonify(body)


@ngos_bp.post('/<email>/follow', responses={200: NGO, 404: ErrorResponse})
@validate_json(FollowRequest)
def follow_ngo(path: NgoPath, payload: FollowRequest):
    """Add the caller's email to the NGO's followers. Following twice has no effect."""
    ngo = current_app.ngo_directory.follow(path.email, payload.email)
    return ResponseBuilder.json(NGO, ngo)


@ngos_bp.get('/<email>/stats', responses={200: NgoStatsResponse, 404: ErrorResponse})
def ngo_stats(path: NgoPath):
    return jsonify(current_app.ngo_directory.stats(path.email))
