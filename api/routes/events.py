# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Event endpoints: NGO events, volunteers and donation wishlists.
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from middleware.validation import validate_json
from models.entities import Event
from models.requests import (
    EventPath,
    CreateEventRequest,
    VolunteerRequest,
    WishlistItemRequest,
    DonateItemRequest
)
from models.responses import ErrorResponse
from utils.request import RequestParser, ResponseBuilder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

events_tag = Tag(name="Events", description="NGO events, volunteers and wishlists")
events_bp = APIBlueprint(
    'events',
    __name__,
    url_prefix='/api/events',
    abp_tags=[events_tag]
)


@events_bp.post('', responses={201: Event, 400: ErrorResponse})
@validate_json(CreateEventRequest)
def create_event(payload: CreateEventRequest):
    """Create an event, linking it to its issue and owning NGO when they exist."""
    with tracer.start_as_current_span("event.create"):
        event = current_app.event_service.create_event(payload)
        return ResponseBuilder.json(Event, event, 201)


@events_bp.get('')
def list_events():
    """List events, optionally only those of ``?ngo=<name>``."""
    events = current_app.event_service.list_events(RequestParser.get_query_param('ngo'))
    return ResponseBuilder.json_list(Event, events)


@events_bp.post('/<event_id>/volunteer', responses={200: Event, 404: ErrorResponse})
@validate_json(VolunteerRequest)
def volunteer(path: EventPath, payload: VolunteerRequest):
    event = current_app.event_service.add_volunteer(path.event_id, payload.name, payload.email)
    return ResponseBuilder.json(Event, event)


@events_bp.post('/<event_id>/wishlist', responses={200: Event, 404: ErrorResponse})
@validate_json(WishlistItemRequest)
def add_wishlist_item(path: EventPath, payload: WishlistItemRequest):
    event = current_app.event_service.add_wishlist_item(path.event_id, payload.item, payload.quantity)
    return ResponseBuilder.json(Event, event)


@events_bp.post('/<event_id>/donate-item', responses={200: Event, 404: ErrorResponse})
@validate_json(DonateItemRequest)
def donate_item(path: EventPath, payload: DonateItemRequest):
    """Record a donation against a wishlist item. Over-donation is allowed."""
    with tracer.start_as_current_span("event.donate_item", attributes={"event.id": path.event_id}):
        event = current_app.event_service.donate_item(path.event_id, payload.item, payload.quantity)
        return ResponseBuilder.json(Event, event)
