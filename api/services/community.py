# SPDX-License-Identifier: Apache-2.0

"""
Events, NGO directory and citizen profiles.
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from opentelemetry import trace

from middleware.error_handler import NotFoundException
from models.entities import Event, Profile
from models.requests import CreateEventRequest, ProfileRequest
from services.mongodb import MongoDBService, EVENTS, ISSUES, NGOS, PROFILES, USERS

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class EventService:
    """NGO events with volunteers and donation wishlists."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def _require(self, event: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if event is None:
            raise NotFoundException("Event not found")
        return event

    def create_event(self, request: CreateEventRequest) -> Dict[str, Any]:
        """
        Create an event and link it from its issue and owning NGO when they exist.
        """
        with tracer.start_as_current_span("events.create") as span:
            event = Event(**request.model_dump(exclude_none=True))
            record = self.mongodb_service.create(EVENTS, event.to_document())
            span.set_attribute("event.id", record["id"])

            if record.get("issueId"):
                linked = self.mongodb_service.update(
                    ISSUES, record["issueId"], set_fields={"eventId": record["id"]}
                )
                if linked is None:
                    logger.warning("Event references unknown issue", extra={"event_id": record["id"]})

            if record.get("ngo"):
                self.mongodb_service.update_by(
                    NGOS,
                    {"$or": [{"name": record["ngo"]}, {"email": record["ngo"].lower()}]},
                    add_to_set={"events": record["id"]}
                )

            logger.info("Event created", extra={"event_id": record["id"]})
            return record

    def list_events(self, ngo: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.mongodb_service.find(EVENTS, {"ngo": ngo} if ngo else {})

    def get_events(self, event_ids: List[str]) -> List[Dict[str, Any]]:
        object_ids = [ObjectId(e) for e in event_ids if ObjectId.is_valid(e)]
        if not object_ids:
            return []
        return self.mongodb_service.find(EVENTS, {"_id": {"$in": object_ids}})

    def add_volunteer(self, event_id: str, name: str, email: str) -> Dict[str, Any]:
        return self._require(self.mongodb_service.update(
            EVENTS, event_id, push={"volunteers": {"name": name, "email": email}}
        ))

    def add_wishlist_item(self, event_id: str, item: str, quantity: Optional[int] = None) -> Dict[str, Any]:
        entry = {"item": item, "quantity": quantity or 1, "donated": 0}
        return self._require(self.mongodb_service.update(EVENTS, event_id, push={"wishlist": entry}))

    def donate_item(self, event_id: str, item: str, quantity: Optional[int] = None) -> Dict[str, Any]:
        """
        Record a donation against the first wishlist entry named ``item``.

        Donations may exceed the requested quantity.
        """
        event = self._require(self.mongodb_service.find_one(EVENTS, event_id))

        updated = self.mongodb_service.update_by(
            EVENTS,
            {"_id": ObjectId(event["id"]), "wishlist.item": item},
            inc={"wishlist.$.donated": quantity or 1}
        )
        if updated is None:
            raise NotFoundException("Wishlist item not found")
        return updated


class NgoDirectory:
    """Public NGO profiles, followers and impact stats."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def get_ngo(self, email: str) -> Dict[str, Any]:
        ngo = self.mongodb_service.find_one_by(NGOS, {"email": email.strip().lower()})
        if ngo is None:
            raise NotFoundException("NGO not found")
        return ngo

    def follow(self, email: str, follower_email: str) -> Dict[str, Any]:
        ngo = self.mongodb_service.update_by(
            NGOS,
            {"email": email.strip().lower()},
            add_to_set={"followers": follower_email}
        )
        if ngo is None:
            raise NotFoundException("NGO not found")
        logger.info("NGO followed", extra={"ngo_id": ngo["id"]})
        return ngo

    def stats(self, email: str) -> Dict[str, Any]:
        ngo = self.get_ngo(email)
        return {
            "impactStats": ngo.get("impactStats", {}),
            "followers": len(ngo.get("followers", []))
        }


class ProfileService:
    """Citizen profiles and email preferences."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def get_profile(self, email: str) -> Optional[Dict[str, Any]]:
        """Return the profile, seeding it from the user account on first access."""
        email = email.strip().lower()
        profile = self.mongodb_service.find_one_by(PROFILES, {"email": email})
        if profile is not None:
            return profile

        user = self.mongodb_service.find_one_by(USERS, {"email": email})
        if user is None:
            return None

        seeded = Profile(full_name=user.get("fullName", ""), email=email, notify_by_email=True)
        logger.info("Profile seeded from user", extra={"user_id": user["id"]})
        return self.mongodb_service.create(PROFILES, seeded.to_document())

    def save_profile(self, request: ProfileRequest) -> Dict[str, Any]:
        """Create or update a profile. A missing notifyByEmail means true."""
        fields = request.model_dump(by_alias=True, exclude_none=True, exclude={"email"})
        fields.setdefault("notifyByEmail", True)
        return self.mongodb_service.upsert_by(PROFILES, {"email": request.email}, set_fields=fields)
