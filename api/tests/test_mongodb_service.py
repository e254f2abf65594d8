# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for MongoDB service layer.
"""

import pytest
from bson import ObjectId
from pymongo import ASCENDING

from services.mongodb import DuplicateRecordError, USERS, ISSUES, NGOS, PROFILES


class TestMongoDBService:
    """Test MongoDB service functionality."""

    def test_health_check(self, mongodb_service, test_database_name):
        """Test MongoDB connection and health check."""
        health = mongodb_service.health_check()

        assert health['status'] == 'healthy'
        assert health['ping'] is True
        assert 'version' in health
        assert health['database'] == test_database_name

    def test_create_document(self, mongodb_service):
        """Test document creation assigns id and timestamps."""
        record = mongodb_service.create(ISSUES, {"title": "Pothole", "status": "pending"})

        assert ObjectId.is_valid(record["id"])
        assert "_id" not in record
        assert record["createdAt"] == record["updatedAt"]

        stored = mongodb_service.find_one(ISSUES, record["id"])
        assert stored["title"] == "Pothole"
        assert stored["id"] == record["id"]

    def test_unique_email(self, mongodb_service):
        """Test the unique email index rejects a second account."""
        mongodb_service.create(USERS, {"email": "a@b.org", "fullName": "A"})

        with pytest.raises(DuplicateRecordError):
            mongodb_service.create(USERS, {"email": "a@b.org", "fullName": "B"})

    def test_find_one_invalid_id(self, mongodb_service):
        """Test malformed ids match nothing instead of raising."""
        assert mongodb_service.find_one(ISSUES, "not-an-id") is None
        assert mongodb_service.update(ISSUES, "not-an-id", set_fields={"title": "x"}) is None

    def test_find_sorting(self, mongodb_service):
        """Test sorting by an explicit field and order."""
        first = mongodb_service.create(ISSUES, {"title": "first", "rank": 2})
        second = mongodb_service.create(ISSUES, {"title": "second", "rank": 1})

        newest_first = mongodb_service.find(ISSUES)
        by_rank = mongodb_service.find(ISSUES, sort_by="rank", sort_order=ASCENDING)

        assert [r["id"] for r in by_rank] == [second["id"], first["id"]]
        assert len(newest_first) == 2

    def test_update_operations(self, mongodb_service):
        """Test set, push and inc land in one write and bump updatedAt."""
        record = mongodb_service.create(ISSUES, {"title": "Leak", "status": "pending", "statusHistory": []})

        updated = mongodb_service.update(
            ISSUES,
            record["id"],
            set_fields={"status": "in-progress"},
            push={"statusHistory": {"status": "in-progress", "actor": "admin"}},
            inc={"verificationCount": 1}
        )

        assert updated["status"] == "in-progress"
        assert updated["statusHistory"] == [{"status": "in-progress", "actor": "admin"}]
        assert updated["verificationCount"] == 1
        assert "updatedAt" in updated

    def test_update_return_original(self, mongodb_service):
        """Test the pre-update document can be returned."""
        record = mongodb_service.create(ISSUES, {"title": "Leak", "status": "pending"})

        before = mongodb_service.update(
            ISSUES, record["id"], return_original=True, set_fields={"status": "solved"}
        )

        assert before["status"] == "pending"
        assert mongodb_service.find_one(ISSUES, record["id"])["status"] == "solved"

    def test_update_missing_document(self, mongodb_service):
        assert mongodb_service.update(ISSUES, str(ObjectId()), set_fields={"title": "x"}) is None

    def test_counters_never_lowered_by_maximum(self, mongodb_service):
        """Test $max only raises counters."""
        ngo = mongodb_service.create(NGOS, {"email": "n@x.org", "impactStats": {"issuesClaimed": 3}})

        updated = mongodb_service.update(NGOS, ngo["id"], maximum={"impactStats.issuesClaimed": 1})
        assert updated["impactStats"]["issuesClaimed"] == 3

        updated = mongodb_service.update(NGOS, ngo["id"], maximum={"impactStats.issuesClaimed": 5})
        assert updated["impactStats"]["issuesClaimed"] == 5

    def test_add_to_set(self, mongodb_service):
        ngo = mongodb_service.create(NGOS, {"email": "n@x.org", "followers": []})

        mongodb_service.update(NGOS, ngo["id"], add_to_set={"followers": "a@b.org"})
        updated = mongodb_service.update(NGOS, ngo["id"], add_to_set={"followers": "a@b.org"})

        assert updated["followers"] == ["a@b.org"]

    def test_upsert_by(self, mongodb_service):
        """Test upsert inserts once and then updates in place."""
        created = mongodb_service.upsert_by(PROFILES, {"email": "a@b.org"}, {"phone": "1"})
        updated = mongodb_service.upsert_by(PROFILES, {"email": "a@b.org"}, {"phone": "2"})

        assert created["id"] == updated["id"]
        assert updated["email"] == "a@b.org"
        assert updated["phone"] == "2"
        assert "createdAt" in updated
        assert mongodb_service.count(PROFILES) == 1

    def test_count(self, mongodb_service):
        mongodb_service.create(ISSUES, {"title": "a", "status": "pending"})
        mongodb_service.create(ISSUES, {"title": "b", "status": "resolved"})

        assert mongodb_service.count(ISSUES) == 2
        assert mongodb_service.count(ISSUES, {"status": "pending"}) == 1
