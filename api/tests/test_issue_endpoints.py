# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the issue HTTP endpoints.
"""

import io
import json
import pytest
from datetime import datetime, timedelta


@pytest.fixture
def created_issue(client, sample_issue_data):
    response = client.post('/api/issues', json=sample_issue_data)
    assert response.status_code == 201
    return json.loads(response.data)


@pytest.fixture
def registered_ngo(client, sample_ngo_data):
    response = client.post('/api/ngo/auth/signup', json=sample_ngo_data)
    assert response.status_code == 201
    return json.loads(response.data)["ngo"]


class TestIssueEndpoints:
    """Test issue reporting and retrieval."""

    def test_create_issue(self, created_issue):
        assert created_issue["id"]
        assert created_issue["status"] == "pending"
        assert created_issue["claimStatus"] == "none"
        assert created_issue["claimedByNGO"] == ""
        assert created_issue["statusHistory"] == []
        assert created_issue["location"]["address"] == "Main Street 12"

    def test_create_issue_requires_title(self, client):
        response = client.post('/api/issues', json={"description": "no title"})

        assert response.status_code == 400
        assert "title" in json.loads(response.data)["error"]

    def test_get_issue(self, client, created_issue):
        response = client.get(f'/api/issues/{created_issue["id"]}')

        assert response.status_code == 200
        assert json.loads(response.data)["title"] == "Pothole on Main Street"

    def test_get_missing_issue(self, client):
        response = client.get('/api/issues/000000000000000000000000')

        assert response.status_code == 404
        assert json.loads(response.data) == {"error": "Issue not found"}

    def test_get_malformed_id(self, client):
        assert client.get('/api/issues/not-an-id').status_code == 404

    def test_list_issues_by_reporter(self, client, created_issue, sample_issue_data):
        sample_issue_data["reporterEmail"] = "someone@example.com"
        client.post('/api/issues', json=sample_issue_data)

        everything = json.loads(client.get('/api/issues').data)
        mine = json.loads(client.get('/api/issues?reporter=asha@example.com').data)

        assert len(everything) == 2
        assert [i["id"] for i in mine] == [created_issue["id"]]

    def test_update_issue_ignores_status(self, client, created_issue):
        response = client.put(
            f'/api/issues/{created_issue["id"]}',
            json={"description": "Now two potholes", "status": "resolved"}
        )

        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["description"] == "Now two potholes"
        assert data["status"] == "pending"

    def test_stats(self, client, created_issue):
        client.put(f'/api/issues/{created_issue["id"]}/status', json={"status": "resolved"})

        data = json.loads(client.get('/api/stats').data)
        assert data == {"total": 1, "pending": 0, "inProgress": 0, "resolved": 1}


class TestIssueWorkflow:
    """Test status changes, claims and progress notes over HTTP."""

    def test_report_to_ngo_claim(self, client, app, fake_transport, created_issue, registered_ngo):
        """Test pending, then in-progress by admin, then claimed by GreenCity."""
        issue_id = created_issue["id"]

        response = client.put(f'/api/issues/{issue_id}/status', json={"status": "in-progress"})
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["status"] == "in-progress"
        assert data["statusHistory"][-1]["actor"] == "admin"

        response = client.post(
            f'/api/ngo/issues/{issue_id}/claim',
            json={"ngoEmail": "contact@greencity.org"}
        )
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["claimedByNGO"] == "GreenCity"
        assert data["claimStatus"] == "claimed"
        assert data["status"] == "community-in-progress"
        assert [h["status"] for h in data["statusHistory"]] == ["in-progress", "community-in-progress"]

        ngo = json.loads(client.get('/api/ngos/contact@greencity.org').data)
        assert ngo["impactStats"]["issuesClaimed"] == 1

        app.dispatcher.flush()
        subjects = [c[0][0].subject for c in fake_transport.send.call_args_list]
        assert 'Your report "Pothole on Main Street" was adopted by GreenCity' in subjects

    def test_status_actor_from_token(self, client, created_issue, sample_user_data):
        signup = json.loads(client.post('/api/auth/signup', json=sample_user_data).data)

        response = client.put(
            f'/api/issues/{created_issue["id"]}/status',
            json={"status": "rejected"},
            headers={"Authorization": f'Bearer {signup["token"]}'}
        )

        assert json.loads(response.data)["statusHistory"][-1]["actor"] == "test@example.com"

    def test_status_explicit_actor(self, client, created_issue):
        response = client.put(
            f'/api/issues/{created_issue["id"]}/status',
            json={"status": "resolved", "actor": "Ward office", "note": "Patched"}
        )

        data = json.loads(response.data)
        assert data["statusHistory"][-1]["actor"] == "Ward office"
        assert data["updates"][-1]["text"] == "Patched"

    def test_invalid_status(self, client, created_issue):
        response = client.put(f'/api/issues/{created_issue["id"]}/status', json={"status": "done"})
        assert response.status_code == 400

    def test_claim_by_name(self, client, created_issue):
        response = client.post(f'/api/issues/{created_issue["id"]}/claim', json={"ngo": "GreenCity"})

        data = json.loads(response.data)
        assert data["claimedByNGO"] == "GreenCity"
        assert data["status"] == "community-in-progress"

    def test_claim_requires_ngo(self, client, created_issue):
        response = client.post(f'/api/issues/{created_issue["id"]}/claim', json={})
        assert response.status_code == 400

    def test_claim_unknown_ngo_email(self, client, created_issue):
        response = client.post(
            f'/api/ngo/issues/{created_issue["id"]}/claim',
            json={"ngoEmail": "ghost@example.org"}
        )

        assert response.status_code == 404
        assert json.loads(response.data)["error"] == "NGO not found"

    def test_add_update(self, client, created_issue):
        response = client.post(
            f'/api/issues/{created_issue["id"]}/add-update',
            json={"text": "Crew dispatched", "status": "in-progress", "by": "city"}
        )

        data = json.loads(response.data)
        assert data["status"] == "in-progress"
        assert data["updates"][-1] == {
            "text": "Crew dispatched",
            "timestamp": data["updates"][-1]["timestamp"],
            "actor": "city"
        }

    def test_claim_update(self, client, created_issue):
        response = client.post(
            f'/api/issues/{created_issue["id"]}/claim-update',
            json={"update": "Volunteers booked", "ngo": "GreenCity"}
        )

        assert json.loads(response.data)["claimUpdates"][-1]["update"] == "Volunteers booked"

    def test_ngo_solved_update_counts(self, client, created_issue, registered_ngo):
        issue_id = created_issue["id"]
        client.post(f'/api/ngo/issues/{issue_id}/claim', json={"ngoEmail": "contact@greencity.org"})

        response = client.post(
            f'/api/ngo/issues/{issue_id}/update',
            json={"ngoEmail": "contact@greencity.org", "text": "Filled", "status": "solved"}
        )
        client.post(
            f'/api/ngo/issues/{issue_id}/update',
            json={"ngoEmail": "contact@greencity.org", "text": "Still filled", "status": "solved"}
        )

        data = json.loads(response.data)
        assert data["status"] == "solved"
        assert data["claimStatus"] == "solved"

        stats = json.loads(client.get('/api/ngos/contact@greencity.org/stats').data)
        assert stats["impactStats"]["issuesSolved"] == 1
        assert stats["impactStats"]["issuesClaimed"] == 1


class TestAttachmentsAndEscalation:
    """Test uploads and the escalation endpoints."""

    def test_upload_attachment(self, client, created_issue):
        response = client.post(
            f'/api/issues/{created_issue["id"]}/attachments',
            data={"file": (io.BytesIO(b"image-bytes"), "photo.jpg")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 200
        attachment = json.loads(response.data)["attachments"][0]
        assert attachment["filename"] == "photo.jpg"
        assert attachment["url"].startswith("/uploads/")

        served = client.get(attachment["url"])
        assert served.status_code == 200
        assert served.data == b"image-bytes"

    def test_upload_requires_file(self, client, created_issue):
        response = client.post(
            f'/api/issues/{created_issue["id"]}/attachments',
            data={},
            content_type="multipart/form-data"
        )

        assert response.status_code == 400
        assert json.loads(response.data)["error"] == "file is required"

    def test_escalated_list(self, client, sample_issue_data):
        sample_issue_data["reportedAt"] = (datetime.utcnow() - timedelta(days=11)).isoformat()
        old = json.loads(client.post('/api/issues', json=sample_issue_data).data)
        sample_issue_data["reportedAt"] = (datetime.utcnow() - timedelta(days=9)).isoformat()
        client.post('/api/issues', json=sample_issue_data)

        escalated = json.loads(client.get('/api/issues/escalated').data)

        assert [i["id"] for i in escalated] == [old["id"]]

    def test_escalate_issue(self, client, created_issue):
        response = client.post(f'/api/issues/{created_issue["id"]}/escalate')

        assert response.status_code == 200
        assert json.loads(response.data)["escalated"] is True
