# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for events, the NGO directory and citizen profiles.
"""

import json
import pytest


@pytest.fixture
def registered_ngo(client, sample_ngo_data):
    response = client.post('/api/ngo/auth/signup', json=sample_ngo_data)
    return json.loads(response.data)["ngo"]


@pytest.fixture
def created_issue(client, sample_issue_data):
    return json.loads(client.post('/api/issues', json=sample_issue_data).data)


@pytest.fixture
def created_event(client, registered_ngo, created_issue):
    response = client.post('/api/events', json={
        "title": "Pothole fix day",
        "description": "Fill the Main Street pothole together",
        "ngo": "GreenCity",
        "issueId": created_issue["id"],
        "date": "2025-06-01T09:00:00"
    })
    assert response.status_code == 201
    return json.loads(response.data)


class TestEventEndpoints:
    """Test events, volunteers and wishlists."""

    def test_create_event_links_issue_and_ngo(self, client, created_event, created_issue):
        issue = json.loads(client.get(f'/api/issues/{created_issue["id"]}').data)
        ngo = json.loads(client.get('/api/ngos/contact@greencity.org').data)

        assert created_event["issueId"] == created_issue["id"]
        assert issue["eventId"] == created_event["id"]
        assert ngo["events"][0]["id"] == created_event["id"]

    def test_create_event_requires_title(self, client):
        response = client.post('/api/events', json={"ngo": "GreenCity"})
        assert response.status_code == 400

    def test_create_event_requires_description_and_date(self, client):
        response = client.post('/api/events', json={"title": "Tree planting", "ngo": "BlueSky"})

        data = json.loads(response.data)
        assert response.status_code == 400
        assert data["error"] == "description, date required"
        assert {d["field"] for d in data["details"]} == {"description", "date"}

    def test_list_events_by_ngo(self, client, created_event):
        client.post('/api/events', json={
            "title": "Tree planting",
            "description": "Saplings along the river",
            "ngo": "BlueSky",
            "date": "2025-07-01T08:00:00"
        })

        everything = json.loads(client.get('/api/events').data)
        greencity = json.loads(client.get('/api/events?ngo=GreenCity').data)

        assert len(everything) == 2
        assert [e["id"] for e in greencity] == [created_event["id"]]

    def test_volunteer(self, client, created_event):
        response = client.post(
            f'/api/events/{created_event["id"]}/volunteer',
            json={"name": "Ravi", "email": "ravi@example.com"}
        )

        assert json.loads(response.data)["volunteers"] == [{"name": "Ravi", "email": "ravi@example.com"}]

    def test_volunteer_unknown_event(self, client):
        response = client.post('/api/events/000000000000000000000000/volunteer', json={"name": "Ravi"})

        assert response.status_code == 404
        assert json.loads(response.data)["error"] == "Event not found"

    def test_wishlist_and_donation(self, client, created_event):
        event_id = created_event["id"]
        client.post(f'/api/events/{event_id}/wishlist', json={"item": "gloves", "quantity": 5})
        client.post(f'/api/events/{event_id}/wishlist', json={"item": "bags"})

        client.post(f'/api/events/{event_id}/donate-item', json={"item": "gloves", "quantity": 4})
        response = client.post(f'/api/events/{event_id}/donate-item', json={"item": "gloves", "quantity": 3})

        wishlist = json.loads(response.data)["wishlist"]
        assert wishlist[0] == {"item": "gloves", "quantity": 5, "donated": 7}
        assert wishlist[1] == {"item": "bags", "quantity": 1, "donated": 0}

    def test_donate_unknown_item(self, client, created_event):
        response = client.post(
            f'/api/events/{created_event["id"]}/donate-item',
            json={"item": "shovels"}
        )

        assert response.status_code == 404
        assert json.loads(response.data)["error"] == "Wishlist item not found"


class TestNgoDirectoryEndpoints:
    """Test public NGO profiles."""

    def test_get_ngo(self, client, registered_ngo):
        response = client.get('/api/ngos/Contact@GreenCity.org')

        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["name"] == "GreenCity"
        assert data["events"] == []

    def test_get_unknown_ngo(self, client):
        response = client.get('/api/ngos/ghost@example.org')

        assert response.status_code == 404
        assert json.loads(response.data)["error"] == "NGO not found"

    def test_follow_is_idempotent(self, client, registered_ngo):
        client.post('/api/ngos/contact@greencity.org/follow', json={"email": "fan@example.com"})
        response = client.post('/api/ngos/contact@greencity.org/follow', json={"email": "Fan@example.com"})

        assert json.loads(response.data)["followers"] == ["fan@example.com"]

        stats = json.loads(client.get('/api/ngos/contact@greencity.org/stats').data)
        assert stats["followers"] == 1
        assert stats["impactStats"]["issuesClaimed"] == 0


class TestProfileEndpoints:
    """Test citizen profiles and email preferences."""

    def test_profile_requires_email(self, client):
        response = client.get('/api/profile')

        assert response.status_code == 400
        assert json.loads(response.data)["error"] == "email is required"

    def test_profile_seeded_from_account(self, client, sample_user_data):
        client.post('/api/auth/signup', json=sample_user_data)

        data = json.loads(client.get('/api/profile?email=test@example.com').data)

        assert data["fullName"] == "Test User"
        assert data["notifyByEmail"] is True

    def test_profile_unknown_email(self, client):
        response = client.get('/api/profile?email=ghost@example.com')

        assert response.status_code == 200
        assert json.loads(response.data) is None

    def test_save_profile_defaults_preference(self, client):
        response = client.post('/api/profile', json={"email": "a@b.org", "phone": "555"})

        data = json.loads(response.data)
        assert data["phone"] == "555"
        assert data["notifyByEmail"] is True

    def test_opt_out_stops_emails(self, client, app, fake_transport, created_issue):
        client.post('/api/profile', json={"email": "asha@example.com", "notifyByEmail": False})

        client.put(f'/api/issues/{created_issue["id"]}/status', json={"status": "resolved"})
        app.dispatcher.flush()

        fake_transport.send.assert_not_called()
