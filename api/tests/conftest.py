# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timedelta
from typing import Dict, Any
from unittest.mock import MagicMock

import mongomock

from app import create_app
from config import AppConfig
from services.mongodb import MongoDBService
from services.notifications import NotificationDispatcher, ReporterNotifier

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'


@pytest.fixture(scope="session")
def test_database_name():
    """Test database name."""
    return 'citybeatflow_test'


@pytest.fixture(scope="function")
def mongodb_client():
    """In-memory MongoDB client, fresh for every test."""
    return mongomock.MongoClient()


@pytest.fixture(scope="function")
def mongodb_service(mongodb_client, test_database_name):
    """Record store backed by the in-memory client, with indexes in place."""
    service = MongoDBService(database_name=test_database_name, client=mongodb_client)
    service.create_indexes()
    return service


@pytest.fixture
def fake_transport():
    """Mail transport recording sent messages."""
    return MagicMock()


@pytest.fixture
def dispatcher(fake_transport):
    dispatcher = NotificationDispatcher(fake_transport, max_queue_size=10)
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def notifier(mongodb_service, dispatcher):
    return ReporterNotifier(mongodb_service, dispatcher)


@pytest.fixture
def test_config(tmp_path):
    """Configuration for tests: no tracing, cheap password hashing."""
    return AppConfig(
        environment='test',
        jwt_secret='test-secret',
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        otel_enabled=False
    )


@pytest.fixture
def app(test_config, mongodb_service, fake_transport):
    """Application wired to the in-memory store and fake mail transport."""
    app = create_app(test_config, mongodb_service=mongodb_service, mail_transport=fake_transport)
    app.config['TESTING'] = True
    yield app
    app.dispatcher.shutdown()


@pytest.fixture
def client(app):
    """Test client for the application."""
    return app.test_client()


@pytest.fixture
def sample_issue_data() -> Dict[str, Any]:
    """Sample issue report as sent by the web client."""
    return {
        "title": "Pothole on Main Street",
        "description": "Deep pothole near the bus stop",
        "category": "pothole",
        "location": {"lat": 12.97, "lng": 77.59, "address": "Main Street 12"},
        "reportedBy": "Asha",
        "reporterEmail": "asha@example.com",
        "priority": "high"
    }


@pytest.fixture
def sample_ngo_data() -> Dict[str, Any]:
    """Sample NGO signup payload."""
    return {
        "name": "GreenCity",
        "email": "contact@greencity.org",
        "password": "s3cret",
        "profile": "Urban cleanup volunteers",
        "rolePasscode": "NGO25"
    }


@pytest.fixture
def sample_user_data() -> Dict[str, Any]:
    """Sample citizen signup payload."""
    return {
        "fullName": "Test User",
        "email": "test@example.com",
        "password": "password123"
    }


@pytest.fixture
def old_report_time():
    """A report time past the escalation threshold."""
    return datetime.utcnow() - timedelta(days=11)
