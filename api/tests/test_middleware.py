# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for middleware functionality.
"""

import json
import pytest
from unittest.mock import Mock
from flask import Flask, jsonify

from middleware.auth import UserContext, optional_auth
from middleware.cors import CORSMiddleware, configure_cors
from middleware.error_handler import (
    register_error_handlers, build_error_body, CustomException, ValidationException,
    AuthenticationException, AuthorizationException, NotFoundException, ConflictException
)
from middleware.validation import validate_json, summarize_validation_errors
from models.requests import ClaimRequest, SignupRequest
from services.auth import TokenValidationError


@pytest.fixture
def bare_app():
    """Flask app with only the error handlers registered."""
    app = Flask(__name__)
    register_error_handlers(app)
    return app


class TestErrorHandlers:
    """Test error responses are always {error[, details]}."""

    def test_exception_status_codes(self):
        assert ValidationException("x").status_code == 400
        assert AuthenticationException("x").status_code == 401
        assert AuthorizationException("x").status_code == 403
        assert NotFoundException("x").status_code == 404
        assert ConflictException("x").status_code == 409

    def test_build_error_body(self):
        assert build_error_body("Nope") == {"error": "Nope"}
        assert build_error_body("Nope", [{"field": "title"}]) == {"error": "Nope", "details": [{"field": "title"}]}

    def test_custom_exception_response(self, bare_app):
        @bare_app.route('/missing')
        def missing():
            raise NotFoundException("Issue not found")

        response = bare_app.test_client().get('/missing')

        assert response.status_code == 404
        assert json.loads(response.data) == {"error": "Issue not found"}

    def test_unexpected_error_hides_details(self, bare_app):
        @bare_app.route('/boom')
        def boom():
            raise RuntimeError("database password is hunter2")

        response = bare_app.test_client().get('/boom')

        assert response.status_code == 500
        assert json.loads(response.data) == {"error": "Internal server error"}

    def test_unknown_route(self, bare_app):
        response = bare_app.test_client().get('/nowhere')

        assert response.status_code == 404
        assert "error" in json.loads(response.data)

    def test_generic_custom_exception(self, bare_app):
        @bare_app.route('/custom')
        def custom():
            raise CustomException("Teapot", 418)

        response = bare_app.test_client().get('/custom')
        assert response.status_code == 418


class TestValidation:
    """Test request body validation."""

    def test_summarize_missing_fields(self):
        errors = [
            {"field": "fullName", "message": "Field required", "type": "missing"},
            {"field": "email", "message": "Field required", "type": "missing"}
        ]
        assert summarize_validation_errors(errors) == "fullName, email required"

    def test_summarize_other_error(self):
        errors = [{"field": "quantity", "message": "too small", "type": "greater_than_equal"}]
        assert summarize_validation_errors(errors) == "quantity: too small"

    def test_validate_json_injects_payload(self, bare_app):
        @bare_app.route('/claim', methods=['POST'])
        @validate_json(ClaimRequest)
        def claim(payload):
            return jsonify({"ngo": payload.ngo})

        response = bare_app.test_client().post('/claim', json={"ngo": " GreenCity "})

        assert response.status_code == 200
        assert json.loads(response.data) == {"ngo": "GreenCity"}

    def test_validate_json_rejects(self, bare_app):
        @bare_app.route('/signup', methods=['POST'])
        @validate_json(SignupRequest)
        def signup(payload):
            return jsonify({})

        response = bare_app.test_client().post('/signup', data="not json", content_type="text/plain")

        data = json.loads(response.data)
        assert response.status_code == 400
        assert data["error"] == "fullName, email, password required"
        assert {d["field"] for d in data["details"]} == {"fullName", "email", "password"}


class TestOptionalAuth:
    """Test bearer token handling on public routes."""

    def _app(self, auth_service):
        app = Flask(__name__)
        app.auth_service = auth_service

        @app.route('/whoami')
        @optional_auth
        def whoami(user_context):
            return jsonify({"actor": user_context.actor if user_context else None})

        return app

    def test_valid_token(self):
        auth_service = Mock()
        auth_service.validate_token.return_value = {"sub": "u1", "role": "admin", "email": "boss@city.gov"}
        client = self._app(auth_service).test_client()

        response = client.get('/whoami', headers={"Authorization": "Bearer abc"})

        assert json.loads(response.data) == {"actor": "boss@city.gov"}
        auth_service.validate_token.assert_called_once_with("abc")

    def test_invalid_token_is_anonymous(self):
        auth_service = Mock()
        auth_service.validate_token.side_effect = TokenValidationError("bad")
        client = self._app(auth_service).test_client()

        response = client.get('/whoami', headers={"Authorization": "Bearer abc"})

        assert json.loads(response.data) == {"actor": None}

    def test_no_token(self):
        auth_service = Mock()
        client = self._app(auth_service).test_client()

        assert json.loads(client.get('/whoami').data) == {"actor": None}
        auth_service.validate_token.assert_not_called()

    def test_user_context_actor_falls_back_to_role(self):
        assert UserContext(user_id="u1", role="admin").actor == "admin"


class TestCORSMiddleware:
    """Test CORS middleware functionality."""

    def setup_method(self):
        self.app = Flask(__name__)

        @self.app.route('/ping')
        def ping():
            return "pong"

    def test_origin_matching(self):
        cors = CORSMiddleware(self.app, allowed_origins=["https://app.example.com", "http://localhost:*"])

        assert cors.is_origin_allowed("https://app.example.com") is True
        assert cors.is_origin_allowed("http://localhost:5173") is True
        assert cors.is_origin_allowed("https://evil.example.com") is False
        assert cors.is_origin_allowed(None) is False

    def test_wildcard_reflects_origin(self):
        configure_cors(self.app)

        response = self.app.test_client().get('/ping', headers={"Origin": "https://web.example.com"})

        assert response.headers["Access-Control-Allow-Origin"] == "https://web.example.com"

    def test_preflight(self):
        configure_cors(self.app, allowed_origins=["https://app.example.com"])
        client = self.app.test_client()

        allowed = client.options('/ping', headers={"Origin": "https://app.example.com"})
        rejected = client.options('/ping', headers={"Origin": "https://evil.example.com"})

        assert allowed.status_code == 204
        assert "PUT" in allowed.headers["Access-Control-Allow-Methods"]
        assert rejected.status_code == 403
