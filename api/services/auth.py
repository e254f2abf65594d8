# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT token management and password hashing.

Tokens are HS256-signed with the configured secret and carry the user id
(``sub``), role and email. Passwords are hashed with bcrypt. Signing up for
an elevated role (ngo, admin) requires that role's passcode.
"""

import jwt
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from opentelemetry import trace
import logging

from middleware.error_handler import (
    AuthenticationException,
    AuthorizationException,
    ConflictException
)
from models.entities import User, NGO
from models.enums import UserRole
from models.requests import SignupRequest, LoginRequest, NgoSignupRequest
from services.mongodb import MongoDBService, DuplicateRecordError, USERS, NGOS

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """
    JWT authentication service with HS256 signing and bcrypt password hashing.
    """

    def __init__(self, mongodb_service: MongoDBService, secret: str,
                 expires_days: int = 7, ngo_passcode: str = 'NGO25',
                 admin_passcode: str = 'ADMIN25', bcrypt_rounds: int = 12):
        """
        Initialize the authentication service.

        Args:
            mongodb_service: Record store holding users and NGOs
            secret: HS256 signing secret
            expires_days: Token lifetime in days
            ngo_passcode: Passcode required to register an NGO account
            admin_passcode: Passcode required to register an admin account
            bcrypt_rounds: bcrypt cost factor
        """
        self.mongodb_service = mongodb_service
        self.secret = secret
        self.algorithm = "HS256"
        self.expires_days = expires_days
        self.bcrypt_rounds = bcrypt_rounds
        self.passcodes = {
            UserRole.NGO.value: ngo_passcode,
            UserRole.ADMIN.value: admin_passcode
        }

    def hash_password(self, password: str) -> str:
        with tracer.start_as_current_span("auth.hash_password"):
            salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
            return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        with tracer.start_as_current_span("auth.verify_password") as span:
            try:
                result = bcrypt.checkpw(
                    password.encode('utf-8'),
                    hashed_password.encode('utf-8')
                )
            except ValueError as e:
                logger.error(f"Password verification error: {str(e)}")
                result = False

            span.set_attribute("auth.verification_result", "success" if result else "failed")
            return result

    def generate_token(self, user_id: str, role: str, email: Optional[str] = None) -> str:
        """Sign a bearer token for a user."""
        with tracer.start_as_current_span("auth.generate_token") as span:
            span.set_attributes({"user.id": user_id, "user.role": role})

            now = datetime.now(timezone.utc)
            payload = {
                "sub": user_id,
                "role": role,
                "email": email,
                "iat": now,
                "exp": now + timedelta(days=self.expires_days)
            }
            return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Raises:
            TokenValidationError: If token is invalid or expired
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            try:
                payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
                span.set_attribute("auth.validation_result", "success")
                return payload

            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")

            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")

    def _create_user(self, full_name: str, email: str, password: str,
                     role: str, organization: str) -> User:
        if self.mongodb_service.find_one_by(USERS, {"email": email}):
            raise ConflictException("Email already registered")

        user = User(
            full_name=full_name,
            email=email,
            password_hash=self.hash_password(password),
            role=role,
            organization=organization
        )
        try:
            record = self.mongodb_service.create(USERS, user.to_document())
        except DuplicateRecordError:
            raise ConflictException("Email already registered")
        return User.model_validate(record)

    def signup(self, request: SignupRequest) -> Tuple[str, User]:
        """
        Register a user account.

        Unknown roles fall back to citizen. ngo and admin require their passcode.

        Returns:
            Tuple of (token, user)
        """
        with tracer.start_as_current_span("auth.signup") as span:
            role = request.role if request.role in {r.value for r in UserRole} else UserRole.CITIZEN.value
            span.set_attribute("user.role", role)

            required = self.passcodes.get(role)
            if required is not None and request.role_passcode != required:
                logger.warning("Signup rejected: bad role passcode", extra={"role": role})
                raise AuthorizationException("Invalid role passcode")

            user = self._create_user(
                request.full_name, request.email, request.password, role, request.organization
            )
            logger.info("User registered", extra={"user_id": user.id, "role": role})
            return self.generate_token(user.id, user.role, user.email), user

    def login(self, request: LoginRequest, required_role: Optional[str] = None) -> Tuple[str, User]:
        """
        Authenticate with email and password.

        Args:
            request: Credentials
            required_role: Reject accounts whose role differs

        Raises:
            AuthenticationException: On unknown email, wrong password or role mismatch
        """
        with tracer.start_as_current_span("auth.login") as span:
            message = "Invalid NGO credentials" if required_role == UserRole.NGO.value else "Invalid credentials"

            record = self.mongodb_service.find_one_by(USERS, {"email": request.email})
            if not record or (required_role and record.get("role") != required_role):
                span.set_attribute("auth.result", "unknown_user")
                logger.warning("Login attempt with unknown account", extra={"email": request.email})
                raise AuthenticationException(message)

            user = User.model_validate(record)
            if not self.verify_password(request.password, user.password_hash):
                span.set_attribute("auth.result", "bad_password")
                logger.warning("Login attempt with wrong password", extra={"user_id": user.id})
                raise AuthenticationException(message)

            span.set_attribute("auth.result", "success")
            return self.generate_token(user.id, user.role, user.email), user

    def ngo_signup(self, request: NgoSignupRequest) -> Tuple[str, Dict[str, Any]]:
        """Register an NGO: an ngo-role user plus its public NGO record."""
        with tracer.start_as_current_span("auth.ngo_signup"):
            if request.role_passcode != self.passcodes[UserRole.NGO.value]:
                logger.warning("NGO signup rejected: bad passcode", extra={"email": request.email})
                raise AuthorizationException("Invalid NGO passcode")

            user = self._create_user(
                request.name, request.email, request.password, UserRole.NGO.value, request.name
            )

            ngo = NGO(name=request.name, email=request.email, profile=request.profile)
            try:
                ngo_record = self.mongodb_service.create(NGOS, ngo.to_document())
            except DuplicateRecordError:
                raise ConflictException("Email already registered")

            logger.info("NGO registered", extra={"ngo_id": ngo_record["id"], "user_id": user.id})
            return self.generate_token(user.id, user.role, user.email), ngo_record

    def ngo_login(self, request: LoginRequest) -> Tuple[str, Optional[Dict[str, Any]]]:
        """Authenticate an ngo-role account and return its NGO record (may be None)."""
        token, user = self.login(request, required_role=UserRole.NGO.value)
        return token, self.mongodb_service.find_one_by(NGOS, {"email": user.email})
