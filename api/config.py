# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Application configuration loaded from the environment.

Configuration objects are built once at startup and passed explicitly to
the services that need them (mail transport, token signing, uploads).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


@dataclass
class MailConfig:
    """SMTP settings for reporter notifications."""
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    sender: str = 'no-reply@citybeatflow.example'

    @property
    def is_complete(self) -> bool:
        """All of host, port, username and password are set."""
        return bool(self.host and self.port and self.username and self.password)

    @property
    def use_ssl(self) -> bool:
        return self.port == 465

    @classmethod
    def from_env(cls) -> 'MailConfig':
        port = os.getenv('SMTP_PORT')
        return cls(
            host=os.getenv('SMTP_HOST') or None,
            port=int(port) if port else None,
            username=os.getenv('SMTP_USER') or None,
            password=os.getenv('SMTP_PASS') or None,
            sender=os.getenv('SMTP_FROM') or 'no-reply@citybeatflow.example'
        )


@dataclass
class AppConfig:
    """Service-wide settings."""
    mongodb_uri: str = 'mongodb://localhost:27017'
    mongodb_db: str = 'citybeatflow'
    port: int = 4000
    environment: str = 'development'
    jwt_secret: str = 'dev'
    jwt_expires_days: int = 7
    bcrypt_rounds: int = 12
    ngo_passcode: str = 'NGO25'
    admin_passcode: str = 'ADMIN25'
    upload_dir: str = 'uploads'
    notify_queue_size: int = 100
    escalation_days: int = 10
    otel_enabled: bool = True
    cors_allowed_origins: List[str] = field(default_factory=lambda: ['*'])
    mail: MailConfig = field(default_factory=MailConfig)

    @property
    def debug(self) -> bool:
        return self.environment == 'development'

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Build configuration from environment variables."""
        origins = os.getenv('CORS_ALLOWED_ORIGINS', '*')
        return cls(
            mongodb_uri=os.getenv('MONGODB_URI', 'mongodb://localhost:27017'),
            mongodb_db=os.getenv('MONGODB_DB', 'citybeatflow'),
            port=int(os.getenv('PORT', '4000')),
            environment=os.getenv('ENVIRONMENT', 'development'),
            jwt_secret=os.getenv('JWT_SECRET', 'dev'),
            jwt_expires_days=int(os.getenv('JWT_EXPIRES_DAYS', '7')),
            bcrypt_rounds=int(os.getenv('BCRYPT_ROUNDS', '12')),
            ngo_passcode=os.getenv('NGO_PASSCODE', 'NGO25'),
            admin_passcode=os.getenv('ADMIN_PASSCODE', 'ADMIN25'),
            upload_dir=os.getenv('UPLOAD_DIR', 'uploads'),
            notify_queue_size=int(os.getenv('NOTIFY_QUEUE_SIZE', '100')),
            escalation_days=int(os.getenv('ESCALATION_DAYS', '10')),
            otel_enabled=_env_bool('OTEL_ENABLED', 'true'),
            cors_allowed_origins=[o.strip() for o in origins.split(',') if o.strip()],
            mail=MailConfig.from_env()
        )
