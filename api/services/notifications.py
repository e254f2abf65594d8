# SPDX-License-Identifier: Apache-2.0

"""
Reporter email notifications.

Delivery is best-effort: requests enqueue messages on a bounded in-process
queue and a single worker thread hands them to the mail transport. Nothing
is retried, and a send failure never reaches the request that caused it.
"""

import logging
import queue
import threading
from typing import Optional

from flask import Flask
from flask_mail import Mail, Message
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from config import MailConfig
from domain.notifications import EmailMessage, should_notify
from services.mongodb import MongoDBService, PROFILES

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_STOP = object()


class FlaskMailTransport:
    """SMTP transport backed by Flask-Mail, configured from an explicit MailConfig."""

    def __init__(self, app: Flask, mail_config: MailConfig):
        self.app = app
        self.sender = mail_config.sender
        app.config.update(
            MAIL_SERVER=mail_config.host,
            MAIL_PORT=mail_config.port,
            MAIL_USERNAME=mail_config.username,
            MAIL_PASSWORD=mail_config.password,
            MAIL_USE_SSL=mail_config.use_ssl,
            MAIL_USE_TLS=not mail_config.use_ssl,
            MAIL_DEFAULT_SENDER=mail_config.sender
        )
        self.mail = Mail(app)

    def send(self, message: EmailMessage) -> None:
        msg = Message(
            subject=message.subject,
            sender=self.sender,
            recipients=[message.to],
            body=message.text,
            html=message.html
        )
        with self.app.app_context():
            self.mail.send(msg)


def create_mail_transport(app: Flask, mail_config: MailConfig) -> Optional[FlaskMailTransport]:
    """Build the SMTP transport, or None when SMTP is not fully configured."""
    if not mail_config.is_complete:
        logger.info(
            "SMTP not fully configured, emails will be skipped. "
            "Set SMTP_HOST/SMTP_PORT/SMTP_USER/SMTP_PASS to enable."
        )
        return None
    return FlaskMailTransport(app, mail_config)


class NotificationDispatcher:
    """Bounded queue drained by one daemon worker thread."""

    def __init__(self, transport=None, max_queue_size: int = 100):
        """
        Args:
            transport: Object with ``send(EmailMessage)``; None disables delivery
            max_queue_size: Messages held before new ones are dropped
        """
        self.transport = transport
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.transport is not None

    @property
    def queued(self) -> int:
        return self._queue.qsize()

    def dispatch(self, message: EmailMessage) -> bool:
        """
        Enqueue a message without blocking.

        Returns:
            True if the message was queued, False if skipped or dropped
        """
        if not self.enabled:
            logger.info(
                "Email skipped (no SMTP)",
                extra={"to": message.to, "subject": message.subject}
            )
            return False

        self._ensure_worker()
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            logger.warning(
                "Notification queue full, dropping email",
                extra={"to": message.to, "subject": message.subject}
            )
            return False
        return True

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._run, name="notification-dispatcher", daemon=True
                )
                self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._deliver(item)
            finally:
                self._queue.task_done()

    def _deliver(self, message: EmailMessage) -> None:
        with tracer.start_as_current_span(
            "notifications.send_email",
            attributes={"email.subject": message.subject}
        ) as span:
            try:
                self.transport.send(message)
                logger.info("Email sent", extra={"to": message.to, "subject": message.subject})
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    f"Failed to send email: {e}",
                    extra={"to": message.to, "subject": message.subject}
                )

    def flush(self) -> None:
        """Block until every queued message has been handled."""
        self._queue.join()

    def shutdown(self, timeout: float = 5.0) -> None:
        """Drain the queue and stop the worker."""
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is not None and worker.is_alive():
            self._queue.put(_STOP)
            worker.join(timeout)


class ReporterNotifier:
    """Sends issue emails to reporters who have not opted out."""

    def __init__(self, mongodb_service: MongoDBService, dispatcher: NotificationDispatcher):
        self.mongodb_service = mongodb_service
        self.dispatcher = dispatcher

    def notify(self, message: Optional[EmailMessage]) -> bool:
        """
        Queue a message if the reporter's profile allows email.

        Profile lookup errors are logged and the message is not sent.
        """
        if message is None:
            return False

        try:
            profile = self.mongodb_service.find_one_by(PROFILES, {"email": message.to})
        except Exception as e:
            logger.warning(f"Error checking profile for notify preference: {e}")
            return False

        if not should_notify(profile):
            logger.info(
                "Skipping email because notifyByEmail is false",
                extra={"to": message.to, "subject": message.subject}
            )
            return False

        return self.dispatcher.dispatch(message)
