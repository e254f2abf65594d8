# SPDX-License-Identifier: Apache-2.0

"""
Reporter notification domain logic.

Pure functions deciding whether a reporter wants email and composing the
messages sent for claim, status and progress events.
"""

import html
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class EmailMessage:
    """Outgoing email to an issue reporter."""
    to: str
    subject: str
    text: str
    html: str


def should_notify(profile: Optional[Dict[str, Any]]) -> bool:
    """
    Decide whether a reporter receives email.

    A reporter without a profile is notified; only an explicit
    ``notifyByEmail: false`` opts out.
    """
    if profile is None:
        return True
    return profile.get("notifyByEmail") is not False


def _to_html(text: str) -> str:
    return "<p>" + html.escape(text).replace("\n", "<br/>") + "</p>"


def _message(issue: Dict[str, Any], subject: str, text: str) -> Optional[EmailMessage]:
    to = issue.get("reporterEmail")
    if not to:
        return None
    return EmailMessage(to=to, subject=subject, text=text, html=_to_html(text))


def claim_message(issue: Dict[str, Any], ngo_name: str) -> Optional[EmailMessage]:
    """Message telling the reporter an NGO adopted their report."""
    title = issue.get("title", "")
    return _message(
        issue,
        f'Your report "{title}" was adopted by {ngo_name}',
        f"Good news: {ngo_name} has adopted your report titled: {title}. "
        f"The organization will follow up and update progress."
    )


def status_change_message(issue: Dict[str, Any], status: str) -> Optional[EmailMessage]:
    title = issue.get("title", "")
    return _message(
        issue,
        f"Status update for your report: {title}",
        f'The status of your report "{title}" has changed to: {status}'
    )


def update_message(issue: Dict[str, Any], actor: str, text: str) -> Optional[EmailMessage]:
    return _message(
        issue,
        f"Update on your report: {issue.get('title', '')}",
        f"{actor} posted: {text}"
    )


def ngo_update_message(issue: Dict[str, Any], actor: str, text: str,
                       status: Optional[str] = None) -> Optional[EmailMessage]:
    """Message for an NGO progress note, mentioning the new status if any."""
    body = f"{actor} posted an update: {text or '(status change)'}"
    if status:
        body += f"\nNew status: {status}"
    return _message(issue, f"Update on your report: {issue.get('title', '')}", body)
