# klassflow/core/notification_service.py
import html
import logging
from dataclasses import dataclass
from datetime import datetime

import httpx

from klassflow.core.config import settings
from klassflow.core.errors import NotificationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_ORGANIZATION_NAME = "Klass Flow"


@dataclass
class SessionInfo:
    title: str | None
    classroom_name: str
    start_time: datetime
    end_time: datetime
    id: int | None = None

    @classmethod
    def from_session(cls, session) -> "SessionInfo":
        return cls(
            id=session.id,
            title=session.title,
            classroom_name=session.classroom.name,
            start_time=session.start_time,
            end_time=session.end_time,
        )

    @property
    def minutes(self) -> int:
        return round((self.end_time - self.start_time).total_seconds() / 60)

    def slot(self) -> str:
        return f"{self.start_time:%d/%m/%Y %H:%M}-{self.end_time:%H:%M}"


def signature_link(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/signature/{token}"


def teacher_signature_link(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/teacher-signature/{token}"


class SignatureMailer:
    """
    Sends signature requests through the Resend HTTP API.

    Without an API key the message is only logged, which is what local
    development relies on. Delivery is never checked beyond the API's
    answer to the send call.
    """

    def __init__(self, api_key: str | None = None, sender: str | None = None,
                 timeout: httpx.Timeout | None = None, transport: httpx.BaseTransport | None = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.MAIL_FROM
        self.timeout = timeout or httpx.Timeout(10.0, read=20.0)
        self.transport = transport

    def send_signature_email(self, to: str, student_name: str, url: str, session: SessionInfo,
                             organization_name: str | None = None) -> None:
        org = organization_name or DEFAULT_ORGANIZATION_NAME
        subject = f"Signature requise : {session.classroom_name} ({session.slot()})"
        topic = f"<p><strong>Sujet :</strong> {html.escape(session.title)}</p>" if session.title else ""
        body = (
            f"<p>Bonjour {html.escape(student_name)},</p>"
            f"<p>Veuillez confirmer votre présence à votre formation chez <strong>{html.escape(org)}</strong>.</p>"
            f'<p><a href="{url}">Signer ma présence</a></p>'
            f"<h2>{html.escape(session.classroom_name)}</h2>"
            f"{topic}"
            f"<p><strong>Horaire :</strong> {session.slot()}</p>"
            f"<p><strong>Durée :</strong> {session.minutes} minutes</p>"
            "<p>Si vous ne pouvez pas assister au cours, vous pourrez déclarer votre absence via le même lien.</p>"
            f"<p>{html.escape(org)}</p>"
        )
        self._send(to, subject, body)

    def send_teacher_signature_request(self, to: str, teacher_name: str, url: str, session: SessionInfo,
                                       pending: list[SessionInfo], organization_name: str | None = None) -> None:
        org = organization_name or DEFAULT_ORGANIZATION_NAME
        subject = f"Signature formateur requise : {session.classroom_name} ({session.slot()})"
        pending_items = "".join(
            f"<li>{html.escape(p.classroom_name)} ({p.slot()})</li>" for p in pending
        )
        pending_block = (
            f"<p>Autres sessions en attente de signature :</p><ul>{pending_items}</ul>" if pending else ""
        )
        body = (
            f"<p>Bonjour {html.escape(teacher_name)},</p>"
            f"<p>Merci de signer la feuille de présence de votre session chez <strong>{html.escape(org)}</strong>.</p>"
            f"<h2>{html.escape(session.classroom_name)}</h2>"
            f"<p><strong>Horaire :</strong> {session.slot()}</p>"
            f'<p><a href="{url}">Signer la session</a></p>'
            f"{pending_block}"
        )
        self._send(to, subject, body)

    def _send(self, to: str, subject: str, body: str) -> None:
        if not self.api_key:
            logger.info("RESEND_API_KEY not set, email to %s not sent: %s", to, subject)
            return

        payload = {"from": self.sender, "to": [to], "subject": subject, "html": body}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(RESEND_API_URL, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Email to %s failed: %s", to, e)
            raise NotificationError(str(e)) from e

        if response.status_code >= 400:
            logger.error("Mail API error %s for %s: %s", response.status_code, to, response.text)
            raise NotificationError(f"Mail API answered {response.status_code}")

        logger.info("Email sent to %s: %s", to, subject)
