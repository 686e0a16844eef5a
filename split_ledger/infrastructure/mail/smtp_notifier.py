"""SMTP delivery of report workbooks."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from split_ledger.config import SmtpSettings
from split_ledger.domain.errors import DeliveryConfigError
from split_ledger.domain.repositories import ReportNotifier

logger = logging.getLogger(__name__)

XLSX_MAINTYPE = "application"
XLSX_SUBTYPE = "vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def build_message(settings: SmtpSettings, subject: str, body: str, filename: str, payload: bytes) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = settings.sender
    message["To"] = ", ".join(settings.recipients)
    message.set_content(body)
    message.add_attachment(payload, maintype=XLSX_MAINTYPE, subtype=XLSX_SUBTYPE, filename=filename)
    return message


class SmtpReportNotifier(ReportNotifier):
    def __init__(self, settings: SmtpSettings) -> None:
        self._settings = settings

    def send_report(self, subject: str, body: str, filename: str, payload: bytes) -> None:
        settings = self._settings
        if not settings.is_complete():
            raise DeliveryConfigError("Missing SMTP_HOST, EMAIL_FROM or EMAIL_TO")
        message = build_message(settings, subject, body, filename, payload)
        with smtplib.SMTP(settings.host, settings.port) as client:
            client.starttls()
            if settings.username:
                client.login(settings.username, settings.password)
            client.send_message(message)
        logger.info("Sent %s to %d recipients", filename, len(settings.recipients))
