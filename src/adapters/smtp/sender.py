"""
SMTP email sender adapter - Implements NotificationSender protocol.

Delivers rendered templates over SMTP, either with STARTTLS or over an
implicit TLS connection (port 465). Any transport or protocol failure is
reported to the domain as DeliveryFailed.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any

from src.adapters.smtp.templates import render
from src.domain.exceptions import DeliveryFailed
from src.domain.ports import TemplateKind

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


class SmtpEmailSender:
    """
    Implements NotificationSender protocol via smtplib.

    A new connection is opened per message; the sender holds no sockets
    between requests.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        user: str | None = None,
        password: str | None = None,
        from_address: str = "no-reply@shopeasy.local",
        from_name: str = "ShopEasy",
        frontend_url: str = "",
        timeout: float = 10,
        use_ssl: bool | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._from = f"{from_name} <{from_address}>"
        self._brand = from_name
        self._frontend_url = frontend_url
        self._timeout = timeout
        # Implicit TLS by default only on the SMTPS port
        self._use_ssl = port == SMTPS_PORT if use_ssl is None else use_ssl

    def send(self, email: str, kind: TemplateKind, data: dict[str, Any]) -> None:
        """
        Render and deliver a message.

        Raises:
            DeliveryFailed: If the SMTP exchange fails
        """
        message = render(kind, data, brand=self._brand, frontend_url=self._frontend_url)

        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = self._from
        msg["To"] = email
        msg.set_content(message.text)
        msg.add_alternative(message.html, subtype="html")

        try:
            ctx = ssl.create_default_context()
            if self._use_ssl:
                with smtplib.SMTP_SSL(self._host, self._port, context=ctx, timeout=self._timeout) as smtp:
                    self._deliver(smtp, msg)
            else:
                with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                    smtp.starttls(context=ctx)
                    self._deliver(smtp, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery of %s to %s failed: %s", kind.value, email, exc)
            raise DeliveryFailed(f"{kind.value} email to {email} not delivered") from exc

        logger.info("Sent %s email to %s", kind.value, email)

    def _deliver(self, smtp: smtplib.SMTP, msg: EmailMessage) -> None:
        if self._user and self._password:
            smtp.login(self._user, self._password)
        smtp.send_message(msg)
