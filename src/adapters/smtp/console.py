"""
Console email sender adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification port, logging messages to stdout for local development.
"""

import logging
from typing import Any

from src.adapters.smtp.templates import render
from src.domain.ports import TemplateKind

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - never fails, never leaves the process.
    """

    def __init__(self, brand: str = "ShopEasy") -> None:
        self._brand = brand

    def send(self, email: str, kind: TemplateKind, data: dict[str, Any]) -> None:
        """
        Log the message to console (simulates email delivery).

        OTP codes are logged at INFO level so they are visible in container logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            kind: Template to render
            data: Template values
        """
        if kind is TemplateKind.OTP:
            logger.info("[OTP] Email: %s Code: %s", email, data["code"])
            return

        message = render(kind, data, brand=self._brand)
        logger.info("[%s] Email: %s Subject: %s", kind.value, email, message.subject)
