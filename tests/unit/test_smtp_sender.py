"""
Unit tests for SmtpEmailSender.

smtplib.SMTP and smtplib.SMTP_SSL are patched; no network traffic happens.
"""

import smtplib
import ssl
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.smtp.sender import SmtpEmailSender
from src.domain.exceptions import DeliveryFailed
from src.domain.ports import TemplateKind


@pytest.fixture
def smtp() -> MagicMock:
    with patch("src.adapters.smtp.sender.smtplib.SMTP") as smtp_class:
        yield smtp_class


def make_sender(**overrides) -> SmtpEmailSender:
    options = {
        "host": "smtp.example.com",
        "port": 587,
        "user": "mailer",
        "password": "pw",
        "from_address": "no-reply@shop.example",
        "from_name": "ShopEasy",
    }
    options.update(overrides)
    return SmtpEmailSender(**options)


class TestSmtpEmailSender:
    def test_sends_rendered_message(self, smtp: MagicMock) -> None:
        make_sender().send("ann@example.com", TemplateKind.OTP, {"code": "123456"})

        smtp.assert_called_once_with("smtp.example.com", 587, timeout=10)
        conn = smtp.return_value.__enter__.return_value
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with("mailer", "pw")

        msg = conn.send_message.call_args.args[0]
        assert msg["To"] == "ann@example.com"
        assert msg["From"] == "ShopEasy <no-reply@shop.example>"
        assert msg["Subject"] == "Verify Your Email - ShopEasy"
        assert msg.is_multipart()

    def test_skips_login_without_credentials(self, smtp: MagicMock) -> None:
        make_sender(user=None, password=None).send("ann@example.com", TemplateKind.WELCOME, {"name": "Ann"})

        conn = smtp.return_value.__enter__.return_value
        conn.login.assert_not_called()
        conn.send_message.assert_called_once()

    def test_smtp_error_becomes_delivery_failed(self, smtp: MagicMock) -> None:
        conn = smtp.return_value.__enter__.return_value
        conn.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(DeliveryFailed):
            make_sender().send("ann@example.com", TemplateKind.OTP, {"code": "123456"})

    def test_connection_error_becomes_delivery_failed(self, smtp: MagicMock) -> None:
        smtp.side_effect = ConnectionRefusedError()

        with pytest.raises(DeliveryFailed):
            make_sender().send("ann@example.com", TemplateKind.OTP, {"code": "123456"})


class TestImplicitTls:
    """Port 465 providers expect TLS from the first byte."""

    @pytest.fixture
    def smtp_ssl(self) -> MagicMock:
        with patch("src.adapters.smtp.sender.smtplib.SMTP_SSL") as smtp_ssl_class:
            yield smtp_ssl_class

    def test_port_465_uses_smtp_ssl(self, smtp: MagicMock, smtp_ssl: MagicMock) -> None:
        make_sender(port=465).send("ann@example.com", TemplateKind.OTP, {"code": "123456"})

        smtp.assert_not_called()
        assert smtp_ssl.call_args.args == ("smtp.example.com", 465)
        assert smtp_ssl.call_args.kwargs["timeout"] == 10
        assert smtp_ssl.call_args.kwargs["context"] is not None
        conn = smtp_ssl.return_value.__enter__.return_value
        conn.starttls.assert_not_called()
        conn.login.assert_called_once_with("mailer", "pw")
        conn.send_message.assert_called_once()

    def test_explicit_flag_overrides_port(self, smtp: MagicMock, smtp_ssl: MagicMock) -> None:
        make_sender(port=2465, use_ssl=True).send("ann@example.com", TemplateKind.WELCOME, {"name": "Ann"})
        make_sender(port=465, use_ssl=False).send("ann@example.com", TemplateKind.WELCOME, {"name": "Ann"})

        assert smtp_ssl.call_args.args == ("smtp.example.com", 2465)
        smtp.assert_called_once_with("smtp.example.com", 465, timeout=10)

    def test_ssl_handshake_failure_becomes_delivery_failed(self, smtp_ssl: MagicMock) -> None:
        smtp_ssl.side_effect = ssl.SSLError("handshake failure")

        with pytest.raises(DeliveryFailed):
            make_sender(port=465).send("ann@example.com", TemplateKind.OTP, {"code": "123456"})
