"""
Email templates - Subject, HTML and plain-text bodies per TemplateKind.

All interpolated values are HTML-escaped.
"""

from dataclasses import dataclass
from html import escape
from typing import Any

from src.domain.ports import TemplateKind

_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; background: #f9f9f9; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; background: #fff; border-radius: 12px;">
    <div style="background: #1DB954; color: #fff; padding: 30px 20px; text-align: center;">
      <h1 style="margin: 0;">{brand}</h1>
    </div>
    <div style="padding: 30px 25px;">
{content}
    </div>
    <div style="padding: 20px; text-align: center; color: #666; font-size: 12px;">
      &copy; {brand}. This is an automated message, please do not reply.
    </div>
  </div>
</body>
</html>
"""


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def render(kind: TemplateKind, data: dict[str, Any], brand: str = "ShopEasy", frontend_url: str = "") -> RenderedEmail:
    """
    Render a message for a template kind.

    Raises:
        KeyError: If ``data`` lacks a value the template needs
    """
    renderer = _RENDERERS[kind]
    subject, title, content, text = renderer(data, brand, frontend_url.rstrip("/"))
    html = _LAYOUT.format(title=escape(title), brand=escape(brand), content=content)
    return RenderedEmail(subject=subject, html=html, text=text)


def _otp(data: dict[str, Any], brand: str, frontend_url: str) -> tuple[str, str, str, str]:
    code = escape(str(data["code"]))
    minutes = int(data.get("expires_in_minutes", 10))
    content = f"""
      <h2>Email Verification Required</h2>
      <p>Thank you for signing up with {escape(brand)}! Use the code below to verify your email address:</p>
      <div style="background: #f4f4f4; padding: 15px; text-align: center; letter-spacing: 5px; font-size: 32px;">{code}</div>
      <p>This code will expire in {minutes} minutes.</p>
      <p>If you didn't create an account, please ignore this email.</p>
      <p><strong>Security Tip:</strong> Never share your code with anyone.</p>"""
    text = f"Your {brand} verification code is {data['code']}. It expires in {minutes} minutes."
    return f"Verify Your Email - {brand}", "Email Verification", content, text


def _welcome(data: dict[str, Any], brand: str, frontend_url: str) -> tuple[str, str, str, str]:
    name = escape(str(data["name"]))
    content = f"""
      <h2>Welcome to {escape(brand)}, {name}!</h2>
      <p>Your account has been successfully created and verified.</p>
      <p><a href="{escape(frontend_url)}/home">Start Shopping Now</a></p>"""
    text = f"Welcome to {brand}, {data['name']}! Your account has been created and verified."
    return f"Welcome to {brand}!", f"Welcome to {brand}", content, text


def _security_alert(data: dict[str, Any], brand: str, frontend_url: str) -> tuple[str, str, str, str]:
    details = "".join(
        f"<p>{label}: {escape(str(data[key]))}</p>"
        for key, label in (("time", "Time"), ("browser", "Browser"), ("os", "Operating System"), ("ip", "IP Address"))
        if data.get(key)
    )
    content = f"""
      <h2>Security Alert</h2>
      <p>We detected a new login to your {escape(brand)} account.</p>
      <div style="background: #fff3cd; padding: 15px;">{details}</div>
      <p>If this wasn't you, change your password immediately.</p>
      <p><a href="{escape(frontend_url)}/reset">Reset Password</a></p>"""
    text = f"We detected a new login to your {brand} account. If this wasn't you, reset your password."
    return f"Security Alert: New Login Detected - {brand}", "Security Alert", content, text


def _password_reset(data: dict[str, Any], brand: str, frontend_url: str) -> tuple[str, str, str, str]:
    url = escape(str(data["reset_url"]))
    content = f"""
      <h2>Password Reset Request</h2>
      <p>You recently requested to reset your password. Click the link below to reset it:</p>
      <p><a href="{url}">{url}</a></p>
      <p>This link will expire in 30 minutes.</p>
      <p>If you didn't request a password reset, you can safely ignore this email.</p>"""
    text = f"Reset your {brand} password: {data['reset_url']}"
    return f"Reset Your Password - {brand}", "Password Reset", content, text


def _order_confirmation(data: dict[str, Any], brand: str, frontend_url: str) -> tuple[str, str, str, str]:
    order_id = escape(str(data["order_id"]))
    content = f"""
      <h2>Order Confirmation</h2>
      <p>Thank you for your order! It has been confirmed and is being processed.</p>
      <p><strong>Order ID:</strong> {order_id}</p>
      <p><strong>Order Date:</strong> {escape(str(data.get("order_date", "")))}</p>
      <p><strong>Total Amount:</strong> ${escape(str(data.get("total_amount", "")))}</p>
      <p><strong>Shipping Address:</strong> {escape(str(data.get("shipping_address", "")))}</p>
      <p><a href="{escape(frontend_url)}/orders/{order_id}">Track Your Order</a></p>"""
    text = f"Your {brand} order #{data['order_id']} is confirmed."
    return f"Order Confirmation #{data['order_id']} - {brand}", "Order Confirmation", content, text


_RENDERERS = {
    TemplateKind.OTP: _otp,
    TemplateKind.WELCOME: _welcome,
    TemplateKind.SECURITY_ALERT: _security_alert,
    TemplateKind.PASSWORD_RESET: _password_reset,
    TemplateKind.ORDER_CONFIRMATION: _order_confirmation,
}
