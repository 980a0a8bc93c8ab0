"""
Outbound email for account recovery.

Sends synchronously over SMTP. Transport failures never escape as exceptions:
every send returns ``True`` only when the server accepted all recipients, so
the reset flow can roll back on a plain ``False``.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Mapping, Optional

from flask import render_template

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Reset Your Password - Islamic Preacher"


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    secure: bool = False
    starttls: bool = True
    user: str = ""
    password: str = ""
    from_name: str = "Islamic Preacher"
    from_email: str = ""
    timeout: float = 15.0

    @classmethod
    def from_config(cls, config: Mapping) -> "SmtpSettings":
        return cls(
            host=config.get("SMTP_HOST", ""),
            port=int(config.get("SMTP_PORT", 587)),
            secure=bool(config.get("SMTP_SECURE", False)),
            starttls=bool(config.get("SMTP_STARTTLS", True)),
            user=config.get("SMTP_USER", ""),
            password=config.get("SMTP_PASSWORD", ""),
            from_name=config.get("SMTP_FROM_NAME", "Islamic Preacher"),
            from_email=config.get("SMTP_FROM_EMAIL", ""),
            timeout=float(config.get("SMTP_TIMEOUT_SECONDS", 15)),
        )


class EmailNotifier:
    """Composes and sends notification emails."""

    def __init__(self, settings: SmtpSettings, base_url: str) -> None:
        self.settings = settings
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_config(cls, config: Mapping) -> "EmailNotifier":
        return cls(SmtpSettings.from_config(config), config.get("APP_BASE_URL", ""))

    # ------------------------------------------------------------------
    # Domain helpers
    # ------------------------------------------------------------------

    def reset_url(self, token: str) -> str:
        return f"{self.base_url}/auth/password-reset/{token}"

    def send_reset_password_email(self, email: str, token: str) -> bool:
        reset_url = self.reset_url(token)
        html = render_template("email/password_reset.html", reset_url=reset_url)
        text = f"Please reset your password by clicking this link: {reset_url}"
        return self.send_email(email, RESET_SUBJECT, html=html, text=text)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def build_message(self, to: str, subject: str, html: str, text: Optional[str] = None) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self.settings.from_name, self.settings.from_email))
        msg["To"] = to
        msg.set_content(text or "")
        msg.add_alternative(html, subtype="html")
        return msg

    def send_email(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        if not self.settings.host or not self.settings.from_email:
            logger.error("SMTP_HOST or SMTP_FROM_EMAIL not set; cannot send %r", subject)
            return False
        return self._dispatch_smtp(self.build_message(to, subject, html, text))

    def _open_connection(self) -> smtplib.SMTP:
        s = self.settings
        if s.secure:
            return smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout)
        smtp = smtplib.SMTP(s.host, s.port, timeout=s.timeout)
        if s.starttls:
            smtp.starttls()
        return smtp

    def _dispatch_smtp(self, msg: EmailMessage) -> bool:
        smtp: Optional[smtplib.SMTP] = None
        try:
            smtp = self._open_connection()
            if self.settings.user:
                smtp.login(self.settings.user, self.settings.password)
            refused = smtp.send_message(msg)
            if refused:
                logger.error("SMTP server refused recipients: %s", sorted(refused))
                return False
            logger.info("Email %r sent to %s", msg["Subject"], msg["To"])
            return True

        except smtplib.SMTPAuthenticationError as exc:
            logger.error("SMTP authentication failed for %r: %s", self.settings.user, exc)
            return False

        except smtplib.SMTPException as exc:
            logger.error("SMTP error sending to %s: %s", msg["To"], exc)
            return False

        except OSError as exc:
            logger.error(
                "Network error connecting to %s:%d: %s",
                self.settings.host,
                self.settings.port,
                exc,
            )
            return False

        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError):
                    pass
