"""SMTP delivery for services that send mail."""

import smtplib
import threading
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List

from servicehooks.config import MailConfig
from servicehooks.errors import ConnectionFailure


class Mailer:
    """Sends plain-text mail through the configured SMTP server.

    SMTP settings are resolved once, on first delivery, and kept on this
    instance.
    """

    def __init__(self, config: MailConfig | None = None) -> None:
        self._config = config or MailConfig()
        self._settings: Dict[str, Any] | None = None
        self._lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return self._settings is not None

    @property
    def mail_from(self) -> str:
        return self._config.noreply_address

    def _configure(self) -> Dict[str, Any]:
        with self._lock:
            if self._settings is None:
                c = self._config
                self._settings = {
                    "host": c.address,
                    "port": c.port,
                    "local_hostname": c.domain,
                    "timeout": c.timeout,
                    "user_name": c.user_name,
                    "password": c.password_resolved,
                    "starttls": c.enable_starttls_auto,
                }
            return self._settings

    def build_message(self, to: List[str], cc: List[str] | None, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["Subject"] = subject
        msg["From"] = self.mail_from
        msg["Reply-To"] = self.mail_from
        msg["To"] = ", ".join(to)
        if cc:
            msg["Cc"] = ", ".join(cc)
        msg.attach(MIMEText(body, "plain", "utf-8"))
        return msg

    def deliver(self, to: List[str], cc: List[str] | None, subject: str, body: str) -> None:
        """Send one message. SMTP connection problems raise ConnectionFailure."""
        settings = self._configure()
        msg = self.build_message(to, cc, subject, body)
        recipients = list(to) + list(cc or [])
        try:
            with smtplib.SMTP(
                settings["host"],
                settings["port"],
                local_hostname=settings["local_hostname"],
                timeout=settings["timeout"],
            ) as s:
                if settings["starttls"] and s.has_extn("starttls"):
                    s.starttls()
                if settings["user_name"]:
                    s.login(settings["user_name"], settings["password"] or "")
                s.sendmail(self.mail_from, recipients, msg.as_string())
        except (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, ConnectionRefusedError) as e:
            raise ConnectionFailure(f"SMTP connection failed: {e}", original_exception=e) from e
