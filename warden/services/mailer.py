"""Outbound mail for one-time codes."""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText

from warden.errors import DeliveryError


class Mailer(ABC):
    """Delivers one-time codes. Raises DeliveryError when the transport fails."""

    def __init__(self, site_name: str = "Warden") -> None:
        self.site_name = site_name

    def send_recovery_code(self, to: str, code: str) -> None:
        self.send(to, f"{self.site_name} recovery code", f"Your password recovery code: {code}\r\n")

    def send_invite_code(self, to: str, code: str) -> None:
        self.send(to, f"{self.site_name} invite code", f"Your invite code: {code}\r\n")

    def send_verification_code(self, to: str, code: str) -> None:
        self.send(to, f"{self.site_name} Verification Code", f"Your verification code: {code}\r\n")

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> None: ...


class SmtpMailer(Mailer):
    """Sends plain-text mail over SMTP, upgrading to TLS before logging in."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        from_address: str,
        site_name: str = "Warden",
        timeout: float = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(site_name)
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_address = from_address or user
        self.timeout = timeout
        self._logger = logger or logging.getLogger("warden")

    def send(self, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = f"{self.site_name} <{self.from_address}>"
        msg["To"] = to

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_address, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            self._logger.error("Email was not sent: %s", e)
            raise DeliveryError(str(e)) from e


class ConsoleMailer(Mailer):
    """Writes messages to the log instead of sending them. Development only."""

    def __init__(self, site_name: str = "Warden", logger: logging.Logger | None = None) -> None:
        super().__init__(site_name)
        self._logger = logger or logging.getLogger("warden")

    def send(self, to: str, subject: str, body: str) -> None:
        self._logger.info("EMAIL to %s: %s | %s", to, subject, body.strip())
