"""SMTP notification transport.

smtplib is blocking, so each send runs in a worker thread to keep the event
loop responsive. Failures are logged and reported as ``False``; they never
propagate to the decision pipeline.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from aurora_go.config import Settings, settings as default_settings
from aurora_go.errors import DispatchFailure

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, config: Settings | None = None):
        self.config = config or default_settings

    @property
    def enabled(self) -> bool:
        return self.config.email_enabled and bool(self.config.recipient_list)

    async def send(self, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.debug("Email disabled, not sending %r", subject)
            return False
        try:
            await asyncio.to_thread(self._send_all, subject, html)
        except DispatchFailure as e:
            logger.error("Email dispatch failed: %s", e)
            return False
        logger.info("Email sent to %d recipients: %s", len(self.config.recipient_list), subject)
        return True

    def _send_all(self, subject: str, html: str):
        cfg = self.config
        try:
            if cfg.smtp_port == 465:
                smtp = smtplib.SMTP_SSL(cfg.smtp_host, cfg.smtp_port, timeout=15)
            else:
                smtp = smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=15)
            with smtp:
                if cfg.smtp_port != 465:
                    smtp.starttls()
                if cfg.smtp_user:
                    smtp.login(cfg.smtp_user, cfg.smtp_pass)
                for recipient in cfg.recipient_list:
                    smtp.send_message(_build_message(cfg.from_email or cfg.smtp_user, recipient, subject, html))
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchFailure(str(e)) from e


def _build_message(sender: str, recipient: str, subject: str, html: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = recipient
    msg.set_content("This message requires an HTML-capable mail client.")
    msg.add_alternative(html, subtype="html")
    return msg
