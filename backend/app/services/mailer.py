# app/services/mailer.py
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from decimal import Decimal
from email.message import EmailMessage
from typing import Optional

from app import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailResult:
    success: bool
    error: Optional[str] = None


class SmtpStatementMailer:
    """Sends giving statements as PDF attachments over SMTP (settings from env)."""

    def build_message(
        self,
        *,
        to: str,
        recipient_name: str,
        church_name: str,
        year: int,
        total_amount: Decimal,
        pdf: bytes,
        statement_number: Optional[str],
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = f"{church_name} - {year} Contribution Statement"
        msg["From"] = settings.smtp_from()
        msg["To"] = to
        msg.set_content(
            f"Dear {recipient_name or 'Friend'},\n\n"
            f"Thank you for your faithful giving to {church_name} during {year}.\n"
            f"Attached is your contribution statement for tax purposes "
            f"(total contributions: ${Decimal(total_amount):,.2f}).\n\n"
            f"Please retain this statement for your tax records.\n\n"
            f"{church_name}\n"
        )
        filename = f"giving-statement-{year}-{statement_number or 'statement'}.pdf"
        msg.add_attachment(pdf, maintype="application", subtype="pdf", filename=filename)
        return msg

    def send_statement(self, **kwargs) -> MailResult:
        host = settings.smtp_host()
        if not host:
            return MailResult(success=False, error="SMTP is not configured")

        msg = self.build_message(**kwargs)
        try:
            with smtplib.SMTP(host, settings.smtp_port(), timeout=30) as smtp:
                if settings.smtp_starttls():
                    smtp.starttls()
                user = settings.smtp_user()
                if user:
                    smtp.login(user, settings.smtp_password())
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("sending statement email to %s failed: %s", kwargs.get("to"), exc)
            return MailResult(success=False, error=str(exc))
        return MailResult(success=True)


def get_mailer() -> SmtpStatementMailer:
    return SmtpStatementMailer()
