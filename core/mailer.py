"""
SMTP email transport.

Sends label emails with an optional file attachment. When suppress_send is
enabled (testing and local development) messages are built and logged but
never handed to an SMTP server.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from logging_config import get_logger
from .exceptions import ConfigurationError, EmailTransportError


@dataclass(frozen=True)
class Attachment:
    """A file attached to an outgoing email."""

    content: bytes
    filename: str
    mime_type: str = "application/octet-stream"


class Mailer:
    """Builds and sends plain-text emails over SMTP."""

    def __init__(
        self,
        sender: str,
        host: str = "",
        port: int = 587,
        use_tls: bool = True,
        username: str = "",
        password: str = "",
        timeout_seconds: float = 30.0,
        suppress_send: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        if not suppress_send and not host:
            raise ConfigurationError("SMTP_HOST")

        self.sender = sender
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.username = username
        self.password = password
        self.timeout_seconds = timeout_seconds
        self.suppress_send = suppress_send
        self.logger = logger or get_logger(__name__)
        self.last_message: Optional[EmailMessage] = None

    def build_message(
        self,
        subject: str,
        body: str,
        recipient: str,
        attachment: Optional[Attachment] = None
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = recipient
        message.set_content(body)

        if attachment is not None:
            maintype, _, subtype = attachment.mime_type.partition("/")
            message.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return message

    def send(
        self,
        subject: str,
        body: str,
        recipient: str,
        attachment: Optional[Attachment] = None
    ) -> EmailMessage:
        """
        Send an email to a single recipient.

        Args:
            subject: Subject line
            body: Plain-text body
            recipient: Recipient address
            attachment: Optional file to attach

        Returns:
            The message that was sent (or would have been, if suppressed)

        Raises:
            EmailTransportError: If the SMTP server fails or rejects the message
        """
        message = self.build_message(subject, body, recipient, attachment)
        self.last_message = message

        if self.suppress_send:
            self.logger.info(f"Mail sending suppressed: '{subject}' to {recipient}")
            return message

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Failed to send '{subject}' to {recipient}: {e}")
            raise EmailTransportError(recipient, str(e)) from e

        self.logger.info(f"Sent '{subject}' to {recipient}")
        return message
