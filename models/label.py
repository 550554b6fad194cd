"""
Label data models.

LabelFormat selects how a label is delivered, LabelDocument holds what the
carrier returned, and DeliveryPreferences is the operator's last choice,
kept in the web session between scans.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, MutableMapping, Optional


# Session keys for the operator's last-used delivery settings
SESSION_EMAIL_KEY = "label_dispatch.email"
SESSION_FORMAT_KEY = "label_dispatch.email_format"


class LabelFormat(str, Enum):
    """Delivery format of a shipping label."""

    ZPL = "ZPL"
    """Printer markup, sent as the plain-text body of the email."""

    PDF = "PDF"
    """Rendered document, sent as a barcode.pdf attachment."""

    @property
    def content_type(self) -> str:
        """MIME type to request from the carrier."""
        if self is LabelFormat.ZPL:
            return "application/zpl"
        return "application/pdf"

    @classmethod
    def parse(cls, value: Optional[Any]) -> "LabelFormat":
        """
        Parse a submitted format value.

        Anything other than ZPL or PDF (including a missing value) falls
        back to ZPL.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized == cls.PDF.value:
                return cls.PDF
        return cls.ZPL


@dataclass(frozen=True)
class LabelDocument:
    """A rendered label as returned by the carrier."""

    content: bytes
    content_type: str

    @property
    def label_format(self) -> LabelFormat:
        if self.content_type == "application/zpl":
            return LabelFormat.ZPL
        return LabelFormat.PDF

    @property
    def text(self) -> str:
        """Label content decoded for use as an email body."""
        return self.content.decode("utf-8", errors="replace")


@dataclass
class DeliveryPreferences:
    """
    Recipient and format the operator used last.

    Stored in the session on each dispatch and read back when the scan form
    is built again.
    """

    recipient_email: str = ""
    label_format: LabelFormat = LabelFormat.ZPL

    def save(self, session: MutableMapping[str, Any]) -> None:
        """Write both values into the session."""
        session[SESSION_EMAIL_KEY] = self.recipient_email
        session[SESSION_FORMAT_KEY] = self.label_format.value

    @classmethod
    def load(cls, session: Mapping[str, Any]) -> "DeliveryPreferences":
        """Read preferences from the session, defaulting to empty / ZPL."""
        return cls(
            recipient_email=session.get(SESSION_EMAIL_KEY) or "",
            label_format=LabelFormat.parse(session.get(SESSION_FORMAT_KEY)),
        )
