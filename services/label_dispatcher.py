"""
Shipment label dispatcher.

Reacts to a packaging slip being scanned as shipped: makes sure the carrier
knows the parcel, downloads the label and emails it to the label printer's
address. It also adds the recipient and format fields to the scan form,
pre-filled with what the operator used last.

Variants:
    A single DispatchPolicy decides how the dispatcher behaves.

    Configurable recipient (default)
    ├── Recipient and format come from the submitted form
    ├── Both are remembered in the session
    ├── Form builder fields are registered
    └── Carrier failures propagate (strict)

    Fixed recipient (DispatchPolicy.fixed(address))
    ├── Always sends a PDF to the configured address
    ├── Session and form are left alone
    └── Carrier failures are logged and dropped (lenient)

Flow for a matching shipping method:
    1. create_parcel() if the slip has no carrier shipment id yet
    2. fetch_label() in the requested format
    3. send the label by email (body for ZPL, attachment for PDF)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional, Protocol

from core.carrier_client import CarrierClient
from core.exceptions import CarrierError, DeliveryError, ShipmentCreationError
from core.mailer import Attachment, Mailer
from models.events import (
    EVENT_FORM_BUILDER,
    EVENT_STATUS_SHIPPED,
    FormBuilderEvent,
    PackagingSlipStatusChangedEvent,
)
from models.label import DeliveryPreferences, LabelDocument, LabelFormat
from models.packaging_slip import PackagingSlip, ShippingMethod
from logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_CARRIER_TYPE = "carrier_dhl"
DEFAULT_SUBJECT = "PDF DHL Barcode"
DEFAULT_PLACEHOLDER = "See attachment"
ATTACHMENT_FILENAME = "barcode.pdf"
LABEL_OK_STATUS = 200


class ShippingMethodLookup(Protocol):
    def get(self, method_id: int) -> Optional[ShippingMethod]:
        ...


@dataclass(frozen=True)
class DispatchPolicy:
    """How recipients are chosen and how carrier failures are handled."""

    fixed_recipient: Optional[str] = None
    """When set, every label goes to this address as a PDF."""

    strict_errors: bool = True
    """Propagate carrier failures instead of logging them."""

    @property
    def configurable_recipient(self) -> bool:
        return not self.fixed_recipient

    @classmethod
    def configurable(cls, strict_errors: bool = True) -> "DispatchPolicy":
        return cls(fixed_recipient=None, strict_errors=strict_errors)

    @classmethod
    def fixed(cls, recipient: str, strict_errors: bool = False) -> "DispatchPolicy":
        return cls(fixed_recipient=recipient, strict_errors=strict_errors)


class ShipmentLabelDispatcher:
    """
    Delivers carrier labels by email when a packaging slip ships.

    All collaborators are injected; the session is passed to each handler
    call so the dispatcher holds no per-request state.
    """

    def __init__(
        self,
        shipping_methods: ShippingMethodLookup,
        carrier_client: CarrierClient,
        mailer: Mailer,
        policy: Optional[DispatchPolicy] = None,
        carrier_type: str = DEFAULT_CARRIER_TYPE,
        subject: str = DEFAULT_SUBJECT,
        placeholder_body: str = DEFAULT_PLACEHOLDER
    ):
        self.shipping_methods = shipping_methods
        self.carrier_client = carrier_client
        self.mailer = mailer
        self.policy = policy or DispatchPolicy.configurable()
        self.carrier_type = carrier_type
        self.subject = subject
        self.placeholder_body = placeholder_body

    def subscribed_events(self) -> Dict[str, Callable[..., Any]]:
        """Registration table for the event dispatcher."""
        table: Dict[str, Callable[..., Any]] = {
            EVENT_STATUS_SHIPPED: self.handle_status_shipped,
        }
        if self.policy.configurable_recipient:
            table[EVENT_FORM_BUILDER] = self.handle_form_builder
        return table

    # =========================================================================
    # STATUS SHIPPED
    # =========================================================================

    def resolve_delivery(self, submitted_data: Mapping[str, Any]) -> Optional[DeliveryPreferences]:
        """
        Work out recipient and format for a dispatch.

        Returns None when the configurable variant has no recipient.
        """
        if not self.policy.configurable_recipient:
            return DeliveryPreferences(self.policy.fixed_recipient, LabelFormat.PDF)

        recipient = submitted_data.get("email")
        if isinstance(recipient, str):
            recipient = recipient.strip()
        if not recipient:
            return None
        return DeliveryPreferences(recipient, LabelFormat.parse(submitted_data.get("email_format")))

    def handle_status_shipped(
        self,
        event: PackagingSlipStatusChangedEvent,
        session: MutableMapping[str, Any]
    ) -> Optional[LabelDocument]:
        """
        Fetch the label for a shipped packaging slip and email it.

        Args:
            event: Shipped event with the slip and submitted form data
            session: Session of the current request

        Returns:
            The label that was sent, or None when nothing was sent

        Raises:
            DeliveryError: Carrier returned a non-OK label status (strict policy)
            ShipmentCreationError: Parcel could not be created (strict policy)
            EmailTransportError: The email could not be sent
        """
        slip = event.packaging_slip
        preferences = self.resolve_delivery(event.submitted_data or {})
        if preferences is None:
            logger.debug(f"No label recipient submitted for {slip.document_number}")
            return None

        if self.policy.configurable_recipient:
            preferences.save(session)

        shipping_method = self.shipping_methods.get(slip.shipping_method_id)
        if shipping_method is None or shipping_method.type != self.carrier_type:
            logger.debug(
                f"Packaging slip {slip.document_number} does not ship with {self.carrier_type}"
            )
            return None

        try:
            label = self._deliver(slip, preferences)
        except CarrierError as e:
            if self.policy.strict_errors:
                raise
            logger.error(f"Label for {slip.document_number} not delivered: {e}")
            return None

        event.delivered_label = label
        return label

    def _deliver(self, slip: PackagingSlip, preferences: DeliveryPreferences) -> LabelDocument:
        if not slip.carrier_shipment_id:
            self.carrier_client.create_parcel(slip)
            if not slip.carrier_shipment_id:
                raise ShipmentCreationError(slip.document_number)

        content_type = preferences.label_format.content_type
        status_code, content = self.carrier_client.fetch_label(slip.carrier_shipment_id, content_type)
        if status_code != LABEL_OK_STATUS:
            raise DeliveryError(preferences.recipient_email, slip.carrier_shipment_id, status_code)

        label = LabelDocument(content=content, content_type=content_type)
        if preferences.label_format is LabelFormat.ZPL:
            self.mailer.send(self.subject, label.text, preferences.recipient_email)
        else:
            attachment = Attachment(label.content, ATTACHMENT_FILENAME, "application/pdf")
            self.mailer.send(self.subject, self.placeholder_body, preferences.recipient_email, attachment)

        logger.info(
            f"Sent {preferences.label_format.value} label for {slip.document_number} "
            f"to {preferences.recipient_email}"
        )
        return label

    # =========================================================================
    # FORM BUILDER
    # =========================================================================

    def handle_form_builder(self, event: FormBuilderEvent, session: MutableMapping[str, Any]) -> None:
        """Add the recipient and format fields, pre-filled from the session."""
        preferences = DeliveryPreferences.load(session)

        event.form.add(
            "email",
            "email",
            label="Email",
            attr={"class": "tl_text"},
            row_attr={"class": "widget"},
        )
        event.form.get("email").set_data(preferences.recipient_email)

        event.form.add(
            "email_format",
            "choice",
            label="Email format",
            choices={f.value: f.value for f in LabelFormat},
            attr={"class": "tl_radio"},
            row_attr={"class": "tl_radio_container"},
            expanded=True,
            multiple=False,
        )
        event.form.get("email_format").set_data(preferences.label_format.value)

        event.add_widget("email")
        event.add_widget("email_format")
