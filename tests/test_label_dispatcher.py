"""
Unit tests for the shipment label dispatcher.

Carrier client and mailer are mocks; the session is a plain dict.
"""

import pytest
from unittest.mock import MagicMock

from core.exceptions import (
    CarrierUnavailableError,
    DeliveryError,
    EmailTransportError,
    ShipmentCreationError,
)
from core.mailer import Attachment
from models.events import (
    EVENT_FORM_BUILDER,
    EVENT_STATUS_SHIPPED,
    FormBuilderEvent,
    PackagingSlipStatusChangedEvent,
)
from models.form import FormDefinition
from models.label import SESSION_EMAIL_KEY, SESSION_FORMAT_KEY, LabelFormat
from models.packaging_slip import PackagingSlip, ShippingMethod
from services.label_dispatcher import DispatchPolicy, ShipmentLabelDispatcher
from services.repositories import ShippingMethodRepository


ZPL_LABEL = b"^XA^FO50,50^BCN,100,Y,N,N^FD3SABC123^FS^XZ"
PDF_LABEL = b"%PDF-1.4 fake label"


# Fixtures

@pytest.fixture
def shipping_methods():
    return ShippingMethodRepository([
        ShippingMethod(method_id=1, type="carrier_dhl", name="DHL"),
        ShippingMethod(method_id=2, type="flat", name="Pick up"),
    ])


@pytest.fixture
def carrier_client():
    """Carrier mock: create_parcel assigns an id, fetch_label answers 200."""
    client = MagicMock()

    def create_parcel(slip):
        slip.carrier_shipment_id = "parcel-1"
        return "parcel-1"

    client.create_parcel.side_effect = create_parcel
    client.fetch_label.return_value = (200, PDF_LABEL)
    return client


@pytest.fixture
def mailer():
    return MagicMock()


@pytest.fixture
def dispatcher(shipping_methods, carrier_client, mailer):
    return ShipmentLabelDispatcher(shipping_methods, carrier_client, mailer)


@pytest.fixture
def fixed_dispatcher(shipping_methods, carrier_client, mailer):
    return ShipmentLabelDispatcher(
        shipping_methods,
        carrier_client,
        mailer,
        policy=DispatchPolicy.fixed("printer@example.com"),
    )


@pytest.fixture
def slip():
    return PackagingSlip(slip_id=10, document_number="PS-0010", shipping_method_id=1)


def shipped_event(slip, **submitted):
    return PackagingSlipStatusChangedEvent(packaging_slip=slip, submitted_data=submitted)


# Tests for the configurable variant

class TestStatusShipped:
    """Test handle_status_shipped with a configurable recipient."""

    def test_pdf_scenario(self, dispatcher, slip, carrier_client, mailer):
        """PDF request creates the parcel, fetches a PDF and mails it as attachment."""
        session = {}
        event = shipped_event(slip, email="ops@example.com", email_format="PDF")

        label = dispatcher.handle_status_shipped(event, session)

        carrier_client.create_parcel.assert_called_once_with(slip)
        carrier_client.fetch_label.assert_called_once_with("parcel-1", "application/pdf")
        mailer.send.assert_called_once()
        subject, body, recipient, attachment = mailer.send.call_args.args
        assert subject == "PDF DHL Barcode"
        assert body == "See attachment"
        assert recipient == "ops@example.com"
        assert attachment == Attachment(PDF_LABEL, "barcode.pdf", "application/pdf")
        assert label.content == PDF_LABEL
        assert event.delivered_label is label

    def test_zpl_body_is_raw_label(self, dispatcher, slip, carrier_client, mailer):
        """ZPL labels become the email body and nothing is attached."""
        carrier_client.fetch_label.return_value = (200, ZPL_LABEL)

        dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com", email_format="ZPL"), {})

        carrier_client.fetch_label.assert_called_once_with("parcel-1", "application/zpl")
        mailer.send.assert_called_once_with("PDF DHL Barcode", ZPL_LABEL.decode(), "ops@example.com")

    def test_missing_format_defaults_to_zpl(self, dispatcher, slip, carrier_client, mailer):
        carrier_client.fetch_label.return_value = (200, ZPL_LABEL)

        label = dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {})

        assert label.label_format is LabelFormat.ZPL
        carrier_client.fetch_label.assert_called_once_with("parcel-1", "application/zpl")
        mailer.send.assert_called_once_with("PDF DHL Barcode", ZPL_LABEL.decode(), "ops@example.com")

    def test_unrecognized_format_defaults_to_zpl(self, dispatcher, slip, carrier_client, mailer):
        carrier_client.fetch_label.return_value = (200, ZPL_LABEL)
        session = {}

        dispatcher.handle_status_shipped(
            shipped_event(slip, email="ops@example.com", email_format="PNG"), session
        )

        carrier_client.fetch_label.assert_called_once_with("parcel-1", "application/zpl")
        assert len(mailer.send.call_args.args) == 3
        assert session[SESSION_FORMAT_KEY] == "ZPL"

    @pytest.mark.parametrize("submitted", [{}, {"email": ""}, {"email": "   "}, {"email_format": "PDF"}])
    def test_no_recipient_is_noop(self, dispatcher, slip, carrier_client, mailer, submitted):
        """Without an email address nothing is called and the session is untouched."""
        session = {}

        result = dispatcher.handle_status_shipped(shipped_event(slip, **submitted), session)

        assert result is None
        carrier_client.create_parcel.assert_not_called()
        carrier_client.fetch_label.assert_not_called()
        mailer.send.assert_not_called()
        assert session == {}

    def test_other_carrier_is_untouched(self, dispatcher, carrier_client, mailer):
        slip = PackagingSlip(slip_id=11, document_number="PS-0011", shipping_method_id=2)

        result = dispatcher.handle_status_shipped(
            shipped_event(slip, email="ops@example.com", email_format="PDF"), {}
        )

        assert result is None
        assert slip.carrier_shipment_id is None
        carrier_client.create_parcel.assert_not_called()
        carrier_client.fetch_label.assert_not_called()
        mailer.send.assert_not_called()

    def test_unknown_shipping_method_is_untouched(self, dispatcher, carrier_client, mailer):
        slip = PackagingSlip(slip_id=12, document_number="PS-0012", shipping_method_id=99)

        assert dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {}) is None
        carrier_client.fetch_label.assert_not_called()
        mailer.send.assert_not_called()

    def test_existing_carrier_shipment_skips_create(self, dispatcher, carrier_client):
        slip = PackagingSlip(
            slip_id=10, document_number="PS-0010", shipping_method_id=1, carrier_shipment_id="known-7"
        )

        dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com", email_format="PDF"), {})

        carrier_client.create_parcel.assert_not_called()
        carrier_client.fetch_label.assert_called_once_with("known-7", "application/pdf")

    def test_session_remembers_recipient_and_format(self, dispatcher, slip):
        session = {}

        dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com", email_format="PDF"), session)

        assert session[SESSION_EMAIL_KEY] == "ops@example.com"
        assert session[SESSION_FORMAT_KEY] == "PDF"

    def test_non_ok_label_raises_delivery_error(self, dispatcher, slip, carrier_client, mailer):
        carrier_client.fetch_label.return_value = (404, b"not found")

        with pytest.raises(DeliveryError) as exc_info:
            dispatcher.handle_status_shipped(
                shipped_event(slip, email="ops@example.com", email_format="PDF"), {}
            )

        assert exc_info.value.status_code == 404
        assert exc_info.value.recipient == "ops@example.com"
        assert "Could not send barcode" in str(exc_info.value)
        carrier_client.create_parcel.assert_called_once()
        mailer.send.assert_not_called()

    def test_create_parcel_failure_propagates(self, dispatcher, slip, carrier_client, mailer):
        carrier_client.create_parcel.side_effect = ShipmentCreationError("PS-0010", status_code=400)

        with pytest.raises(ShipmentCreationError):
            dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {})

        carrier_client.fetch_label.assert_not_called()
        mailer.send.assert_not_called()

    def test_create_parcel_without_id_raises(self, dispatcher, slip, carrier_client):
        carrier_client.create_parcel.side_effect = None
        carrier_client.create_parcel.return_value = None

        with pytest.raises(ShipmentCreationError):
            dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {})

        carrier_client.fetch_label.assert_not_called()

    def test_email_failure_propagates(self, dispatcher, slip, mailer):
        mailer.send.side_effect = EmailTransportError("ops@example.com", "connection refused")

        with pytest.raises(EmailTransportError):
            dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {})

    def test_lenient_policy_logs_delivery_error(self, shipping_methods, carrier_client, mailer, slip):
        dispatcher = ShipmentLabelDispatcher(
            shipping_methods, carrier_client, mailer, policy=DispatchPolicy.configurable(strict_errors=False)
        )
        carrier_client.fetch_label.return_value = (500, b"")

        result = dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {})

        assert result is None
        mailer.send.assert_not_called()


# Tests for the fixed-recipient variant

class TestFixedRecipient:
    """Test handle_status_shipped with a fixed recipient."""

    def test_always_sends_pdf_to_fixed_address(self, fixed_dispatcher, slip, carrier_client, mailer):
        session = {}

        fixed_dispatcher.handle_status_shipped(shipped_event(slip, email_format="ZPL"), session)

        carrier_client.fetch_label.assert_called_once_with("parcel-1", "application/pdf")
        subject, body, recipient, attachment = mailer.send.call_args.args
        assert recipient == "printer@example.com"
        assert body == "See attachment"
        assert attachment.filename == "barcode.pdf"
        assert session == {}

    def test_submitted_email_is_ignored(self, fixed_dispatcher, slip, mailer):
        fixed_dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com"), {})

        assert mailer.send.call_args.args[2] == "printer@example.com"

    def test_delivery_error_is_dropped(self, fixed_dispatcher, slip, carrier_client, mailer):
        carrier_client.fetch_label.return_value = (401, b"")

        assert fixed_dispatcher.handle_status_shipped(shipped_event(slip), {}) is None
        mailer.send.assert_not_called()

    def test_unreachable_carrier_is_dropped(self, fixed_dispatcher, slip, carrier_client, mailer):
        carrier_client.create_parcel.side_effect = CarrierUnavailableError("https://carrier.test/parcels", "timeout")

        assert fixed_dispatcher.handle_status_shipped(shipped_event(slip), {}) is None
        carrier_client.fetch_label.assert_not_called()

    def test_strict_fixed_policy_raises(self, shipping_methods, carrier_client, mailer, slip):
        dispatcher = ShipmentLabelDispatcher(
            shipping_methods,
            carrier_client,
            mailer,
            policy=DispatchPolicy.fixed("printer@example.com", strict_errors=True),
        )
        carrier_client.fetch_label.return_value = (401, b"")

        with pytest.raises(DeliveryError):
            dispatcher.handle_status_shipped(shipped_event(slip), {})


# Tests for the form builder

class TestFormBuilder:
    """Test handle_form_builder."""

    def test_defaults_without_session(self, dispatcher):
        event = FormBuilderEvent(form=FormDefinition("scan"))

        dispatcher.handle_form_builder(event, {})

        assert event.form.get("email").data == ""
        assert event.form.get("email").field_type == "email"
        email_format = event.form.get("email_format")
        assert email_format.field_type == "choice"
        assert email_format.data == "ZPL"
        assert email_format.options["choices"] == {"ZPL": "ZPL", "PDF": "PDF"}
        assert email_format.options["expanded"] is True
        assert email_format.options["multiple"] is False
        assert event.additional_widgets == ["email", "email_format"]

    def test_prefills_after_dispatch(self, dispatcher, slip):
        session = {}
        dispatcher.handle_status_shipped(shipped_event(slip, email="ops@example.com", email_format="PDF"), session)

        event = FormBuilderEvent(form=FormDefinition("scan"))
        dispatcher.handle_form_builder(event, session)

        assert event.form.get("email").data == "ops@example.com"
        assert event.form.get("email_format").data == "PDF"

    def test_idempotent(self, dispatcher):
        event = FormBuilderEvent(form=FormDefinition("scan"))

        dispatcher.handle_form_builder(event, {})
        dispatcher.handle_form_builder(event, {})

        assert event.additional_widgets == ["email", "email_format"]
        assert event.form.field_names == ["email", "email_format"]


class TestSubscribedEvents:
    """Test the registration table."""

    def test_configurable_registers_both(self, dispatcher):
        table = dispatcher.subscribed_events()

        assert table[EVENT_STATUS_SHIPPED] == dispatcher.handle_status_shipped
        assert table[EVENT_FORM_BUILDER] == dispatcher.handle_form_builder

    def test_fixed_registers_shipped_only(self, fixed_dispatcher):
        assert list(fixed_dispatcher.subscribed_events()) == [EVENT_STATUS_SHIPPED]
