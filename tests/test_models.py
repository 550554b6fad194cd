"""Unit tests for the label, form and packaging slip models."""

import json

import pytest

from models.form import FormDefinition
from models.label import (
    SESSION_EMAIL_KEY,
    SESSION_FORMAT_KEY,
    DeliveryPreferences,
    LabelDocument,
    LabelFormat,
)
from models.packaging_slip import PackagingSlip
from services.repositories import load_repositories


class TestLabelFormat:
    """Test format parsing and content types."""

    @pytest.mark.parametrize("value, expected", [
        ("ZPL", LabelFormat.ZPL),
        ("PDF", LabelFormat.PDF),
        (" pdf ", LabelFormat.PDF),
        (None, LabelFormat.ZPL),
        ("", LabelFormat.ZPL),
        ("PNG", LabelFormat.ZPL),
        (42, LabelFormat.ZPL),
        (LabelFormat.PDF, LabelFormat.PDF),
    ])
    def test_parse(self, value, expected):
        assert LabelFormat.parse(value) is expected

    def test_content_types(self):
        assert LabelFormat.ZPL.content_type == "application/zpl"
        assert LabelFormat.PDF.content_type == "application/pdf"

    def test_label_document_text(self):
        label = LabelDocument(b"^XA^FDHello^FS^XZ", "application/zpl")

        assert label.text == "^XA^FDHello^FS^XZ"
        assert label.label_format is LabelFormat.ZPL


class TestDeliveryPreferences:
    """Test session round trip of the operator's choices."""

    def test_load_defaults(self):
        preferences = DeliveryPreferences.load({})

        assert preferences.recipient_email == ""
        assert preferences.label_format is LabelFormat.ZPL

    def test_save_writes_session_keys(self):
        session = {}

        DeliveryPreferences("ops@example.com", LabelFormat.PDF).save(session)

        assert session == {SESSION_EMAIL_KEY: "ops@example.com", SESSION_FORMAT_KEY: "PDF"}
        assert DeliveryPreferences.load(session) == DeliveryPreferences("ops@example.com", LabelFormat.PDF)


class TestFormDefinition:
    """Test the mutable form definition."""

    def test_add_and_prefill(self):
        form = FormDefinition("scan")
        form.add("email", "email", label="Email")
        form.get("email").set_data("ops@example.com")

        assert form.has("email")
        assert form.to_dict() == {
            "name": "scan",
            "fields": [{
                "name": "email",
                "type": "email",
                "options": {"label": "Email"},
                "data": "ops@example.com",
            }],
        }

    def test_re_adding_replaces_in_place(self):
        form = FormDefinition("scan").add("a", "text").add("b", "text")
        form.add("a", "email")

        assert form.field_names == ["a", "b"]
        assert form.get("a").field_type == "email"

    def test_get_unknown_field_raises(self):
        with pytest.raises(KeyError):
            FormDefinition("scan").get("missing")


class TestRepositories:
    """Test seeding from a JSON data file."""

    def test_load_from_file(self, tmp_path):
        data_file = tmp_path / "shipping.json"
        data_file.write_text(json.dumps({
            "shipping_methods": [{"id": 1, "type": "carrier_dhl", "name": "DHL"}],
            "packaging_slips": [{"id": 10, "document_number": "PS-0010", "shipping_method_id": 1}],
        }))

        methods, slips = load_repositories(data_file)

        assert methods.get(1).type == "carrier_dhl"
        slip = slips.get(10)
        assert isinstance(slip, PackagingSlip)
        assert slip.carrier_shipment_id is None
        assert slips.get(10) is slip

    def test_missing_file_gives_empty_repositories(self, tmp_path):
        methods, slips = load_repositories(tmp_path / "missing.json")

        assert len(methods) == 0
        assert len(slips) == 0
